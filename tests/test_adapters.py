"""Tests for the pure request/response adapters and tool schema dialects."""

import json

import pytest
from anthropic.types import Message
from openai.types.chat import ChatCompletion

from assist_bridge._exceptions import ToolArgumentsError
from assist_bridge.adapters import (
    AnthropicRequestAdapter,
    GeminiRequestAdapter,
    OpenAIRequestAdapter,
)
from assist_bridge.tools import anthropic_tools, gemini_tools, openai_tools
from assist_bridge.types import (
    ChatMessage,
    ChatRequest,
    ImageAttachment,
    ResponseType,
    Role,
    SearchInfo,
    ToolInvocation,
    ToolResult,
)

from fakes import anthropic_message, gemini_response, openai_completion, openai_tool_call

IMAGE = ImageAttachment(file_name="shot.png", base64="aGVsbG8=", mime_type="image/png")

REQUEST = ChatRequest.build(
    "what is in this screenshot?",
    history=[
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
    ],
    images=[IMAGE],
)

RESULT = ToolResult(
    type=ResponseType.FILE_LIST,
    data=[],
    search_info=SearchInfo(query="resume", total_results=0),
)


class TestToolDialects:
    def test_openai_function_schema(self):
        tools = openai_tools()
        assert [t["function"]["name"] for t in tools] == ["findFile", "searchContent"]
        assert tools[0]["type"] == "function"
        assert tools[0]["function"]["parameters"]["required"] == ["query"]

    def test_anthropic_input_schema(self):
        tools = anthropic_tools()
        assert tools[0]["input_schema"]["properties"]["query"]["type"] == "string"

    def test_gemini_uppercase_types(self):
        [declarations] = gemini_tools()
        params = declarations["functionDeclarations"][0]["parameters"]
        assert params["type"] == "OBJECT"
        assert params["properties"]["search_path"]["type"] == "STRING"
        # the canonical schema is left untouched
        assert openai_tools()[0]["function"]["parameters"]["type"] == "object"


class TestOpenAIRequestAdapter:
    def test_messages_order_and_images(self):
        messages = OpenAIRequestAdapter().build_messages(REQUEST, "SYSTEM")

        assert [m["role"] for m in messages] == ["system", "system", "user", "assistant", "user"]
        assert messages[0]["content"] == "SYSTEM"
        current = messages[-1]["content"]
        assert current[0] == {"type": "text", "text": "what is in this screenshot?"}
        assert current[1]["image_url"] == {
            "url": "data:image/png;base64,aGVsbG8=",
            "detail": "high",
        }

    def test_custom_endpoints_omit_detail(self):
        messages = OpenAIRequestAdapter(image_detail=None).build_messages(REQUEST, "S")
        assert "detail" not in messages[-1]["content"][1]["image_url"]

    def test_history_images_have_no_detail(self):
        request = ChatRequest(
            message="and now?",
            history=(ChatMessage(Role.USER, "look", (IMAGE,)),),
        )
        messages = OpenAIRequestAdapter().build_messages(request, "S")
        assert messages[1]["content"][1]["image_url"] == {"url": IMAGE.data_url}
        assert messages[2] == {"role": "user", "content": "and now?"}

    def test_params_with_tools(self):
        params = OpenAIRequestAdapter().build_params(
            "gpt-4o-mini", temperature=0.7, max_tokens=4096, with_tools=True
        )
        assert params["max_tokens"] == 4096
        assert params["tool_choice"] == "auto"
        assert len(params["tools"]) == 2

    @pytest.mark.parametrize("model", ["gpt-5", "o1-mini", "o3", "o4-mini"])
    def test_max_completion_tokens_models(self, model):
        params = OpenAIRequestAdapter().build_params(model, temperature=1, max_tokens=10)
        assert params["max_completion_tokens"] == 10
        assert "max_tokens" not in params

    def test_json_mode(self):
        params = OpenAIRequestAdapter().build_params("gpt-4o", temperature=0.3, max_tokens=5, json_mode=True)
        assert params["response_format"] == {"type": "json_object"}
        assert "tools" not in params

    def test_only_first_tool_call_is_honored(self):
        raw = ChatCompletion.model_validate(
            openai_completion(
                tool_calls=[
                    openai_tool_call("findFile", {"query": "resume"}, "call_a"),
                    openai_tool_call("searchContent", {"query": "x"}, "call_b"),
                ]
            )
        )
        adapter = OpenAIRequestAdapter()

        invocation = adapter.parse_tool_call(raw)
        assistant = adapter.assistant_message_from(raw, invocation)

        assert invocation == ToolInvocation("findFile", {"query": "resume"}, "call_a")
        assert assistant["content"] is None
        assert [tc["id"] for tc in assistant["tool_calls"]] == ["call_a"]

    def test_invalid_arguments_raise(self):
        raw = ChatCompletion.model_validate(
            openai_completion(tool_calls=[openai_tool_call("findFile", "{not json")])
        )
        with pytest.raises(ToolArgumentsError):
            OpenAIRequestAdapter().parse_tool_call(raw)

    def test_empty_arguments_become_empty_dict(self):
        raw = ChatCompletion.model_validate(
            openai_completion(tool_calls=[openai_tool_call("findFile", "")])
        )
        assert OpenAIRequestAdapter().parse_tool_call(raw).arguments == {}

    def test_no_tool_call(self):
        raw = ChatCompletion.model_validate(openai_completion("Hi there"))
        adapter = OpenAIRequestAdapter()
        assert adapter.parse_tool_call(raw) is None
        assert adapter.text_from(raw) == "Hi there"

    def test_tool_result_message(self):
        message = OpenAIRequestAdapter().tool_result_message(
            ToolInvocation("findFile", {}, "call_1"), RESULT
        )
        assert message["role"] == "tool"
        assert message["tool_call_id"] == "call_1"
        assert json.loads(message["content"])["type"] == "file_list"


class TestGeminiRequestAdapter:
    def test_contents_roles_and_inline_data(self):
        system, contents = GeminiRequestAdapter().build_contents(REQUEST, "SYSTEM")

        assert system == "SYSTEM\n\nBe brief."
        assert [c["role"] for c in contents] == ["user", "model", "user"]
        assert contents[-1]["parts"][1] == {
            "inlineData": {"mimeType": "image/png", "data": "aGVsbG8="}
        }

    def test_body_generation_config(self):
        adapter = GeminiRequestAdapter()
        body = adapter.build_body("S", [], temperature=0.7, max_tokens=4096, with_tools=True)

        assert body["generationConfig"] == {"temperature": 0.7, "maxOutputTokens": 4096}
        assert body["systemInstruction"] == {"parts": [{"text": "S"}]}
        assert "functionDeclarations" in body["tools"][0]
        assert "toolConfig" not in body

    def test_summary_body_disables_function_calling(self):
        body = GeminiRequestAdapter().build_body("S", [], temperature=0.7, max_tokens=1024, disable_tools=True)
        assert body["toolConfig"] == {"functionCallingConfig": {"mode": "NONE"}}

    def test_json_mode_body(self):
        body = GeminiRequestAdapter().build_body("", [], temperature=0.3, max_tokens=2048, json_mode=True)
        assert body["generationConfig"]["responseMimeType"] == "application/json"
        assert "systemInstruction" not in body
        assert "tools" not in body

    def test_first_function_call_and_model_turn(self):
        raw = gemini_response(
            {"text": "Let me look."},
            {"functionCall": {"name": "findFile", "args": {"query": "resume"}}, "thoughtSignature": "sig"},
            {"functionCall": {"name": "searchContent", "args": {"query": "cv"}}},
        )
        adapter = GeminiRequestAdapter()

        invocation = adapter.parse_tool_call(raw)
        model_turn = adapter.assistant_message_from(raw, invocation)

        assert invocation.name == "findFile"
        assert invocation.arguments == {"query": "resume"}
        assert model_turn["role"] == "model"
        assert len(model_turn["parts"]) == 2
        assert model_turn["parts"][1]["thoughtSignature"] == "sig"

    def test_function_response(self):
        message = GeminiRequestAdapter().tool_result_message(ToolInvocation("findFile", {}), RESULT)
        part = message["parts"][0]["functionResponse"]
        assert part["name"] == "findFile"
        assert part["response"]["searchInfo"]["query"] == "resume"

    def test_text_and_json(self):
        adapter = GeminiRequestAdapter()
        assert adapter.text_from(gemini_response({"text": "a"}, {"text": "b"})) == "ab"
        assert adapter.json_from(gemini_response({"text": '{"scores": []}'})) == {"scores": []}
        assert adapter.text_from({"candidates": []}) == ""


class TestAnthropicRequestAdapter:
    def test_system_folding_and_image_blocks(self):
        system, messages = AnthropicRequestAdapter().build_messages(REQUEST, "SYSTEM")

        assert system == "SYSTEM\n\nBe brief."
        assert [m["role"] for m in messages] == ["user", "assistant", "user"]
        assert messages[-1]["content"][0] == {
            "type": "image",
            "source": {"type": "base64", "media_type": "image/png", "data": "aGVsbG8="},
        }
        assert messages[-1]["content"][-1] == {"type": "text", "text": "what is in this screenshot?"}

    def test_params(self):
        params = AnthropicRequestAdapter().build_params(
            "claude-3-5-sonnet-20241022", "S", [], temperature=0.7, max_tokens=4096, with_tools=True
        )
        assert params["max_tokens"] == 4096
        assert params["system"] == "S"
        assert params["tools"][0]["name"] == "findFile"
        assert "tool_choice" not in params

    def test_summary_params_keep_tools_but_forbid_use(self):
        params = AnthropicRequestAdapter().build_params(
            "m", "S", [], temperature=0.7, max_tokens=1024, disable_tools=True
        )
        assert params["tool_choice"] == {"type": "none"}
        assert len(params["tools"]) == 2

    def test_tool_use_round_trip(self):
        raw = Message.model_validate(
            anthropic_message(
                {"type": "text", "text": "Searching."},
                {"type": "tool_use", "id": "toolu_1", "name": "findFile", "input": {"query": "resume"}},
                {"type": "tool_use", "id": "toolu_2", "name": "searchContent", "input": {"query": "x"}},
            )
        )
        adapter = AnthropicRequestAdapter()

        invocation = adapter.parse_tool_call(raw)
        assistant = adapter.assistant_message_from(raw, invocation)
        result = adapter.tool_result_message(invocation, RESULT)

        assert invocation == ToolInvocation("findFile", {"query": "resume"}, "toolu_1")
        assert [b["type"] for b in assistant["content"]] == ["text", "tool_use"]
        assert result["content"][0]["tool_use_id"] == "toolu_1"

    def test_json_extracted_from_prose(self):
        raw = Message.model_validate(
            anthropic_message(
                {"type": "text", "text": 'Here you go:\n{"scores": [{"index": 0, "score": 90}]}\nThanks'}
            )
        )
        assert AnthropicRequestAdapter().json_from(raw) == {"scores": [{"index": 0, "score": 90}]}

    def test_json_missing_raises(self):
        raw = Message.model_validate(anthropic_message({"type": "text", "text": "no json"}))
        with pytest.raises(ValueError):
            AnthropicRequestAdapter().json_from(raw)
