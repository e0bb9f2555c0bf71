"""Tests for the provider catalog, configuration and credential stores."""

import logging

import pytest

from assist_bridge._exceptions import ConfigurationError
from assist_bridge.activity import ActivityStatus, LoggingActivityLog, MemoryActivityLog
from assist_bridge.config import BridgeConfig
from assist_bridge.credentials import EnvCredentialStore, StaticCredentialStore
from assist_bridge.prompts import system_prompt
from assist_bridge.registry import (
    Provider,
    display_name,
    get_provider_info,
    resolve_model,
    supports_vision,
)


class TestRegistry:
    def test_catalog(self):
        info = get_provider_info("anthropic")
        assert info.name == "Anthropic"
        assert info.default_model == "claude-3-5-sonnet-20241022"
        assert display_name(Provider.GOOGLE) == "Google"

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unsupported provider: mistral"):
            get_provider_info("mistral")

    @pytest.mark.parametrize(
        "model,expected",
        [
            ("gpt-4o", True),
            ("GPT-4o-2024-08-06", True),
            ("gemini-1.5-pro-latest", True),
            ("gpt-3.5-turbo", False),
            ("llama3", False),
        ],
    )
    def test_supports_vision(self, model, expected):
        assert supports_vision(model) is expected

    def test_resolve_model_precedence(self):
        config = BridgeConfig(custom_model="my-model")
        assert resolve_model(Provider.OPENAI, "gpt-4o", config) == "gpt-4o"
        assert resolve_model(Provider.OPENAI, None, config) == "my-model"
        assert resolve_model(Provider.OPENAI, None, BridgeConfig()) == "gpt-4o-mini"
        assert resolve_model(Provider.CUSTOM, None, BridgeConfig()) == "default"


class TestSystemPrompt:
    def test_identity_and_vision_clause(self):
        prompt = system_prompt(Provider.OPENAI, "gpt-4o")
        assert 'I am Skhoot, powered by openai (gpt-4o)' in prompt
        assert "VISION CAPABILITIES" in prompt

    def test_no_vision_clause_for_text_models(self):
        prompt = system_prompt(Provider.CUSTOM, "llama3", assistant_name="Ada")
        assert "VISION CAPABILITIES" not in prompt
        assert 'Your name is "Ada"' in prompt


class TestBridgeConfig:
    def test_defaults(self):
        config = BridgeConfig()
        assert config.temperature == 0.7
        assert config.max_tokens == 4096
        assert config.summary_max_tokens == 1024
        assert config.scoring_temperature == 0.3
        assert config.max_retries == 0
        assert config.timeout is None

    def test_from_env(self):
        config = BridgeConfig.from_env(
            {
                "ASSIST_CUSTOM_ENDPOINT": "http://localhost:11434/v1",
                "ASSIST_TEMPERATURE": "0.2",
                "ASSIST_MAX_TOKENS": "512",
                "ASSIST_TIMEOUT": "30",
                "ASSIST_ASSISTANT_NAME": "Ada",
                "ASSIST_SEARCH_URL": "",
            }
        )
        assert config.custom_endpoint == "http://localhost:11434/v1"
        assert config.temperature == 0.2
        assert config.max_tokens == 512
        assert config.timeout == 30.0
        assert config.assistant_name == "Ada"
        assert config.search_url == "http://localhost:3001"

    def test_base_urls(self):
        config = BridgeConfig(
            custom_endpoint="http://x/v1", base_urls={Provider.OPENAI: "http://proxy/v1"}
        )
        assert config.base_url_for(Provider.OPENAI) == "http://proxy/v1"
        assert config.base_url_for(Provider.ANTHROPIC) == "https://api.anthropic.com"
        assert config.base_url_for(Provider.CUSTOM) == "http://x/v1"

    def test_replace_returns_copy(self):
        config = BridgeConfig()
        warmer = config.replace(temperature=1.0)
        assert warmer.temperature == 1.0
        assert config.temperature == 0.7


class TestEnvCredentialStore:
    ENV = {
        "ASSIST_PROVIDER": "Google",
        "GOOGLE_API_KEY": "g-key",
        "GOOGLE_MODEL": "gemini-1.5-pro",
    }

    def test_active_provider_and_key(self):
        store = EnvCredentialStore(self.ENV)
        assert store.get_active_provider() == Provider.GOOGLE
        assert store.has_key(Provider.GOOGLE)
        assert store.load_key(Provider.GOOGLE) == "g-key"
        assert store.load_model(Provider.GOOGLE) == "gemini-1.5-pro"

    def test_gemini_key_preferred(self):
        store = EnvCredentialStore({**self.ENV, "GEMINI_API_KEY": "gem"})
        assert store.load_key(Provider.GOOGLE) == "gem"

    def test_missing_key(self):
        store = EnvCredentialStore({})
        assert store.get_active_provider() is None
        assert not store.has_key(Provider.OPENAI)
        with pytest.raises(ConfigurationError, match="OPENAI_API_KEY missing"):
            store.load_key(Provider.OPENAI)

    def test_invalid_provider(self):
        with pytest.raises(ConfigurationError):
            EnvCredentialStore({"ASSIST_PROVIDER": "mistral"}).get_active_provider()


def test_static_store_ignores_empty_keys():
    store = StaticCredentialStore({Provider.OPENAI: ""}, active="openai")
    assert store.get_active_provider() == Provider.OPENAI
    assert not store.has_key(Provider.OPENAI)


class TestActivityLog:
    def test_memory_log_is_bounded_and_newest_first(self):
        log = MemoryActivityLog(max_records=2)
        seen = []
        unsubscribe = log.subscribe(seen.append)

        log.record("File Search", "a", "1 file")
        log.record("File Search", "b", "2 files")
        unsubscribe()
        log.record("Content Search", "c", "failed", ActivityStatus.ERROR)

        assert [r.summary for r in log.records] == ["c", "b"]
        assert log.records[0].status == ActivityStatus.ERROR
        assert len(seen) == 2

    def test_logging_log_levels(self, caplog):
        log = LoggingActivityLog()
        with caplog.at_level(logging.INFO, logger="assist_bridge.activity"):
            log.record("File Search", "resume", "Found 2 files")
            log.record("File Search", "resume", "Search failed", ActivityStatus.ERROR)

        levels = [r.levelno for r in caplog.records]
        assert levels == [logging.INFO, logging.WARNING]

    def test_failing_listener_does_not_stop_others(self):
        log = MemoryActivityLog()
        seen = []

        def broken(records):
            raise RuntimeError("listener boom")

        log.subscribe(broken)
        log.subscribe(seen.append)

        log.record("File Search", "a", "1 file")

        assert len(seen) == 1
        assert log.records[0].summary == "a"


def test_error_helpers_are_exported():
    from assist_bridge import _exceptions

    assert {"http_status_error", "error_message_from_body"} <= set(_exceptions.__all__)
