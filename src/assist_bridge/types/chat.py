"""Request and response value objects shared by every provider."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Optional, Sequence

from assist_bridge.registry import Provider
from assist_bridge.types.search import SearchInfo, SearchResult


class Role(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ResponseType(StrEnum):
    TEXT = "text"
    FILE_LIST = "file_list"
    ANALYSIS = "analysis"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class ImageAttachment:
    """An image sent along with a message. Only mime_type and base64 reach the wire."""

    file_name: str
    base64: str
    mime_type: str

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64}"


@dataclass(frozen=True, slots=True)
class ChatMessage:
    """One turn of caller-owned history, oldest first."""

    role: Role
    content: str
    images: tuple[ImageAttachment, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatMessage":
        images = tuple(
            img if isinstance(img, ImageAttachment) else ImageAttachment(
                file_name=img.get("file_name") or img.get("fileName", ""),
                base64=img["base64"],
                mime_type=img.get("mime_type") or img.get("mimeType", ""),
            )
            for img in data.get("images") or ()
        )
        return cls(role=Role(data["role"]), content=data.get("content") or "", images=images)


@dataclass(frozen=True, slots=True)
class ChatRequest:
    """Everything one chat() call needs; immutable for the duration of the call."""

    message: str
    history: tuple[ChatMessage, ...] = ()
    images: tuple[ImageAttachment, ...] = ()

    @classmethod
    def build(
        cls,
        message: str,
        history: Sequence[ChatMessage | dict[str, Any]] = (),
        images: Optional[Sequence[ImageAttachment]] = None,
    ) -> "ChatRequest":
        return cls(
            message=message,
            history=tuple(
                m if isinstance(m, ChatMessage) else ChatMessage.from_dict(m) for m in history
            ),
            images=tuple(images or ()),
        )


@dataclass
class ChatResponse:
    """Unified response object for all providers."""

    text: str
    type: ResponseType = ResponseType.TEXT
    data: list[SearchResult] | None = None
    provider: Provider | None = None
    model: str | None = None
    search_info: SearchInfo | None = None

    @property
    def is_error(self) -> bool:
        return self.type == ResponseType.ERROR

    def raise_for_error(self) -> None:
        if self.is_error:
            raise RuntimeError(self.text)
