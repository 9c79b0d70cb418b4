"""Frames exchanged on the `/ws` chat channel.

Every frame is one UTF-8 JSON object carrying a string `type`. Inbound
`auth` and `message` frames are validated strictly (no coercion of
`"5"` into `5`); any other inbound type is accepted and ignored.
"""
import json
from typing import Any, Dict, Literal, Optional

from pydantic import Field, StrictInt, StrictStr, ValidationError, model_validator

from socialhub.schemas.common import CamelModel


INVALID_FORMAT = "Invalid message format"


class FrameError(ValueError):
    """Raised for a frame that must be answered with an `error` frame."""


class AuthFrame(CamelModel):

    type: Literal["auth"]
    user_id: Optional[StrictInt] = None
    token: Optional[StrictStr] = None

    @model_validator(mode="after")
    def _has_identity(self):
        if self.user_id is None and self.token is None:
            raise ValueError("userId is required")
        return self


class MessageFrame(CamelModel):

    type: Literal["message"]
    conversation_id: StrictInt
    content: StrictStr = Field(max_length=5000)
    media_url: Optional[StrictStr] = None
    media_type: Optional[StrictStr] = Field(default=None, max_length=50)


def decode_frame(raw: str) -> Dict[str, Any]:
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        raise FrameError(INVALID_FORMAT)
    if not isinstance(data, dict) or not isinstance(data.get("type"), str):
        raise FrameError(INVALID_FORMAT)
    return data


def _describe(exc: ValidationError) -> str:
    first = exc.errors()[0]
    where = ".".join(str(part) for part in first.get("loc", ()))
    return f"{INVALID_FORMAT}: {where + ': ' if where else ''}{first.get('msg', 'invalid')}"


def validate_auth(data: Dict[str, Any]) -> AuthFrame:
    try:
        return AuthFrame.model_validate(data)
    except ValidationError as exc:
        raise FrameError(_describe(exc))


def validate_message(data: Dict[str, Any]) -> MessageFrame:
    try:
        return MessageFrame.model_validate(data)
    except ValidationError as exc:
        raise FrameError(_describe(exc))


def encode(frame: Dict[str, Any]) -> str:
    return json.dumps(frame, ensure_ascii=False)


def auth_ok() -> Dict[str, Any]:
    return {"type": "auth", "success": True}


def message_event(message: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "message", "message": message}


def error_frame(text: str) -> Dict[str, Any]:
    return {"type": "error", "message": text}
