"""EnvelopeSerializer — JSON wire format for request and response envelopes."""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from .exceptions import MalformedEnvelopeError, MessagingSerializationError
from .models import ObpRequest, ObpResponse


def describe_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


class EnvelopeSerializer:
    """Decode request bytes and encode response envelopes.

    Decoding never fills in defaults for missing required fields: anything
    that does not validate raises ``MalformedEnvelopeError``, carrying the
    ``messageId`` when it can still be read from the raw JSON.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    @property
    def encoding(self) -> str:
        return self._encoding

    def _load(self, raw: bytes | str) -> Any:
        text = raw.decode(self._encoding) if isinstance(raw, bytes) else raw
        return json.loads(text)

    def peek_message_id(self, raw: bytes | str) -> str | None:
        """Best-effort read of ``messageId`` from bytes that may not validate."""
        try:
            data = self._load(raw)
        except (UnicodeDecodeError, json.JSONDecodeError):
            return None
        if not isinstance(data, dict):
            return None
        message_id = data.get("messageId")
        if isinstance(message_id, str) and message_id:
            return message_id
        return None

    def decode_request(self, raw: bytes | str) -> ObpRequest:
        """Decode wire bytes to an ``ObpRequest``."""
        try:
            data = self._load(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedEnvelopeError(f"Invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise MalformedEnvelopeError(
                f"Envelope must be a JSON object, got {type(data).__name__}"
            )
        try:
            return ObpRequest.model_validate(data)
        except ValidationError as e:
            raise MalformedEnvelopeError(
                describe_validation_error(e), message_id=self.peek_message_id(raw)
            ) from e

    def encode_response(self, response: ObpResponse) -> bytes:
        """Encode a response envelope to JSON bytes."""
        try:
            return json.dumps(response.to_wire()).encode(self._encoding)
        except (TypeError, ValueError) as e:
            raise MessagingSerializationError(str(e)) from e

    def decode_response(self, raw: bytes | str) -> ObpResponse:
        """Decode a response envelope (used by test clients and tooling)."""
        try:
            return ObpResponse.model_validate(self._load(raw))
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            raise MessagingSerializationError(str(e)) from e

    def encode_request(self, request: ObpRequest) -> bytes:
        """Encode a request envelope (used by test clients and tooling)."""
        data = request.model_dump(mode="json", by_alias=True)
        return json.dumps(data).encode(self._encoding)
