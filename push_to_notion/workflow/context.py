"""
Interaction Context

State carried across the round trips of one shortcut interaction. Slack
gives no session affinity between the shortcut, the typeahead queries and
the submission, so everything later steps need travels inside the modal's
`private_metadata` as compact JSON.
"""

from __future__ import annotations

import json

import structlog
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

logger = structlog.get_logger()

# Slack rejects views whose private_metadata is longer than this
MAX_PRIVATE_METADATA = 3000


class InteractionContext(BaseModel):
    """Opaque, immutable context of one interaction."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    channel_id: str | None = Field(default=None, alias="channel")
    message_ts: str | None = Field(default=None, alias="ts")
    message_text: str = Field(default="", alias="messageText")
    selected_database_id: str | None = Field(default=None, alias="selectedDb")

    def encode(self) -> str:
        """Serialize for `private_metadata`, clipping the message text to fit."""
        encoded = self._dumps(self.message_text)
        text = self.message_text
        while len(encoded) > MAX_PRIVATE_METADATA and text:
            overflow = len(encoded) - MAX_PRIVATE_METADATA
            text = text[: max(0, len(text) - overflow)]
            encoded = self._dumps(text)
        if text != self.message_text:
            logger.info(
                "Clipped message text to fit private_metadata",
                original_length=len(self.message_text),
                clipped_length=len(text),
            )
        return encoded

    @classmethod
    def decode(cls, metadata: str | None) -> "InteractionContext":
        if not metadata:
            return cls()
        try:
            return cls.model_validate(json.loads(metadata))
        except (ValueError, PydanticValidationError) as e:
            logger.warning("Unreadable interaction context, starting empty", error=str(e))
            return cls()

    def with_selected_database(self, database_id: str | None) -> "InteractionContext":
        return self.model_copy(update={"selected_database_id": database_id})

    def _dumps(self, message_text: str) -> str:
        payload = self.model_dump(by_alias=True)
        payload["messageText"] = message_text
        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
