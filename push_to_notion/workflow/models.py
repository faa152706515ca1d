"""Value types flowing through the push-to-Notion workflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from push_to_notion.connectors.notion.blocks import relation_property_value, title_property_value


@dataclass(frozen=True)
class ShortcutInvocation:
    """A message shortcut press. Consumed once, never stored."""

    channel_id: str | None
    message_ts: str | None
    message_text: str
    trigger_id: str


@dataclass(frozen=True)
class FormState:
    """Values of a submitted form."""

    database_id: str | None = None
    parent_id: str | None = None
    title: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class Option:
    """One typeahead entry: label shown to the user, value sent back."""

    label: str
    value: str

    def to_slack(self) -> dict[str, Any]:
        return {
            "text": {"type": "plain_text", "text": self.label},
            "value": self.value,
        }


@dataclass(frozen=True)
class DatabaseSchema:
    """What this service needs to know about a database's properties."""

    database_id: str
    title_property: str
    relation_property: str | None = None

    @property
    def supports_parent(self) -> bool:
        return self.relation_property is not None


@dataclass(frozen=True)
class RecordCreationRequest:
    database_id: str
    title: str
    title_property: str
    relation_property: str | None = None
    parent_id: str | None = None

    @classmethod
    def for_schema(
        cls,
        schema: DatabaseSchema,
        *,
        title: str,
        parent_id: str | None,
    ) -> "RecordCreationRequest":
        return cls(
            database_id=schema.database_id,
            title=title,
            title_property=schema.title_property,
            relation_property=schema.relation_property,
            parent_id=parent_id,
        )

    @property
    def links_parent(self) -> bool:
        return bool(self.parent_id and self.relation_property)

    def properties(self) -> dict[str, Any]:
        """Render the Notion `properties` payload."""
        values: dict[str, Any] = {self.title_property: title_property_value(self.title)}
        if self.links_parent:
            values[self.relation_property] = relation_property_value(self.parent_id)
        return values


SubmissionStatus = Literal["created", "invalid", "failed"]


@dataclass
class SubmissionOutcome:
    status: SubmissionStatus
    record_id: str | None = None
    field_errors: dict[str, str] = field(default_factory=dict)
    message: str | None = None

    @property
    def created(self) -> bool:
        return self.status == "created"


@dataclass
class AugmentationResult:
    """Partial-success record of the best-effort steps after creation."""

    record_id: str
    permalink: str = ""
    blocks_appended: int = 0
    failures: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failures
