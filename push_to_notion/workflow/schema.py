"""
Schema Resolver

Notion databases name their properties freely, so the title property and
the optional self-referential relation are discovered per database at
runtime. The result is computed fresh for every operation and passed down
to its consumers as a single DatabaseSchema value.
"""

from __future__ import annotations

from typing import Any

import structlog

from push_to_notion.connectors.notion.client import NotionClient
from push_to_notion.kernel.errors import SchemaError
from push_to_notion.kernel.ids import same_notion_id
from push_to_notion.workflow.models import DatabaseSchema

logger = structlog.get_logger()


def find_title_property(properties: dict[str, dict[str, Any]]) -> str | None:
    for name, prop in properties.items():
        if prop.get("type") == "title":
            return name
    return None


def find_self_relation_property(
    properties: dict[str, dict[str, Any]],
    database_id: str,
) -> str | None:
    """First relation property, by declaration order, that targets `database_id`.

    Several self-relations (e.g. "Parent" and "Blocked by") cannot be told
    apart from the schema alone; the first one wins.
    """
    for name, prop in properties.items():
        if prop.get("type") != "relation":
            continue
        relation = prop.get("relation") or {}
        if same_notion_id(relation.get("database_id"), database_id):
            return name
    return None


def describe_schema(database_id: str, properties: dict[str, dict[str, Any]]) -> DatabaseSchema:
    title_property = find_title_property(properties)
    if title_property is None:
        raise SchemaError(database_id=database_id)
    return DatabaseSchema(
        database_id=database_id,
        title_property=title_property,
        relation_property=find_self_relation_property(properties, database_id),
    )


class SchemaResolver:
    def __init__(self, notion: NotionClient):
        self._notion = notion

    async def resolve(self, database_id: str) -> DatabaseSchema:
        properties = await self._notion.get_schema(database_id)
        schema = describe_schema(database_id, properties)
        logger.debug(
            "Resolved database schema",
            database_id=database_id,
            title_property=schema.title_property,
            relation_property=schema.relation_property,
        )
        return schema
