"""
Option Providers

Fulfil the typeahead queries of the two external_select fields. Both are
stateless: everything they need comes from the query text and the
in-flight InteractionContext.
"""

from __future__ import annotations

from collections.abc import Collection

import structlog

from push_to_notion.connectors.notion.client import NotionClient
from push_to_notion.kernel.errors import SchemaError
from push_to_notion.kernel.ids import normalize_notion_id
from push_to_notion.kernel.text import truncate
from push_to_notion.workflow.context import InteractionContext
from push_to_notion.workflow.form import OPTION_LABEL_MAX_LENGTH
from push_to_notion.workflow.models import Option
from push_to_notion.workflow.schema import SchemaResolver

logger = structlog.get_logger()

MAX_OPTIONS = 25
# Untitled pages are shown by the start of their id
PAGE_ID_LABEL_LENGTH = 12


def is_database_allowed(database_id: str, allowed: Collection[str]) -> bool:
    """An empty allow-list permits every database.

    Ids match in any notation (dashed or not, any case).
    """
    if not allowed:
        return True
    return normalize_notion_id(database_id) in {normalize_notion_id(entry) for entry in allowed}


class DatabaseSearch:
    """Options for the database selector."""

    def __init__(self, notion: NotionClient, allowed_database_ids: Collection[str] = frozenset()):
        self._notion = notion
        self._allowed = frozenset(normalize_notion_id(db_id) for db_id in allowed_database_ids)

    async def options(self, query: str | None) -> list[Option]:
        q = (query or "").strip()
        results = await self._notion.search(q or None, kind="database", page_size=MAX_OPTIONS)

        options = [
            Option(
                label=truncate(result.title or result.id, OPTION_LABEL_MAX_LENGTH),
                value=result.id,
            )
            for result in results
            if result.object == "database" and is_database_allowed(result.id, self._allowed)
        ]

        logger.debug(
            "Database options resolved",
            query=q,
            result_count=len(results),
            option_count=len(options),
        )
        return options[:MAX_OPTIONS]


class ParentRecordSearch:
    """Options for the parent selector; depends on the database selection."""

    def __init__(self, notion: NotionClient, resolver: SchemaResolver | None = None):
        self._notion = notion
        self._resolver = resolver or SchemaResolver(notion)

    async def options(self, query: str | None, context: InteractionContext) -> list[Option]:
        database_id = context.selected_database_id
        if not database_id:
            return []

        try:
            schema = await self._resolver.resolve(database_id)
        except SchemaError as e:
            logger.warning("Parent search skipped", database_id=database_id, error=e.message)
            return []

        q = (query or "").strip()
        pages = await self._notion.query_records(
            database_id,
            title_property=schema.title_property,
            title_filter=q or None,
            page_size=MAX_OPTIONS,
        )

        options = []
        for page in pages[:MAX_OPTIONS]:
            title = page.title_text(schema.title_property) or page.id[:PAGE_ID_LABEL_LENGTH]
            options.append(Option(label=truncate(title, OPTION_LABEL_MAX_LENGTH), value=page.id))
        return options
