"""Builders for the Notion block and property payloads this service writes."""

from __future__ import annotations

from typing import Any

# Notion rejects text objects longer than this
MAX_TEXT_CONTENT = 2000


def text_object(content: str, url: str | None = None) -> dict[str, Any]:
    text: dict[str, Any] = {"content": content}
    if url:
        text["link"] = {"url": url}
    return {"type": "text", "text": text}


def rich_text(content: str) -> list[dict[str, Any]]:
    """Split `content` into as many text objects as Notion's limit requires."""
    return [
        text_object(content[start : start + MAX_TEXT_CONTENT])
        for start in range(0, len(content), MAX_TEXT_CONTENT)
    ]


def paragraph_block(content: str) -> dict[str, Any]:
    return {
        "object": "block",
        "type": "paragraph",
        "paragraph": {"rich_text": rich_text(content)},
    }


def link_paragraph_block(label: str, url: str) -> dict[str, Any]:
    return {
        "object": "block",
        "type": "paragraph",
        "paragraph": {"rich_text": [text_object(label, url)]},
    }


def title_property_value(title: str) -> dict[str, Any]:
    return {"title": rich_text(title)}


def relation_property_value(*page_ids: str) -> dict[str, Any]:
    return {"relation": [{"id": page_id} for page_id in page_ids]}
