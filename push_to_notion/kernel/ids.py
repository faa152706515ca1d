from __future__ import annotations


def normalize_notion_id(value: str) -> str:
    """Canonical form of a Notion object id.

    Notion accepts ids with or without dashes and returns the dashed form.
    Ids copied from workspace URLs are usually undashed, so comparisons
    go through this.
    """
    return value.strip().replace("-", "").lower()


def same_notion_id(left: str | None, right: str | None) -> bool:
    if not left or not right:
        return False
    return normalize_notion_id(left) == normalize_notion_id(right)
