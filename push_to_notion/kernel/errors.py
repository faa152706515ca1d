from __future__ import annotations

import re
from typing import Any


_ERROR_CODE_RE = re.compile(r"^[a-z][a-z0-9_]*(\.[a-z][a-z0-9_]*)*$")


class PushToNotionError(Exception):
    """Base typed error.

    - Stable `code` for programmatic handling and log filtering.
    - Human-readable `message`.
    - Optional `meta` payload (safe-to-expose only).
    """

    def __init__(
        self,
        *,
        code: str,
        message: str,
        status_code: int = 500,
        meta: dict[str, Any] | None = None,
    ) -> None:
        if not _ERROR_CODE_RE.fullmatch(code):
            raise ValueError(
                "Invalid error code. Expected dot-separated lowercase tokens, "
                f"got: {code!r}"
            )
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = int(status_code)
        self.meta = dict(meta or {})

    def to_public_dict(self, *, request_id: str | None) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "detail": self.message,
            "code": self.code,
        }
        if request_id:
            payload["request_id"] = request_id
        if self.meta:
            payload["meta"] = self.meta
        return payload


class ValidationError(PushToNotionError):
    """User-correctable input problem, scoped to form fields.

    `field_errors` maps a Slack block id to the message shown under it.
    """

    def __init__(
        self,
        *,
        field_errors: dict[str, str],
        message: str = "Validation error",
        code: str = "request.validation_error",
    ):
        super().__init__(code=code, message=message, status_code=422, meta={"fields": sorted(field_errors)})
        self.field_errors = dict(field_errors)


class SchemaError(PushToNotionError):
    def __init__(
        self,
        *,
        database_id: str,
        message: str = "No title property found",
        code: str = "notion.schema_error",
    ):
        super().__init__(code=code, message=message, status_code=502, meta={"database_id": database_id})
        self.database_id = database_id


class UpstreamError(PushToNotionError):
    def __init__(
        self,
        *,
        message: str = "Upstream service error",
        code: str = "upstream.error",
        meta: dict[str, Any] | None = None,
        status_code: int = 502,
    ):
        super().__init__(code=code, message=message, status_code=status_code, meta=meta)


class NotionAPIError(UpstreamError):
    def __init__(self, *, status: int, notion_code: str | None, message: str):
        super().__init__(
            message=message,
            code="notion.api_error",
            meta={"status": status, "notion_code": notion_code},
        )
        self.status = status
        self.notion_code = notion_code


class FormOpenError(UpstreamError):
    def __init__(self, *, slack_error: str | None, message: str = "Could not open the form"):
        super().__init__(
            message=message,
            code="slack.form_open_failed",
            meta={"slack_error": slack_error},
        )
        self.slack_error = slack_error


class InvalidSignatureError(PushToNotionError):
    def __init__(self, *, message: str = "Invalid signature", code: str = "auth.invalid_signature"):
        super().__init__(code=code, message=message, status_code=401)
