# app/core/exceptions.py
"""
Domain errors raised by the crud/report layer and mapped to HTTP responses
by the handlers registered in app/main.py.
"""
from typing import Any, Dict, Iterable, List

VALUE_ERROR_PREFIX = "Value error, "


class ConflictError(Exception):
    """A business rule forbids the requested change (e.g. contributing to a paused goal)."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def format_validation_errors(errors: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    """
    Flatten pydantic error dicts into the `[{field, message}]` list returned to clients.
    Location prefixes added by FastAPI ("body", "query", "path") are dropped.
    """
    formatted = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        formatted.append({
            "field": ".".join(loc) or "__root__",
            "message": error.get("msg", "Invalid value").removeprefix(VALUE_ERROR_PREFIX),
        })
    return formatted
