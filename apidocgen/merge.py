"""OpenAPI document construction and endpoint merging."""

from __future__ import annotations

import copy
import json
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .logging import get_logger

_LOGGER = get_logger("merge")

OPENAPI_VERSION = "3.0.0"

# Methods whose success response is "201 Created" rather than "200 OK".
_CREATION_METHODS = frozenset({"post"})

_DEFAULT_SUCCESS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {"message": {"type": "string"}},
}


def new_document() -> Dict[str, Any]:
    """Return an empty OpenAPI document."""
    return {
        "openapi": OPENAPI_VERSION,
        "info": {
            "title": "New API Documentation",
            "version": "1.0.0",
            "description": "Generated by the API documentation agent",
        },
        "paths": {},
    }


def prepare_document(existing: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Return a private copy of ``existing`` (or a new document) with a paths map."""
    if isinstance(existing, Mapping):
        document = copy.deepcopy(dict(existing))
    else:
        document = new_document()
    if not isinstance(document.get("paths"), dict):
        document["paths"] = {}
    return document


def build_endpoint(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Translate one inferred endpoint into an OpenAPI operation object."""
    api_path = str(raw.get("path") or "")
    method = str(raw.get("method") or "").strip().lower()

    tags = _string_list(raw.get("tags")) or [_default_tag(api_path)]

    operation: Dict[str, Any] = {
        "summary": _text(raw.get("summary")) or "No summary provided",
        "description": _text(raw.get("description")) or "No description provided",
        "tags": tags,
        "responses": {},
    }

    request_schema = _parse_schema(raw.get("requestBodySchema"), "requestBodySchema")
    if request_schema:
        operation["requestBody"] = {
            "description": f"Request body for {method} {api_path}",
            "required": True,
            "content": {"application/json": {"schema": request_schema}},
        }

    success_schema = _parse_schema(raw.get("successResponseSchema"), "successResponseSchema")
    success_code = "201" if method in _CREATION_METHODS else "200"
    operation["responses"][success_code] = {
        "description": "Successful operation",
        "content": {
            "application/json": {
                "schema": success_schema or copy.deepcopy(_DEFAULT_SUCCESS_SCHEMA)
            }
        },
    }

    errors = raw.get("errorResponses")
    for error in errors if isinstance(errors, list) else []:
        if not isinstance(error, Mapping):
            continue
        code = error.get("code")
        if not code:
            continue
        operation["responses"][str(code)] = {"description": _text(error.get("description"))}

    return operation


def merge_endpoint(
    document: Dict[str, Any], path: Optional[str], method: Optional[str], description: Dict[str, Any]
) -> bool:
    """Store ``description`` at ``paths[path][method]``, replacing any earlier value.

    Returns ``False`` without touching the document when path or method is
    missing.
    """
    if not path or not method:
        return False
    normalized_method = method.strip().lower()
    if not normalized_method:
        return False
    paths = document.setdefault("paths", {})
    paths.setdefault(path, {})[normalized_method] = description
    return True


def merge_endpoints(document: Dict[str, Any], endpoints: Iterable[Mapping[str, Any]]) -> int:
    """Merge raw inferred endpoints in order; return how many were stored."""
    merged = 0
    for raw in endpoints:
        if not isinstance(raw, Mapping):
            continue
        path = raw.get("path")
        method = raw.get("method")
        if not isinstance(path, str) or not isinstance(method, str):
            continue
        if merge_endpoint(document, path, method, build_endpoint(raw)):
            _LOGGER.debug("Merged %s %s", str(method).upper(), path)
            merged += 1
    return merged


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item]


def _text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _default_tag(api_path: str) -> str:
    segments = api_path.split("/")
    if len(segments) > 1 and segments[1]:
        return segments[1]
    return "default"


def _parse_schema(value: Any, field_name: str) -> Optional[Dict[str, Any]]:
    if not value:
        return None
    if isinstance(value, Mapping):
        return dict(value)
    if not isinstance(value, str):
        return None
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as exc:
        _LOGGER.warning("Invalid %s JSON: %s", field_name, exc)
        return None
    return parsed if isinstance(parsed, dict) else None


__all__ = [
    "OPENAPI_VERSION",
    "build_endpoint",
    "merge_endpoint",
    "merge_endpoints",
    "new_document",
    "prepare_document",
]
