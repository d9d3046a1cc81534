"""Tests for OpenAPI document assembly."""

from __future__ import annotations

import json

from apidocgen.merge import (
    build_endpoint,
    merge_endpoint,
    merge_endpoints,
    new_document,
    prepare_document,
)


def test_new_document_has_openapi_skeleton() -> None:
    document = new_document()

    assert document["openapi"] == "3.0.0"
    assert document["info"]["title"] == "New API Documentation"
    assert document["paths"] == {}


def test_prepare_document_copies_existing_document() -> None:
    existing = {"openapi": "3.0.0", "info": {"title": "Mine"}, "paths": {"/a": {"get": {}}}}

    document = prepare_document(existing)
    document["paths"]["/b"] = {}

    assert "/b" not in existing["paths"]
    assert document["info"]["title"] == "Mine"


def test_prepare_document_adds_missing_paths() -> None:
    assert prepare_document({"openapi": "3.0.0"})["paths"] == {}
    assert prepare_document(None)["info"]["version"] == "1.0.0"


def test_merge_endpoint_replaces_same_path_and_method() -> None:
    document = new_document()
    merge_endpoint(document, "/x", "GET", {"summary": "first"})
    merge_endpoint(document, "/x", "get", {"summary": "second"})
    merge_endpoint(document, "/x", "post", {"summary": "other"})

    assert document["paths"]["/x"] == {
        "get": {"summary": "second"},
        "post": {"summary": "other"},
    }


def test_merge_endpoint_ignores_missing_path_or_method() -> None:
    document = new_document()

    assert merge_endpoint(document, "", "get", {}) is False
    assert merge_endpoint(document, "/x", None, {}) is False
    assert merge_endpoint(document, "/x", "  ", {}) is False
    assert document["paths"] == {}


def test_merge_endpoints_counts_stored_entries() -> None:
    document = new_document()
    stored = merge_endpoints(
        document,
        [
            {"path": "/users", "method": "get", "summary": "List"},
            {"path": "", "method": "get"},
            {"path": "/users", "method": None},
            "not an endpoint",
        ],
    )

    assert stored == 1
    assert document["paths"]["/users"]["get"]["summary"] == "List"


def test_build_endpoint_fills_defaults() -> None:
    operation = build_endpoint({"path": "/users/{id}", "method": "GET"})

    assert operation["summary"] == "No summary provided"
    assert operation["description"] == "No description provided"
    assert operation["tags"] == ["users"]
    assert "requestBody" not in operation
    assert operation["responses"]["200"]["content"]["application/json"]["schema"] == {
        "type": "object",
        "properties": {"message": {"type": "string"}},
    }


def test_build_endpoint_uses_default_tag_for_root_path() -> None:
    assert build_endpoint({"path": "/", "method": "get"})["tags"] == ["default"]


def test_build_endpoint_keeps_provided_tags() -> None:
    assert build_endpoint({"path": "/a", "method": "get", "tags": ["admin"]})["tags"] == ["admin"]


def test_build_endpoint_parses_schema_strings_for_post() -> None:
    body = {"type": "object", "properties": {"name": {"type": "string"}}}
    success = {"type": "object", "properties": {"id": {"type": "integer"}}}

    operation = build_endpoint(
        {
            "path": "/users",
            "method": "post",
            "summary": "Create",
            "requestBodySchema": json.dumps(body),
            "successResponseSchema": success,
            "errorResponses": [
                {"code": "400", "description": "Invalid input"},
                {"description": "no code"},
            ],
        }
    )

    assert operation["requestBody"]["required"] is True
    assert operation["requestBody"]["content"]["application/json"]["schema"] == body
    assert operation["responses"]["201"]["content"]["application/json"]["schema"] == success
    assert "200" not in operation["responses"]
    assert operation["responses"]["400"] == {"description": "Invalid input"}
    assert len(operation["responses"]) == 2


def test_build_endpoint_drops_unparseable_or_empty_schemas() -> None:
    operation = build_endpoint(
        {
            "path": "/users",
            "method": "put",
            "requestBodySchema": "{not json",
            "successResponseSchema": "{}",
        }
    )

    assert "requestBody" not in operation
    assert operation["responses"]["200"]["content"]["application/json"]["schema"]["type"] == "object"


def test_build_endpoint_ignores_malformed_tags() -> None:
    assert build_endpoint({"path": "/users", "method": "get", "tags": "users"})["tags"] == ["users"]
    assert build_endpoint({"path": "/orders", "method": "get", "tags": 5})["tags"] == ["orders"]
    assert build_endpoint({"path": "/a", "method": "get", "tags": ["admin", 3, ""]})["tags"] == [
        "admin"
    ]


def test_build_endpoint_ignores_malformed_error_responses() -> None:
    for value in (5, "400", {"code": "400"}):
        operation = build_endpoint({"path": "/x", "method": "get", "errorResponses": value})
        assert list(operation["responses"]) == ["200"]


def test_build_endpoint_drops_non_text_summary() -> None:
    operation = build_endpoint({"path": "/x", "method": "get", "summary": {"a": 1}})

    assert operation["summary"] == "No summary provided"


def test_merge_endpoints_skips_non_string_path_or_method() -> None:
    document = new_document()

    stored = merge_endpoints(
        document,
        [{"path": ["/x"], "method": "get"}, {"path": "/y", "method": 7}],
    )

    assert stored == 0
    assert document["paths"] == {}
