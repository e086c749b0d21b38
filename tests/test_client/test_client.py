"""Tests for openapi_consumer.client.client."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import httpx
import pytest

from openapi_consumer.client import Client, RequestBuilder
from openapi_consumer.client.client import derive_operation_id
from openapi_consumer.exceptions import InvalidArgumentError, ResolutionError, SpecParseError
from openapi_consumer.models import AliasConfig, ClientConfig, TransportConfig


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_document_resolved(self, petstore_client: Client) -> None:
        schema = petstore_client.document["paths"]["/users"]["post"]["parameters"][0]["schema"]
        assert schema["type"] == "object"
        assert "$ref" not in schema["properties"]["address"]

    def test_input_document_untouched(self, petstore_raw: dict[str, Any]) -> None:
        Client(petstore_raw)
        assert petstore_raw["paths"]["/pets"]["post"]["parameters"][0]["schema"] == {
            "$ref": "#/definitions/NewPet"
        }

    def test_unresolvable_reference_fails_construction(self) -> None:
        with pytest.raises(ResolutionError):
            Client({"swagger": "2.0", "paths": {}, "x": {"$ref": "#/definitions/Nope"}})

    def test_silent_fail_references_from_config(self) -> None:
        document = {
            "swagger": "2.0",
            "paths": {"/me": {"get": {"operationId": "me", "parameters": [
                {"name": "principal", "in": "body", "schema": {"$ref": "#/definitions/Principal"}},
            ]}}},
        }
        client = Client(document, ClientConfig(silent_fail_refs=["#/definitions/Principal"]))
        operation = client.operation("me")
        assert operation is not None
        assert operation.parameter("principal").get("schema") is None

    def test_from_source(self, petstore_path: Path) -> None:
        client = Client.from_source(str(petstore_path))
        assert client.get("info.title") == "Petstore API"

    def test_from_source_rejects_openapi_3(self, tmp_path: Path) -> None:
        path = tmp_path / "openapi.json"
        path.write_text('{"openapi": "3.0.3", "paths": {}}', encoding="utf-8")
        with pytest.raises(SpecParseError):
            Client.from_source(str(path))


# ---------------------------------------------------------------------------
# Host, base path, scheme
# ---------------------------------------------------------------------------


class TestHostAndScheme:
    def test_document_values(self, petstore_client: Client) -> None:
        assert petstore_client.host == "petstore.example.com"
        assert petstore_client.base_path == "/v2"
        assert petstore_client.scheme == "https"
        assert petstore_client.base_url == "https://petstore.example.com"

    def test_overrides(self, petstore_raw: dict[str, Any]) -> None:
        config = ClientConfig(host="localhost:8080", base_path="/api", scheme="http")
        client = Client(petstore_raw, config)
        assert client.base_url == "http://localhost:8080"
        assert client.base_path == "/api"

    def test_base_path_alias_in_config(self, petstore_raw: dict[str, Any]) -> None:
        client = Client(petstore_raw, ClientConfig.model_validate({"basePath": "/v3"}))
        assert client.base_path == "/v3"

    def test_scheme_defaults_to_http(self) -> None:
        client = Client({"swagger": "2.0", "host": "api.example.com", "paths": {}})
        assert client.scheme == "http"

    def test_scheme_split_from_host(self) -> None:
        client = Client({"swagger": "2.0", "host": "https://api.example.com", "schemes": ["http"], "paths": {}})
        assert client.host == "api.example.com"
        assert client.scheme == "https"

    def test_configured_scheme_beats_host_prefix(self) -> None:
        client = Client(
            {"swagger": "2.0", "host": "https://api.example.com", "paths": {}},
            ClientConfig(scheme="http"),
        )
        assert client.host == "api.example.com"
        assert client.scheme == "http"

    def test_transport_base_url_override(self, petstore_raw: dict[str, Any]) -> None:
        config = ClientConfig(transport=TransportConfig(base_url="http://proxy.local"))
        assert Client(petstore_raw, config).base_url == "http://proxy.local"

    def test_root_view_fields(self, petstore_client: Client) -> None:
        assert petstore_client.get("basePath") == "/v2"
        assert petstore_client.get("host") == "petstore.example.com"
        assert petstore_client.get("scheme") == "https"
        assert petstore_client.get("consumes") == ["application/json"]


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


class TestOperationLookup:
    def test_by_operation_id(self, petstore_client: Client) -> None:
        operation = petstore_client.operation("getPetById")
        assert operation is not None
        assert operation.verb == "get"
        assert operation.path == "/pets/{petId}"

    def test_derived_id(self) -> None:
        client = Client({"swagger": "2.0", "paths": {"/users": {"get": {}}}})
        operation = client.operation("usersget")
        assert operation is not None
        assert operation.id == "usersget"
        assert client.operation("usersGet") is None
        assert client.operation("listUsers") is None

    def test_derive_operation_id(self) -> None:
        assert derive_operation_id("/users", "get") == "usersget"
        assert derive_operation_id("/users/{id}/roles", "post") == "users{id}rolespost"

    def test_unknown_returns_none(self, petstore_client: Client) -> None:
        assert petstore_client.operation("nope") is None

    def test_memoised(self, petstore_client: Client) -> None:
        assert petstore_client.operation("addPet") is petstore_client.operation("addPet")

    def test_alias(self, petstore_client: Client) -> None:
        petstore_client.set_aliases("operation", {"newPet": "addPet"})
        assert petstore_client.operation("newPet") is petstore_client.operation("addPet")

    def test_alias_from_config(self, petstore_raw: dict[str, Any]) -> None:
        config = ClientConfig(aliases=AliasConfig(operation={"users": "usersget"}))
        client = Client(petstore_raw, config)
        assert client.operation("users").path == "/users"

    def test_path_level_parameters_key_is_not_an_operation(self, petstore_client: Client) -> None:
        assert petstore_client.operation("pets{petId}parameters") is None

    def test_operation_ids_in_document_order(self, petstore_client: Client) -> None:
        assert petstore_client.operation_ids() == [
            "listPets",
            "addPet",
            "getPetById",
            "deletePet",
            "uploadPhoto",
            "usersget",
            "createUser",
            "getUserById",
        ]

    def test_operations(self, petstore_client: Client) -> None:
        operations = petstore_client.operations()
        assert len(operations) == 8
        assert operations[0].summary == "List pets"


class TestAliases:
    def test_set_and_get_one_table(self, petstore_client: Client) -> None:
        petstore_client.set_aliases("parameter", {"mail": "user/email"})
        assert petstore_client.alias("parameter") == {"mail": "user/email"}
        assert petstore_client.alias("parameter", "mail") == "user/email"
        assert petstore_client.alias("parameter", "other", "fallback") == "fallback"

    def test_set_all_tables(self, petstore_client: Client) -> None:
        petstore_client.set_aliases({"operation": {"a": "addPet"}, "parameter": {}})
        assert petstore_client.alias("operation", "a") == "addPet"
        assert petstore_client.alias("parameter") == {}

    def test_unknown_category(self, petstore_client: Client) -> None:
        assert petstore_client.alias("nope") == {}


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class TestRequest:
    def test_fresh_builder_per_call(self, petstore_client: Client) -> None:
        first = petstore_client.request("listPets")
        second = petstore_client.request("listPets")
        assert isinstance(first, RequestBuilder)
        assert first is not second
        assert first.operation is second.operation

    def test_unknown_operation_raises(self, petstore_client: Client) -> None:
        with pytest.raises(InvalidArgumentError, match="nope"):
            petstore_client.request("nope")

    def test_transport_reused(self, petstore_client: Client) -> None:
        assert petstore_client.transport is petstore_client.transport

    def test_context_manager_closes_transport(self, petstore_raw: dict[str, Any]) -> None:
        handler_calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            handler_calls.append(request)
            return httpx.Response(200, json=[])

        with Client(petstore_raw, httpx_transport=httpx.MockTransport(handler)) as client:
            client.request("listPets").execute()
            assert client.transport._client is not None
        assert client.transport._client is None
        assert len(handler_calls) == 1
