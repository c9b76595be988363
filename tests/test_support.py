"""End-to-end tests for route registration and rendered documents."""

from __future__ import annotations

import logging

import pytest

from typed_apidocs import (
    ApiDocs,
    DocsSettings,
    HttpMethod,
    RegistrationClosedError,
    RouteMetadata,
    RouteUsageError,
    created,
    example,
    not_found,
    ok,
    summary,
)

from .fixture_helpers import AuthHeaders, Page, Paging, Pet, PetResource, PetsResource, sample_docs

_PET_SCHEMA = {
    "type": "object",
    "properties": {
        "id": {"type": "integer", "format": "int64"},
        "name": {"type": "string"},
        "tag": {"type": "string"},
        "rank": {"type": "string", "enum": ["first", "second", "third"]},
    },
}


def _petstore() -> ApiDocs:
    docs = sample_docs(info={"title": "Pet store", "version": "2.1.0"})
    docs.get(PetResource, summary("Find a pet").responds(ok(Pet), not_found()))
    docs.get(PetsResource, summary("List pets").responds(ok(Page[Pet])))
    docs.post(PetsResource, Pet, summary("Add a pet").responds(created(Pet)))
    return docs


def test_swagger_document() -> None:
    """The older dialect keeps bodies as parameters and schemas under definitions."""
    document = _petstore().documents()["swagger.json"]

    assert document["swagger"] == "2.0"
    assert document["info"] == {"title": "Pet store", "version": "2.1.0"}
    assert document["paths"]["/pets/{id}"]["get"] == {
        "summary": "Find a pet",
        "tags": ["pets"],
        "produces": ["application/json"],
        "parameters": [
            {
                "name": "id",
                "in": "path",
                "description": "id",
                "required": True,
                "type": "integer",
                "format": "int64",
            },
            {
                "name": "verbose",
                "in": "query",
                "description": "verbose",
                "required": False,
                "type": "boolean",
            },
        ],
        "responses": {
            "200": {"description": "Pet", "schema": {"$ref": "#/definitions/Pet"}},
            "404": {"description": "Not Found"},
        },
    }

    post = document["paths"]["/pets"]["post"]
    assert post["consumes"] == ["application/json"]
    assert post["parameters"][0] == {
        "name": "body",
        "in": "body",
        "description": "Pet",
        "required": True,
        "schema": {"$ref": "#/definitions/Pet"},
    }
    assert post["parameters"][1]["default"] == "20"
    assert post["responses"]["201"]["description"] == "Pet"

    assert document["definitions"]["Pet"] == _PET_SCHEMA
    assert document["definitions"]["PageOfPet"] == {
        "type": "object",
        "properties": {
            "items": {"type": "array", "items": {"$ref": "#/definitions/Pet"}},
            "total": {"type": "integer", "format": "int32"},
        },
    }


def test_openapi_document() -> None:
    """The newer dialect uses requestBody, media-typed content and components."""
    document = _petstore().documents()["openapi.json"]

    assert document["openapi"] == "3.0.3"
    get = document["paths"]["/pets"]["get"]
    assert get["parameters"] == [
        {
            "name": "limit",
            "in": "query",
            "description": "Page size",
            "required": False,
            "schema": {"type": "integer", "format": "int32", "default": "20"},
        }
    ]
    assert get["responses"]["200"] == {
        "description": "PageOfPet",
        "content": {
            "application/json": {"schema": {"$ref": "#/components/schemas/PageOfPet"}},
        },
    }

    post = document["paths"]["/pets"]["post"]
    assert post["requestBody"] == {
        "description": "Pet",
        "required": True,
        "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}},
    }
    assert set(document["components"]["schemas"]) == {"Pet", "PageOfPet"}


def test_manual_schema_for_body_and_response() -> None:
    """Author-supplied schemas are referenced by name and never overwritten."""
    pet_input = {"type": "object", "properties": {"name": {"type": "string"}}}
    docs = sample_docs(
        swagger={"schemas": {"PetInput": pet_input, "Pet": {"type": "object"}}},
        openapi={"schemas": {"PetInput": pet_input}},
    )
    docs.put(
        PetResource,
        Pet,
        summary("Replace a pet").no_reflection_body("PetInput").responds(ok("PetInput")),
    )

    swagger = docs.document("swagger.json")
    operation = swagger["paths"]["/pets/{id}"]["put"]
    assert operation["parameters"][0]["schema"] == {"$ref": "#/definitions/PetInput"}
    assert operation["responses"]["200"] == {
        "description": "PetInput",
        "schema": {"$ref": "#/definitions/PetInput"},
    }
    assert swagger["definitions"] == {"PetInput": pet_input, "Pet": {"type": "object"}}

    openapi = docs.document("openapi.json")
    assert openapi["components"]["schemas"] == {"PetInput": pet_input}


def test_unnamed_manual_body_schema_uses_type_name() -> None:
    """``no_reflection_body()`` without a name points at the body type's model name."""
    docs = sample_docs(openapi={"schemas": {"Pet": {"type": "object"}}}, swagger=None)
    docs.post(PetsResource, Pet, summary("Add").no_reflection_body())
    body = docs.document("openapi.json")["paths"]["/pets"]["post"]["requestBody"]
    assert body["content"]["application/json"]["schema"] == {"$ref": "#/components/schemas/Pet"}


def test_body_on_get_is_rejected_without_side_effects() -> None:
    """A failed registration leaves every dialect untouched."""
    docs = sample_docs()
    with pytest.raises(RouteUsageError, match="Method GET does not support a body parameter"):
        docs.register(HttpMethod.GET, PetsResource, Pet)
    assert all(document["paths"] == {} for document in docs.documents().values())
    assert all(len(variation.registry) == 0 for variation in docs.variations)


def test_string_body_is_raw_text() -> None:
    """A ``str`` body is documented as an opaque text payload."""
    docs = sample_docs()
    docs.post(PetsResource, str)
    swagger_post = docs.document("swagger.json")["paths"]["/pets"]["post"]
    assert swagger_post["consumes"] == ["text/plain"]
    assert swagger_post["parameters"][0]["schema"] == {"type": "string"}
    openapi_post = docs.document("openapi.json")["paths"]["/pets"]["post"]
    assert openapi_post["requestBody"]["content"] == {"text/plain": {"schema": {"type": "string"}}}


def test_last_registration_wins(caplog: pytest.LogCaptureFixture) -> None:
    """Re-registering a path+method replaces it and logs a warning."""
    docs = sample_docs(openapi=None)
    docs.get(PetResource, summary("first"))
    with caplog.at_level(logging.WARNING, logger="typed_apidocs.dialects"):
        docs.get(PetResource, summary("second"))
    document = docs.document("swagger.json")
    assert list(document["paths"]) == ["/pets/{id}"]
    assert list(document["paths"]["/pets/{id}"]) == ["get"]
    assert document["paths"]["/pets/{id}"]["get"]["summary"] == "second"
    assert "replacing GET /pets/{id}" in caplog.text


def test_collection_response_registers_array_and_element() -> None:
    """A list response is a named array entry plus its element, nothing else."""
    docs = sample_docs()
    docs.get(PetsResource, summary("List pets").responds(ok(list[Pet])))

    swagger = docs.document("swagger.json")
    assert set(swagger["definitions"]) == {"Pet", "ListOfPet"}
    assert swagger["definitions"]["ListOfPet"] == {
        "type": "array",
        "items": {"$ref": "#/definitions/Pet"},
    }
    assert swagger["paths"]["/pets"]["get"]["responses"]["200"] == {
        "description": "ListOfPet",
        "schema": {"$ref": "#/definitions/ListOfPet"},
    }
    openapi = docs.document("openapi.json")
    assert set(openapi["components"]["schemas"]) == {"Pet", "ListOfPet"}


def test_extra_query_and_header_parameters() -> None:
    """Query and header sources from the metadata are appended after resource members."""
    docs = sample_docs(swagger=None)
    docs.get(PetsResource, RouteMetadata().with_parameters(Paging).with_headers(AuthHeaders))
    parameters = docs.document("openapi.json")["paths"]["/pets"]["get"]["parameters"]
    assert [(parameter["name"], parameter["in"]) for parameter in parameters] == [
        ("limit", "query"),
        ("offset", "query"),
        ("sort", "query"),
        ("authorization", "header"),
    ]


def test_examples_are_rendered_per_dialect() -> None:
    """OpenAPI keeps named examples; Swagger keys one example by media type."""
    docs = sample_docs()
    rex = example("rex", {"id": 1, "name": "Rex"}, summary="A dog")
    docs.post(
        PetsResource,
        Pet,
        summary("Add").with_examples(rex).responds(created(Pet, rex)),
    )

    openapi_post = docs.document("openapi.json")["paths"]["/pets"]["post"]
    assert openapi_post["requestBody"]["content"]["application/json"]["examples"] == {
        "rex": {"summary": "A dog", "value": {"id": 1, "name": "Rex"}},
    }
    swagger_post = docs.document("swagger.json")["paths"]["/pets"]["post"]
    assert swagger_post["parameters"][0]["x-examples"] == {"rex": {"id": 1, "name": "Rex"}}
    assert swagger_post["responses"]["201"]["examples"] == {
        "application/json": {"id": 1, "name": "Rex"},
    }


def test_customization_is_applied_per_dialect() -> None:
    """Each dialect's hook sees the metadata and method before rendering."""
    seen: list[HttpMethod] = []

    def _openapi_only(metadata: RouteMetadata, method: HttpMethod) -> RouteMetadata:
        seen.append(method)
        return metadata.with_operation_id(f"{method.value}Pets")

    docs = ApiDocs(DocsSettings(), openapi_customization=_openapi_only)
    docs.get(PetsResource, summary("List"))
    assert seen == [HttpMethod.GET]
    assert docs.document("openapi.json")["paths"]["/pets"]["get"]["operationId"] == "getPets"
    assert "operationId" not in docs.document("swagger.json")["paths"]["/pets"]["get"]


def test_freeze_closes_registration() -> None:
    """Nothing can be registered once documents have been served."""
    docs = sample_docs()
    docs.freeze()
    with pytest.raises(RegistrationClosedError):
        docs.get(PetsResource)


def test_dialect_selection() -> None:
    """Disabled dialects produce no document; at least one must stay enabled."""
    swagger_only = sample_docs(openapi=None)
    assert list(swagger_only.documents()) == ["swagger.json"]
    assert swagger_only.default_filename == "swagger.json"
    assert swagger_only.document("openapi.json") is None
    assert sample_docs().default_filename == "openapi.json"
    with pytest.raises(ValueError, match="Swagger or OpenApi must be specified"):
        sample_docs(swagger=None, openapi=None)
