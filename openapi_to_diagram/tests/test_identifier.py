"""
Tests for class identifiers and display names.
"""

from pathlib import Path

import pytest

from openapi_to_diagram.document import load_document, parse_document
from openapi_to_diagram.visitor import Identifier
from openapi_to_diagram.visitor.identifier import generate_composition_member_id, simplify_path

TEST_DATA = Path(__file__).parent / "test_data"


@pytest.fixture(scope="module")
def petstore():
    return load_document(TEST_DATA / "petstore.yaml")


@pytest.fixture
def identifier():
    return Identifier()


def test_fixed_ids(petstore, identifier):
    assert identifier.get_class_id(petstore) == "Document"
    assert identifier.get_class_id(petstore.info) == "Info"
    assert identifier.get_class_id(petstore.paths) == "Paths"
    assert identifier.get_class_id(petstore.components) == "Components"


def test_operation_context_ids(petstore, identifier):
    list_pets = petstore.paths.items["/pets"].get
    assert identifier.get_class_id(list_pets.parameters[0]) == "limit"
    assert identifier.get_class_id(list_pets.responses) == "listPets_Responses"
    assert identifier.get_class_id(list_pets.responses.codes["200"]) == "listPets_200"
    assert identifier.get_class_id(list_pets.responses.default) == "listPets_default"
    assert identifier.get_class_id(list_pets.responses.codes["200"].headers["x-next"]) == "x-next"

    create_pet = petstore.paths.items["/pets"].post
    assert identifier.get_class_id(create_pet.request_body) == "createPet_RequestBody"


def test_media_type_id(petstore, identifier):
    media = petstore.paths.items["/pets"].get.responses.codes["200"].content["application/json"]
    assert identifier.get_class_id(media) == "200_application_json"


def test_schema_ids(petstore, identifier):
    show = petstore.paths.items["/pets/{petId}"].get
    payload = show.responses.codes["200"].content["application/json"].schema
    assert identifier.get_class_id(payload.schema) == "ShowPetById200Response"
    assert identifier.get_class_id(payload) == "ShowPetById200Response"
    # Nested property schemas get no payload name
    assert identifier.get_class_id(payload.schema.properties["pet"]) == "Pet"

    pet = petstore.components.schemas["Pet"]
    assert identifier.get_class_id(pet) == "Pet"
    assert identifier.get_class_id(pet.schema) == "Pet"
    assert identifier.get_class_id(pet.schema.properties["status"].schema) == "Pet_status"

    new_pet = petstore.components.schemas["NewPet"].schema
    assert identifier.get_class_id(new_pet.all_of[1].schema) == "NewPet_allOf_1"

    body = petstore.paths.items["/pets"].post.request_body.content["application/json"].schema
    assert identifier.get_class_id(body) == "NewPet"


def test_inline_payload_names():
    document = parse_document(
        {
            "openapi": "3.0.0",
            "paths": {
                "/bookings": {
                    "post": {
                        "operationId": "create-booking",
                        "requestBody": {"content": {"application/json": {"schema": {"type": "object"}}}},
                        "responses": {"201": {"content": {"application/json": {"schema": {"type": "object"}}}}},
                    },
                    "get": {
                        "responses": {"200": {"content": {"application/json": {"schema": {"type": "object"}}}}},
                    },
                }
            },
        }
    )
    identifier = Identifier()
    post = document.paths.items["/bookings"].post
    get = document.paths.items["/bookings"].get
    request = post.request_body.content["application/json"].schema.schema
    created = post.responses.codes["201"].content["application/json"].schema.schema
    listed = get.responses.codes["200"].content["application/json"].schema.schema

    assert identifier.get_class_id(request) == "CreateBookingRequest"
    assert identifier.get_class_id(created) == "CreateBooking201Response"
    assert identifier.get_class_id(listed) == "GetBookings200Response"
    assert identifier.extract_schema_name(listed) == "GetBookings200Response"


def test_example_link_and_callback_ids():
    document = parse_document(
        {
            "openapi": "3.0.0",
            "paths": {
                "/events": {
                    "post": {
                        "operationId": "subscribe",
                        "responses": {
                            "200": {
                                "links": {"next": {"operationId": "unsubscribe"}},
                                "content": {"application/json": {"examples": {"basic": {"summary": "Basic"}}}},
                            }
                        },
                        "callbacks": {"onEvent": {"{$request.body#/url}": {"post": {"responses": {}}}}},
                    }
                }
            },
            "components": {"requestBodies": {"EventBody": {"content": {}}}},
        }
    )
    identifier = Identifier()
    operation = document.paths.items["/events"].post
    response = operation.responses.codes["200"]

    assert identifier.get_class_id(response.links["next"]) == "subscribe_200_next"
    assert identifier.get_class_id(operation.callbacks["onEvent"]) == "subscribe_onEvent"
    example = response.content["application/json"].examples["basic"]
    assert identifier.get_class_id(example) == "application_json_basic"
    assert identifier.get_class_id(document.components.request_bodies["EventBody"]) == "EventBody"


def test_titled_schema_uses_sanitized_title():
    document = parse_document(
        {
            "openapi": "3.0.0",
            "components": {
                "schemas": {"Holder": {"properties": {"inner": {"title": "Inner Thing", "type": "object"}}}}
            },
        }
    )
    inner = document.components.schemas["Holder"].schema.properties["inner"].schema
    identifier = Identifier()
    assert identifier.get_class_id(inner) == "Inner_Thing"
    assert identifier.extract_schema_name(inner) == "Inner Thing"


def test_unknown_objects(identifier):
    assert identifier.get_class_id(None) == "Unknown"
    assert identifier.get_class_id(object()) == "object"


def test_path_helpers():
    assert simplify_path("$.paths['/pets']") == "paths__pets"
    assert simplify_path("$.servers[0]") == "servers_0"
    path = "$.components.schemas['Payment'].properties['source'].anyOf[0]"
    assert generate_composition_member_id(path, "anyOf", "0") == "Payment_source_anyOf_0"
    assert generate_composition_member_id("$.x.oneOf[2]", "oneOf", "2") == "Inline_oneOf_2"


def test_parent_context_names(petstore, identifier):
    list_pets = petstore.paths.items["/pets"].get
    assert identifier.get_parent_context_name(list_pets) == "listPets"
    assert identifier.get_parent_context_name(list_pets.responses) == "listPets"
    assert identifier.get_parent_context_name(list_pets.responses.codes["200"]) == "listPets_200"
    assert identifier.get_parent_context_name(petstore.paths.items["/pets/{petId}"]) == "pets_petId"
    assert identifier.get_parent_context_name(None) == ""


if __name__ == "__main__":
    pytest.main([__file__])
