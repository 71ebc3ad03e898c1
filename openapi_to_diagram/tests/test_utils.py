"""
Tests for identifier sanitization and naming helpers.
"""

import pytest

from openapi_to_diagram.document import parse_document
from openapi_to_diagram.utils import (
    create_required_map,
    extract_schema_name_from_reference,
    generate_name_from_context,
    generate_request_body_schema_name,
    generate_response_schema_name,
    sanitize_id,
    to_pascal_case,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Pet", "Pet"),
        ("Links-Self", "Links_Self"),
        ("200", "C_200"),
        ("_private", "C__private"),
        ("common.yaml#/Pet", "common_yaml__Pet"),
        ("paths/{id}", "paths__id_"),
        ("a+b c", "a_b_c"),
        ("Café", "Caf_"),
        ("", ""),
    ],
)
def test_sanitize_id(raw, expected):
    assert sanitize_id(raw) == expected


@pytest.mark.parametrize("raw", ["200", "Links-Self", "#/components/schemas/Pet", "$weird name", "x"])
def test_sanitize_id_is_idempotent(raw):
    once = sanitize_id(raw)
    assert sanitize_id(once) == once


@pytest.mark.parametrize(
    "text, expected",
    [
        ("get-bookings", "GetBookings"),
        ("create_booking", "CreateBooking"),
        ("listPets", "ListPets"),
        ("two words", "TwoWords"),
        ("", ""),
    ],
)
def test_to_pascal_case(text, expected):
    assert to_pascal_case(text) == expected


def test_extract_schema_name_from_reference():
    assert extract_schema_name_from_reference("#/components/schemas/Pet") == "Pet"
    assert extract_schema_name_from_reference("Pet") == "Pet"


def test_create_required_map():
    assert create_required_map(["id", "name"]) == {"id": True, "name": True}
    assert create_required_map(None) == {}


@pytest.fixture
def document():
    return parse_document(
        {
            "openapi": "3.0.0",
            "info": {"title": "t", "version": "1"},
            "paths": {
                "/bookings/{id}": {
                    "get": {"responses": {"200": {"description": "ok"}}},
                    "put": {"operationId": "update-booking", "responses": {"200": {"description": "ok"}}},
                }
            },
        }
    )


def test_generate_name_from_context(document):
    path_item = document.paths.items["/bookings/{id}"]
    assert generate_name_from_context(path_item.get) == "GetBookingsId"
    assert generate_name_from_context(None) == "Unknown"


def test_payload_schema_names(document):
    path_item = document.paths.items["/bookings/{id}"]
    assert generate_response_schema_name(path_item.get, "200") == "GetBookingsId200Response"
    assert generate_response_schema_name(path_item.put, "200") == "UpdateBooking200Response"
    assert generate_request_body_schema_name(path_item.put) == "UpdateBookingRequest"
    assert generate_response_schema_name(None, "404") == "Response404"
    assert generate_request_body_schema_name(None) == "Request"


if __name__ == "__main__":
    pytest.main([__file__])
