"""
Utility functions for OpenAPI to diagram conversion.
"""

from __future__ import annotations

import re

from .document.nodes import HTTP_METHODS, Operation, PathItem

# Delimiters recognised when building PascalCase names
_DELIMITER_PATTERN = re.compile(r"[-_\s]+")

# Characters that are always replaced in diagram identifiers
_ID_REPLACED_CHARS = frozenset("/{} -.$#[]'\"+")


def _is_ascii_letter(char: str) -> bool:
    return ("A" <= char <= "Z") or ("a" <= char <= "z")


def _is_id_char(char: str) -> bool:
    return char == "_" or (char.isascii() and char.isalnum())


def sanitize_id(identifier: str) -> str:
    """Make an identifier safe for class-diagram dialects.

    Identifiers that do not start with an ASCII letter get a ``C_`` prefix. The
    separators ``/{} -.$#[]'"+`` and any other character outside
    ``[A-Za-z0-9_]`` become ``_``. The function is idempotent.

    Examples:
        "Links-Self" -> "Links_Self"
        "200" -> "C_200"
        "common.yaml#/Pet" -> "common_yaml__Pet"

    Args:
        identifier: Raw identifier

    Returns:
        Sanitized identifier ("" stays "")
    """
    if not identifier:
        return ""

    chars = []
    if not _is_ascii_letter(identifier[0]):
        chars.append("C_")
    for char in identifier:
        if char in _ID_REPLACED_CHARS or not _is_id_char(char):
            chars.append("_")
        else:
            chars.append(char)
    return "".join(chars)


def to_pascal_case(text: str) -> str:
    """Convert a delimited string to PascalCase.

    Words are split on ``-``, ``_`` and whitespace; the first character of each
    word is upper-cased and the rest is kept as is.

    Examples:
        "get-bookings" -> "GetBookings"
        "create_booking" -> "CreateBooking"
        "listPets" -> "ListPets"
    """
    if not text:
        return ""
    words = _DELIMITER_PATTERN.split(text)
    return "".join(word[:1].upper() + word[1:] for word in words if word)


def extract_schema_name_from_reference(ref: str) -> str:
    """Return the part of a reference after its last ``/``."""
    if "/" in ref:
        return ref.rsplit("/", 1)[1]
    return ref


def create_required_map(required: list[str] | None) -> dict[str, bool]:
    """Turn a ``required`` list into a lookup map."""
    return {name: True for name in required or []}


def generate_name_from_context(operation: Operation | None) -> str:
    """Build an operation name from its HTTP method and path.

    ``GET /bookings/{id}`` becomes ``GetBookingsId``. Falls back to ``Unknown``.
    """
    if operation is None:
        return "Unknown"

    method = ""
    path = ""
    parent = operation.parent
    if isinstance(parent, PathItem):
        path = parent.key
        for http_method in HTTP_METHODS:
            if getattr(parent, http_method, None) is operation:
                method = http_method.capitalize()
                break

    if path:
        path = path.removeprefix("/").replace("/", "_").replace("{", "").replace("}", "")
        path = to_pascal_case(path)

    if method and path:
        return method + path
    return method or path or "Unknown"


def _operation_base_name(operation: Operation) -> str:
    if operation.operation_id:
        return to_pascal_case(operation.operation_id)
    return generate_name_from_context(operation)


def generate_response_schema_name(operation: Operation | None, status_code: str) -> str:
    """Semantic name of a response payload schema, e.g. ``GetBookings200Response``."""
    if operation is None:
        return f"Response{status_code}"
    return f"{_operation_base_name(operation)}{status_code}Response"


def generate_request_body_schema_name(operation: Operation | None) -> str:
    """Semantic name of a request payload schema, e.g. ``CreateBookingRequest``."""
    if operation is None:
        return "Request"
    return f"{_operation_base_name(operation)}Request"
