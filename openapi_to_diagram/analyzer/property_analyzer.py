"""
Property analysis: constraints, visibility and type strings.
"""

from __future__ import annotations

from ..diagram.model import PropertyConstraints, Visibility
from ..document.nodes import Schema
from ..utils import extract_schema_name_from_reference


def format_schema_value(value) -> str:
    """Render an enum/default/const value the way it reads in a document."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class PropertyAnalyzer:
    """Derives display information for schema properties."""

    def extract_constraints(self, schema: Schema | None) -> PropertyConstraints | None:
        """
        Collect the validation constraints of a schema.

        Returns:
            Populated constraints, or None when the schema declares none
        """
        if schema is None:
            return None

        constraints = PropertyConstraints()
        found = False

        if schema.format:
            constraints.format = schema.format
            found = True
        if schema.pattern:
            constraints.pattern = schema.pattern
            found = True

        for attr in ("min_length", "max_length", "minimum", "maximum", "min_items", "max_items"):
            value = getattr(schema, attr)
            if value is not None:
                setattr(constraints, attr, value)
                found = True

        if schema.unique_items:
            constraints.unique_items = True
            found = True

        if schema.enum:
            constraints.enum = [format_schema_value(v) for v in schema.enum]
            found = True

        return constraints if found else None

    def determine_visibility(self, name: str, schema: Schema | None, required: dict[str, bool]) -> Visibility:
        """Required properties are protected, write-only ones package, the rest public."""
        if required.get(name):
            return Visibility.PROTECTED
        if schema is not None and schema.write_only:
            return Visibility.PACKAGE
        return Visibility.PUBLIC

    def generate_type_string(self, schema: Schema | None, name: str, required: dict[str, bool]) -> str:
        """
        Build a type string such as ``string?``, ``integer`` or ``string[1..5][]``.

        Args:
            schema: Property schema
            name: Property name
            required: Required map of the owning schema

        Returns:
            Type string; ``any`` for a missing schema
        """
        if schema is None:
            return "any"

        base_type = schema.first_type or "any"

        if base_type == "array":
            return f"{self._item_type(schema)}{self._array_cardinality(schema)}[]"

        if not required.get(name) and not schema.nullable:
            base_type += "?"
        return base_type

    def _item_type(self, schema: Schema) -> str:
        if schema.items is None:
            return "any"
        item_schema = schema.items.schema
        if item_schema is not None and item_schema.first_type:
            return item_schema.first_type
        if schema.items.is_reference():
            return extract_schema_name_from_reference(schema.items.get_reference())
        return "any"

    def _array_cardinality(self, schema: Schema) -> str:
        if schema.min_items is None and schema.max_items is None:
            return ""
        low = "0" if schema.min_items is None else str(schema.min_items)
        high = "*" if schema.max_items is None else str(schema.max_items)
        return f"[{low}..{high}]"

    def validate_constraints(self, constraints: PropertyConstraints | None) -> list[str]:
        """Report min/max pairs where the minimum exceeds the maximum."""
        errors = []
        if constraints is None:
            return errors

        pairs = [
            (constraints.min_length, constraints.max_length, "minLength cannot be greater than maxLength"),
            (constraints.minimum, constraints.maximum, "minimum cannot be greater than maximum"),
            (constraints.min_items, constraints.max_items, "minItems cannot be greater than maxItems"),
        ]
        for low, high, message in pairs:
            if low is not None and high is not None and low > high:
                errors.append(message)
        return errors
