"""
Enum analysis and representation choice.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..config import EnumVisualization
from ..diagram.model import ClassType, DiagramClass, DiagramProperty, Visibility
from ..document.nodes import Schema
from .property_analyzer import format_schema_value

DEFAULT_MAX_INLINE_VALUES = 5

# Inline renderings longer than this collapse to "<N> values"
MAX_INLINE_LENGTH = 100


@dataclass
class EnumInfo:
    name: str
    values: list[str] = field(default_factory=list)
    type: str = "string"
    nullable: bool = False
    default: str = ""


class EnumAnalyzer:
    """Recognizes enum schemas and decides how to show them."""

    def __init__(
        self,
        visualization: EnumVisualization = EnumVisualization.INLINE,
        max_inline_values: int = DEFAULT_MAX_INLINE_VALUES,
    ):
        if max_inline_values <= 0:
            max_inline_values = DEFAULT_MAX_INLINE_VALUES
        self.visualization = visualization
        self.max_inline_values = max_inline_values

    def analyze_enum(self, schema: Schema | None, property_name: str) -> EnumInfo | None:
        if not self.is_enum_schema(schema):
            return None

        info = EnumInfo(
            name=property_name,
            values=self.extract_enum_values(schema),
            type=schema.first_type or "string",
            nullable=bool(schema.nullable),
        )
        if schema.has_default:
            info.default = format_schema_value(schema.default)
        return info

    def should_render_as_class(self, info: EnumInfo | None) -> bool:
        if info is None:
            return False
        if self.visualization == EnumVisualization.CLASS:
            return True
        if self.visualization in (EnumVisualization.INLINE, EnumVisualization.COMMENT):
            return False
        return len(info.values) > self.max_inline_values

    def format_enum_for_inline(self, info: EnumInfo | None) -> str:
        """Comma-join the values, or summarize as "<N> values" when there are too many."""
        if info is None or not info.values:
            return ""

        summary = f"{len(info.values)} values"
        if len(info.values) > self.max_inline_values:
            return summary

        joined = ",".join(info.values)
        if len(joined) > MAX_INLINE_LENGTH:
            return summary
        return joined

    def create_enum_class(self, info: EnumInfo | None, schema_name: str) -> DiagramClass | None:
        """Build an ``<<enumeration>>`` class with one member per value."""
        if info is None:
            return None

        class_name = schema_name or info.name
        cls = DiagramClass(id=class_name, name=class_name, type=ClassType.ENUM, annotations=["enumeration"])
        for value in info.values:
            cls.add_property(DiagramProperty(name=value, type="", visibility=Visibility.PUBLIC))

        cls.metadata["enumType"] = info.type
        if info.nullable:
            cls.metadata["nullable"] = True
        if info.default:
            cls.metadata["default"] = info.default
        return cls

    def extract_enum_values(self, schema: Schema | None) -> list[str]:
        if schema is None or schema.enum is None:
            return []
        return [format_schema_value(v) for v in schema.enum]

    def is_enum_schema(self, schema: Schema | None) -> bool:
        return schema is not None and bool(schema.enum)
