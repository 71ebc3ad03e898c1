"""
Configuration for diagram generation.

``VisualizationConfig`` is the master configuration, split into sections that map
one-to-one onto the JSON configuration file. ``MermaidConfig`` is the flat subset
consumed by the visitor and the renderers.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path


class EnumVisualization(str, Enum):
    """How enum values are shown in the diagram."""

    INLINE = "inline"  # Default: "(enum:A,B,C)" next to the property name
    CLASS = "class"  # Separate <<enumeration>> class
    COMMENT = "comment"  # Same text as inline, never promoted to a class


class RenderFormat(str, Enum):
    """Supported output formats."""

    MERMAID_CLASS = "mermaid-class"
    PLANTUML = "plantuml"
    D3_JSON = "d3-json"


@dataclass
class MermaidConfig:
    """Flat configuration used by the visitor and the renderers."""

    # Max properties to show per class (<= 0 means no limit)
    max_properties: int = 20

    # Include private (-) members
    include_private: bool = True

    # Include operations/methods
    include_operations: bool = True

    # Show relationship cardinality
    show_cardinality: bool = True

    # Group by namespaces
    use_namespaces: bool = False

    # Use simplified names when no operationId is available
    simplify_names: bool = True

    # Render inline schemas with titles as separate classes
    render_titled_inline_schema: bool = True

    # Emit title/description comments in the rendered output
    show_metadata: bool = False


@dataclass
class GeneralConfig:
    """General diagram settings."""

    title: str = ""
    description: str = ""
    max_depth: int = 50


@dataclass
class SchemaConfig:
    """Schema visualization behaviour."""

    max_properties: int = 20
    max_depth: int = 10
    show_constraints: bool = True
    show_enums: bool = True
    show_discriminators: bool = True
    show_format: bool = True
    inherited_properties: bool = False
    collapse_large_schemas: bool = True
    large_schema_threshold: int = 50
    show_property_defaults: bool = True
    show_deprecated: bool = True
    enum_visualization: EnumVisualization = EnumVisualization.INLINE
    max_inline_enum_values: int = 5


@dataclass
class RelationshipConfig:
    """Relationship detection and display."""

    detect_polymorphism: bool = True
    simplify_references: bool = False
    show_cardinality: bool = True
    analyze_property_types: bool = True
    detect_bidirectional: bool = True
    merge_duplicate_refs: bool = False


@dataclass
class FilterConfig:
    """Filtering rules applied while walking the document."""

    include_tags: list[str] = field(default_factory=list)
    exclude_tags: list[str] = field(default_factory=list)
    include_paths: list[str] = field(default_factory=list)
    exclude_paths: list[str] = field(default_factory=list)
    only_operations: list[str] = field(default_factory=list)
    only_schemas: list[str] = field(default_factory=list)
    exclude_deprecated: bool = False
    max_complexity: int = 1000


@dataclass
class OutputConfig:
    """Output formatting."""

    format: RenderFormat = RenderFormat.MERMAID_CLASS
    include_private: bool = True
    include_operations: bool = True
    use_namespaces: bool = False
    simplify_names: bool = True
    show_metadata: bool = False


_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

# Section name -> section class
_SECTIONS = {
    "general": GeneralConfig,
    "schema": SchemaConfig,
    "relation": RelationshipConfig,
    "filter": FilterConfig,
    "output": OutputConfig,
}


def _to_snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _to_camel_case(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(word.capitalize() for word in rest)


def _section_from_dict(section_class: type, d: dict):
    """Build a config section from a dict with camelCase or snake_case keys."""
    section = section_class()
    for k, v in d.items():
        name = _to_snake_case(k)
        if not hasattr(section, name):
            continue
        if name == "enum_visualization" and isinstance(v, str):
            v = EnumVisualization(v)
        elif name == "format" and isinstance(v, str):
            v = RenderFormat(v)
        setattr(section, name, v)
    return section


def _section_to_dict(section) -> dict:
    result = {}
    for f in fields(section):
        value = getattr(section, f.name)
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, list):
            value = list(value)
        result[_to_camel_case(f.name)] = value
    return result


@dataclass
class VisualizationConfig:
    """Master configuration for diagram generation.

    A section set to ``None`` is treated as missing; ``apply_defaults`` fills it in.
    """

    general: GeneralConfig | None = field(default_factory=GeneralConfig)
    schema: SchemaConfig | None = field(default_factory=SchemaConfig)
    relation: RelationshipConfig | None = field(default_factory=RelationshipConfig)
    filter: FilterConfig | None = field(default_factory=FilterConfig)
    output: OutputConfig | None = field(default_factory=OutputConfig)

    def validate(self) -> list[str]:
        """
        Check the configuration for invalid values.

        Returns:
            List of error messages, empty when the configuration is valid
        """
        errors = []

        if self.general is not None:
            if self.general.max_depth < 1:
                errors.append("general.maxDepth must be at least 1")
            if self.general.max_depth > 200:
                errors.append("general.maxDepth should not exceed 200 (risk of stack overflow)")

        if self.schema is not None:
            if self.schema.max_properties < 0:
                errors.append("schema.maxProperties cannot be negative")
            if self.schema.max_depth < 1:
                errors.append("schema.maxDepth must be at least 1")
            if self.schema.large_schema_threshold < 10:
                errors.append("schema.largeSchemaThreshold should be at least 10")

        if self.filter is not None:
            if self.filter.max_complexity < 0:
                errors.append("filter.maxComplexity cannot be negative")
            for include_tag in self.filter.include_tags:
                for exclude_tag in self.filter.exclude_tags:
                    if include_tag == exclude_tag:
                        errors.append(f"filter.includeTags and filter.excludeTags contain same tag: {include_tag}")

        return errors

    def apply_defaults(self) -> None:
        """Fill in missing sections with their defaults."""
        for name, section_class in _SECTIONS.items():
            if getattr(self, name) is None:
                setattr(self, name, section_class())

    def to_mermaid_config(self) -> MermaidConfig:
        """Derive the flat configuration used by the visitor and renderers."""
        config = MermaidConfig()

        if self.schema is not None:
            config.max_properties = self.schema.max_properties

        if self.output is not None:
            config.include_private = self.output.include_private
            config.include_operations = self.output.include_operations
            config.use_namespaces = self.output.use_namespaces
            config.simplify_names = self.output.simplify_names
            config.show_metadata = self.output.show_metadata

        if self.relation is not None:
            config.show_cardinality = self.relation.show_cardinality

        return config

    @staticmethod
    def from_dict(d: dict) -> VisualizationConfig:
        """Create a config from a dictionary.

        Missing sections get their defaults, unknown keys are ignored.
        """
        config = VisualizationConfig()
        for k, v in d.items():
            section_class = _SECTIONS.get(k)
            if section_class is not None and isinstance(v, dict):
                setattr(config, k, _section_from_dict(section_class, v))
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary using camelCase keys."""
        result = {}
        for name in _SECTIONS:
            section = getattr(self, name)
            if section is not None:
                result[name] = _section_to_dict(section)
        return result

    @staticmethod
    def load(path: str | Path) -> VisualizationConfig:
        """Load a configuration from a JSON file."""
        with open(path) as f:
            return VisualizationConfig.from_dict(json.load(f))
