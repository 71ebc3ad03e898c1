"""
Base class for diagram renderers.

Text renderers load three Jinja2 templates from ``templates/<lang>/``: a prefix
(diagram header), a class template rendered once per class and a suffix holding
the relationships.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

import jinja2

from ..config import MermaidConfig, RenderFormat
from ..diagram.model import Diagram, DiagramProperty, PropertyConstraints, Visibility

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


class UnsupportedFormatError(Exception):
    """Raised when no renderer exists for the requested output format."""


def format_number(value: float) -> str:
    """``1.0`` -> ``1``, ``1.5`` -> ``1.5``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_constraints(c: PropertyConstraints) -> str:
    """
    Format constraints as a compact comma-separated list.

    Enums with more than three values are summarized, and patterns of 30
    characters or more are left out.
    """
    parts = []
    if c.format:
        parts.append(f"format:{c.format}")
    if c.enum:
        if len(c.enum) <= 3:
            parts.append(f"enum:{','.join(c.enum)}")
        else:
            parts.append(f"enum:{len(c.enum)} values")
    if c.min_length is not None:
        parts.append(f"min:{c.min_length}")
    if c.max_length is not None:
        parts.append(f"max:{c.max_length}")
    if c.pattern and len(c.pattern) < 30:
        parts.append(f"pattern:{c.pattern}")
    if c.minimum is not None:
        parts.append(f"min:{format_number(c.minimum)}")
    if c.maximum is not None:
        parts.append(f"max:{format_number(c.maximum)}")
    if c.min_items is not None:
        parts.append(f"minItems:{c.min_items}")
    if c.max_items is not None:
        parts.append(f"maxItems:{c.max_items}")
    if c.unique_items:
        parts.append("uniqueItems")
    return ", ".join(parts)


class DiagramRenderer(ABC):
    """Abstract base class for diagram renderers."""

    FORMAT: RenderFormat

    # Template directory name, empty for renderers that need no templates
    TEMPLATE_LANG: str = ""

    # Template file extension
    FILE_EXTENSION: str = ""

    def __init__(self, config: MermaidConfig | None = None):
        """
        Initialize the renderer.

        Args:
            config: Rendering options (defaults if omitted)
        """
        self.config = config or MermaidConfig()
        if self.TEMPLATE_LANG:
            self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR / self.TEMPLATE_LANG)),
            lstrip_blocks=True,
            trim_blocks=True,
        )
        self.prefix_template = self.jinja_env.get_template(f"prefix.{self.FILE_EXTENSION}.jinja2")
        self.class_template = self.jinja_env.get_template(f"class.{self.FILE_EXTENSION}.jinja2")
        self.suffix_template = self.jinja_env.get_template(f"suffix.{self.FILE_EXTENSION}.jinja2")

    @abstractmethod
    def render(self, diagram: Diagram | None) -> str:
        """
        Render a diagram.

        Args:
            diagram: The diagram to render

        Returns:
            Rendered text ("" for no diagram)
        """

    def visible_properties(self, properties: list[DiagramProperty]) -> tuple[list[DiagramProperty], int]:
        """
        Select the property rows to print.

        The first ``max_properties`` real properties are kept, private ones are
        dropped when private members are hidden, and synthetic rows are always
        kept.

        Returns:
            The rows to print and the number of real properties cut off
        """
        max_properties = self.config.max_properties
        rows = []
        real_count = 0
        for prop in properties:
            if not prop.synthetic:
                real_count += 1
                if max_properties > 0 and real_count > max_properties:
                    continue
                if not self.config.include_private and prop.visibility == Visibility.PRIVATE:
                    continue
            rows.append(prop)
        hidden = real_count - max_properties if max_properties > 0 and real_count > max_properties else 0
        return rows, hidden

    def render_property(self, prop: DiagramProperty) -> str:
        """Property row: visibility, type, name, markers, constraints and default.

        Synthetic rows such as ``(oneOf)`` or ``... +3 more`` are printed as they are.
        """
        if prop.synthetic:
            return prop.name
        parts = [f"{prop.visibility.value}{prop.type} {prop.name}"]
        if prop.read_only:
            parts.append(" <<readOnly>>")
        if prop.write_only:
            parts.append(" <<writeOnly>>")
        if prop.deprecated:
            parts.append(" <<deprecated>>")
        if prop.is_discriminator:
            parts.append(" <<discriminator>>")
            if 0 < len(prop.discriminator_values) <= 3:
                parts.append(f" ({'|'.join(prop.discriminator_values)})")
        if prop.constraints is not None:
            constraints = format_constraints(prop.constraints)
            if constraints:
                parts.append(f" <<{constraints}>>")
        if prop.default:
            parts.append(f" = {prop.default}")
        return "".join(parts)
