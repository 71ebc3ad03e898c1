"""
Renderers that turn a ``Diagram`` into text.
"""

from __future__ import annotations

from ..config import MermaidConfig, RenderFormat
from .base import DiagramRenderer, UnsupportedFormatError
from .d3_json import D3JsonRenderer
from .mermaid import MermaidClassRenderer, render_mermaid_relationship
from .plantuml import PlantUMLRenderer

RENDERERS: dict[RenderFormat, type[DiagramRenderer]] = {
    RenderFormat.MERMAID_CLASS: MermaidClassRenderer,
    RenderFormat.PLANTUML: PlantUMLRenderer,
    RenderFormat.D3_JSON: D3JsonRenderer,
}


def get_renderer(format: RenderFormat | str, config: MermaidConfig | None = None) -> DiagramRenderer:
    """
    Create the renderer for an output format.

    Raises:
        UnsupportedFormatError: If no renderer handles the format
    """
    try:
        render_format = RenderFormat(format)
    except ValueError as e:
        supported = ", ".join(f.value for f in RenderFormat)
        raise UnsupportedFormatError(f"Unsupported format: {format} (supported: {supported})") from e
    return RENDERERS[render_format](config)


__all__ = [
    "D3JsonRenderer",
    "DiagramRenderer",
    "MermaidClassRenderer",
    "PlantUMLRenderer",
    "UnsupportedFormatError",
    "get_renderer",
    "render_mermaid_relationship",
]
