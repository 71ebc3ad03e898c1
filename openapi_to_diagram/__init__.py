"""OpenAPI to Diagram

A Python package for turning OpenAPI v3 documents into class diagrams.
Schemas, operations and components become classes; references, composition
and polymorphism become typed relationships, rendered as Mermaid, PlantUML
or D3 JSON.
"""

__version__ = "0.3.0"

from .config import MermaidConfig, RenderFormat, VisualizationConfig
from .diagram import Diagram, DiagramClass, DiagramRelationship
from .document import DocumentLoadError, load_document, parse_document
from .generator import DiagramGenerator
from .renderers import UnsupportedFormatError, get_renderer
from .visitor import DiagramVisitor, mermaidify

__all__ = [
    "Diagram",
    "DiagramClass",
    "DiagramGenerator",
    "DiagramRelationship",
    "DiagramVisitor",
    "DocumentLoadError",
    "MermaidConfig",
    "RenderFormat",
    "UnsupportedFormatError",
    "VisualizationConfig",
    "get_renderer",
    "load_document",
    "mermaidify",
    "parse_document",
]
