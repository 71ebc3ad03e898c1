from .identifier import Identifier
from .visitor import DiagramVisitor, mermaidify

__all__ = ["DiagramVisitor", "Identifier", "mermaidify"]
