"""
D3 force-graph JSON renderer.
"""

from __future__ import annotations

import json

from ..config import RenderFormat
from ..diagram.model import Diagram, DiagramClass, DiagramRelationship
from .base import DiagramRenderer


class D3JsonRenderer(DiagramRenderer):
    """Renders diagrams as ``{"nodes": [...], "links": [...]}`` JSON."""

    FORMAT = RenderFormat.D3_JSON

    def node(self, cls: DiagramClass) -> dict:
        rows, _ = self.visible_properties(cls.properties)
        return {
            "id": cls.id,
            "name": cls.name or cls.id,
            "type": cls.type.value,
            "annotations": list(cls.annotations),
            "properties": [
                {"name": p.name, "type": p.type, "visibility": p.visibility.value, "required": p.required}
                for p in rows
            ],
            "methods": [
                {"name": m.name, "parameters": m.parameters, "returnType": m.return_type}
                for m in (cls.methods if self.config.include_operations else [])
            ],
        }

    def link(self, rel: DiagramRelationship) -> dict:
        return {
            "source": rel.source_id,
            "target": rel.target_id,
            "type": rel.type.value,
            "label": rel.label,
            "cardinality": rel.cardinality,
        }

    def render(self, diagram: Diagram | None) -> str:
        if diagram is None:
            return ""
        graph = {
            "nodes": [self.node(cls) for cls in diagram.classes],
            "links": [self.link(rel) for rel in diagram.relationships],
        }
        return json.dumps(graph, indent=2) + "\n"
