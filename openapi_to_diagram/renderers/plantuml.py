"""
PlantUML class diagram renderer.
"""

from __future__ import annotations

from ..config import RenderFormat
from ..diagram.model import ClassType, Diagram, DiagramClass, DiagramRelationship, RelationType, Visibility
from ..utils import sanitize_id
from .base import DiagramRenderer

PLANTUML_ARROWS = {
    RelationType.INHERITANCE: "<|--",
    RelationType.COMPOSITION: "*--",
    RelationType.AGGREGATION: "o--",
    RelationType.ASSOCIATION: "-->",
    RelationType.DEPENDENCY: "..>",
    RelationType.REALIZATION: "..|>",
    RelationType.NEGATION: "..",
}

CLASS_KEYWORDS = {
    ClassType.CLASS: "class",
    ClassType.INTERFACE: "interface",
    ClassType.ABSTRACT: "abstract class",
    ClassType.ENUM: "enum",
}


class PlantUMLRenderer(DiagramRenderer):
    """Renders diagrams as PlantUML class diagrams."""

    FORMAT = RenderFormat.PLANTUML
    TEMPLATE_LANG = "plantuml"
    FILE_EXTENSION = "puml"

    def render_class(self, cls: DiagramClass) -> str:
        rows, hidden = self.visible_properties(cls.properties)
        members = [self.render_property(prop) for prop in rows]
        if hidden:
            members.append(f"... +{hidden} more properties")
        if self.config.include_operations:
            members.extend(
                f"{m.visibility.value}{m.name}({m.parameters}) {m.return_type}"
                for m in cls.methods
                if self.config.include_private or m.visibility != Visibility.PRIVATE
            )

        return self.class_template.render(
            keyword=CLASS_KEYWORDS[cls.type],
            id=sanitize_id(cls.id),
            stereotypes=cls.annotations,
            members=members,
        )

    def render_relationship(self, rel: DiagramRelationship) -> str:
        source = sanitize_id(rel.source_id)
        target = sanitize_id(rel.target_id)
        label = rel.label
        if rel.type == RelationType.NEGATION and not label:
            label = "not"

        line = source
        if rel.cardinality:
            line += f' "{rel.cardinality}"'
        line += f" {PLANTUML_ARROWS[rel.type]} {target}"
        if label:
            line += f" : {label}"
        return line

    def render(self, diagram: Diagram | None) -> str:
        if diagram is None:
            return ""

        output = self.prefix_template.render(show_metadata=self.config.show_metadata, title=diagram.metadata.title)
        for cls in diagram.classes:
            output += self.render_class(cls) + "\n"
        output += self.suffix_template.render(
            relationships=[self.render_relationship(rel) for rel in diagram.relationships]
        )
        return output + "\n"
