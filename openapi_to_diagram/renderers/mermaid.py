"""
Mermaid class diagram renderer.
"""

from __future__ import annotations

from ..config import RenderFormat
from ..diagram.model import Diagram, DiagramClass, DiagramRelationship, RelationType, Visibility
from ..utils import sanitize_id
from .base import DiagramRenderer

MERMAID_ARROWS = {
    RelationType.INHERITANCE: "<|--",
    RelationType.COMPOSITION: "*--",
    RelationType.AGGREGATION: "o--",
    RelationType.ASSOCIATION: "-->",
    RelationType.DEPENDENCY: "..>",
    RelationType.REALIZATION: "..|>",
    RelationType.NEGATION: "-.x",
}


def render_mermaid_relationship(
    source: str, target: str, rel_type: RelationType, label: str = "", cardinality: str = ""
) -> str:
    """
    Render one relationship line.

    ``S ARROW T : label card`` with both, ``S ARROW T : label`` with a label only,
    ``S "card" ARROW T`` with a cardinality only.
    """
    source = sanitize_id(source)
    target = sanitize_id(target)
    arrow = MERMAID_ARROWS[rel_type]

    if label and cardinality:
        return f"  {source} {arrow} {target} : {label} {cardinality}"
    if label:
        return f"  {source} {arrow} {target} : {label}"
    if cardinality:
        return f'  {source} "{cardinality}" {arrow} {target}'
    return f"  {source} {arrow} {target}"


class MermaidClassRenderer(DiagramRenderer):
    """Renders diagrams as Mermaid ``classDiagram`` text."""

    FORMAT = RenderFormat.MERMAID_CLASS
    TEMPLATE_LANG = "mermaid"
    FILE_EXTENSION = "mmd"

    def render_class(self, cls: DiagramClass | None) -> str:
        if cls is None:
            return ""

        rows, hidden = self.visible_properties(cls.properties)
        members = [self.render_property(prop) for prop in rows]
        if hidden:
            members.append(f"... +{hidden} more properties")

        if self.config.include_operations:
            for method in cls.methods:
                if not self.config.include_private and method.visibility == Visibility.PRIVATE:
                    continue
                members.append(
                    f"{method.visibility.value}{method.name}({method.parameters}) {method.return_type}"
                )

        return self.class_template.render(id=sanitize_id(cls.id), annotations=cls.annotations, members=members)

    def render_relationship(self, rel: DiagramRelationship | None) -> str:
        if rel is None:
            return ""
        return render_mermaid_relationship(rel.source_id, rel.target_id, rel.type, rel.label, rel.cardinality)

    def render(self, diagram: Diagram | None) -> str:
        if diagram is None:
            return ""

        output = self.prefix_template.render(
            show_metadata=self.config.show_metadata,
            title=diagram.metadata.title,
            description=diagram.metadata.description,
        )
        for cls in diagram.classes:
            rendered = self.render_class(cls)
            if rendered:
                output += rendered + "\n"
        output += self.suffix_template.render(
            relationships=[self.render_relationship(rel) for rel in diagram.relationships]
        )
        return output
