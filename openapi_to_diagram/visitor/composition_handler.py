"""
Schema-level composition: union placeholders and allOf flattening.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..analyzer.relationship_analyzer import ALL_OF_PATTERNS
from ..diagram.model import ClassType, DiagramClass, DiagramProperty, RelationType, Visibility
from ..document.nodes import Schema, SchemaProxy
from ..log import get_logger
from ..utils import create_required_map, sanitize_id

if TYPE_CHECKING:
    from .visitor import DiagramVisitor

logger = get_logger(__name__)


def union_variants(schema: Schema) -> tuple[list[SchemaProxy], str, str]:
    """Variants, keyword and placeholder suffix of a schema-level union ([], "", "" when there is none)."""
    if len(schema.one_of) > 1:
        return schema.one_of, "oneOf", "_Choice"
    if len(schema.any_of) > 1:
        return schema.any_of, "anyOf", "_Union"
    return [], "", ""


class CompositionHandler:
    """Builds the classes that stand for allOf, oneOf and anyOf schemas."""

    def __init__(self, visitor: DiagramVisitor):
        self.visitor = visitor

    def create_polymorphic_placeholder(self, schema: Schema, class_id: str, name: str) -> DiagramClass | None:
        """
        Create the ``<<interface>>`` placeholder of a oneOf/anyOf schema.

        The placeholder is named ``<id>_Choice`` (oneOf) or ``<id>_Union`` (anyOf)
        and carries a single ``(oneOf)``/``(anyOf)`` row. Every variant gets its own
        class and an inheritance edge from the placeholder. Referenced variants are
        visited as components; inline variants are promoted to classes named after
        their title, or ``<id>_<keyword>_<index>`` when untitled.

        Returns:
            The placeholder class (not yet added), or None when there is no union
        """
        v = self.visitor
        variants, keyword, suffix = union_variants(schema)
        if not variants:
            return None

        placeholder_id = class_id + suffix
        placeholder = DiagramClass(
            id=placeholder_id, name=name + suffix, type=ClassType.INTERFACE, annotations=["interface"]
        )
        placeholder.add_property(
            DiagramProperty(name=f"({keyword})", type="", visibility=Visibility.PUBLIC, synthetic=True)
        )
        logger.debug(f"Creating {keyword} placeholder {placeholder_id} with {len(variants)} variants")

        for i, variant in enumerate(variants):
            if variant.is_reference():
                ref = variant.get_reference()
                v.schemas.visit_component_schema_by_ref(ref)
                v.add_relationship(placeholder_id, v.reference_target_id(ref), RelationType.INHERITANCE)
                continue

            v.mark_visited(variant.generate_json_path())
            variant_schema = variant.schema
            if variant_schema is None:
                continue
            if v.config.render_titled_inline_schema and variant_schema.title:
                variant_id = sanitize_id(variant_schema.title)
            else:
                variant_id = f"{class_id}_{keyword}_{i}"

            self.create_inline_variant_class(variant_id, variant_schema)
            v.add_relationship(placeholder_id, variant_id, RelationType.INHERITANCE)

        return placeholder

    def flatten_all_of(self, schema: Schema, class_id: str, name: str) -> tuple[DiagramClass, list[str]]:
        """
        Flatten an allOf schema into one class.

        Referenced members become bases: their classes are created on their own and
        their properties are not copied. Titled inline members are promoted to base
        classes when titled inline rendering is on. The remaining inline members are
        marked visited and their own properties are copied into the derived class,
        followed by the properties declared next to allOf.

        Returns:
            The derived class (not yet added) and the IDs of its bases
        """
        v = self.visitor
        cls = DiagramClass(id=class_id, name=name)
        if schema.first_type:
            cls.add_annotation(schema.first_type)

        required = create_required_map(schema.required)
        base_ids: list[str] = []
        properties: dict[str, DiagramProperty] = {}

        for member in schema.all_of:
            if member.is_reference():
                ref = member.get_reference()
                base_ids.append(v.reference_target_id(ref))
                v.schemas.visit_component_schema_by_ref(ref)
                continue

            member_schema = member.schema
            if member_schema is None:
                continue

            if v.config.render_titled_inline_schema and member_schema.title:
                member_id = sanitize_id(member_schema.title)
                self.create_inline_variant_class(member_id, member_schema)
                base_ids.append(member_id)
                v.mark_visited(member.generate_json_path())
                continue

            v.mark_visited(member.generate_json_path())
            for prop_name, prop_proxy in member_schema.properties.items():
                prop, result = v.properties.build_property(prop_name, prop_proxy, required)
                properties[prop_name] = prop
                v.properties.create_property_relationships(
                    class_id, prop_name, prop_proxy, prop_proxy.schema, result
                )

        # Properties declared next to allOf belong to the derived class
        for prop_name, prop_proxy in schema.properties.items():
            prop, result = v.properties.build_property(prop_name, prop_proxy, required, schema)
            properties[prop_name] = prop
            v.properties.create_property_relationships(class_id, prop_name, prop_proxy, prop_proxy.schema, result)

        for prop in properties.values():
            cls.add_property(prop)

        return cls, base_ids

    def create_inline_variant_class(self, variant_id: str, schema: Schema | None) -> DiagramClass | None:
        """Add a class for an inline union variant or allOf member (properties only, no edges)."""
        if schema is None:
            return None
        cls = DiagramClass(id=variant_id, name=schema.title or variant_id)
        if schema.first_type:
            cls.add_annotation(schema.first_type)
        self.visitor.properties.add_properties(cls, schema)
        return self.visitor.add_class(cls)

    def is_composition_member_of_parent(self, schema: Schema) -> bool:
        """
        True when a parent schema owns this schema through composition.

        allOf members of a flattening parent and variants of a parent with a
        union placeholder never get a class of their own.
        """
        proxy = schema.parent
        if not isinstance(proxy, SchemaProxy) or not isinstance(proxy.parent, Schema):
            return False
        parent = proxy.parent

        if any(member is proxy for member in parent.all_of):
            if self.uses_placeholder(parent):
                return True
            pattern = self.visitor.relationship_analyzer.detect_composition_pattern(
                parent, self.visitor.get_class_id
            )
            return pattern in ALL_OF_PATTERNS

        if not self.uses_placeholder(parent):
            return False
        variants, _, _ = union_variants(parent)
        return any(member is proxy for member in variants)

    def uses_placeholder(self, schema: Schema) -> bool:
        """True when the schema is drawn as a union placeholder."""
        if not self.visitor.settings.relation.detect_polymorphism:
            return False
        variants, _, _ = union_variants(schema)
        return bool(variants)
