"""
Property processing: display names, type strings and property edges.

Every place that turns a schema property into a class member goes through
``PropertyProcessor`` so plain classes, flattened allOf classes and promoted
inline variants show properties the same way.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..diagram.model import DiagramClass, DiagramProperty, RelationType, Visibility
from ..document.nodes import Schema, SchemaProxy
from ..utils import create_required_map, extract_schema_name_from_reference, sanitize_id

if TYPE_CHECKING:
    from .visitor import DiagramVisitor

SCALAR_TYPES = ("string", "number", "integer", "boolean", "null")


@dataclass
class PropertyTypeResult:
    """Resolved type of a property and the facts its edges depend on."""

    type: str = ""
    is_ref: bool = False
    is_array: bool = False
    is_all_of: bool = False
    ref_path: str = ""
    item_ref_path: str = ""
    all_of_ref_paths: list[str] = field(default_factory=list)


def _ref_type_name(ref: str) -> str:
    return sanitize_id(extract_schema_name_from_reference(ref))


class PropertyProcessor:
    """Decides the name, type, visibility and edges of each schema property."""

    def __init__(self, visitor: DiagramVisitor):
        self.visitor = visitor

    def build_property_display_name(self, base_name: str, schema: Schema | None) -> str:
        """
        Decorate a property name with its enum values and flags.

        Appends, in order, ``(enum:...)``, ``(readOnly)``, ``(writeOnly)``,
        ``(deprecated)`` and ``(format:...)``.
        """
        options = self.visitor.settings.schema
        enums = self.visitor.enum_analyzer
        display_name = base_name

        info = enums.analyze_enum(schema, base_name)
        if info is not None and options.show_enums and not enums.should_render_as_class(info):
            values = enums.format_enum_for_inline(info)
            if values:
                display_name += f" (enum:{values})"

        if schema is not None:
            if schema.read_only:
                display_name += " (readOnly)"
            if schema.write_only:
                display_name += " (writeOnly)"
            if schema.deprecated and options.show_deprecated:
                display_name += " (deprecated)"

        constraints = self.visitor.property_analyzer.extract_constraints(schema)
        if constraints is not None and constraints.format and options.show_format:
            display_name += f" (format:{constraints.format})"

        return display_name

    def determine_property_type(
        self, proxy: SchemaProxy, schema: Schema | None, name: str, required: dict[str, bool]
    ) -> PropertyTypeResult:
        """
        Work out the type string of a property.

        Checks, in order: a direct reference, an array, a oneOf or anyOf union
        with two or more variants, a single-variant oneOf/anyOf around a
        reference, a property-level allOf, and finally the plain schema type.
        Apart from the plain case, ``?`` is appended when the property is not
        required. The single-variant reference case is always optional.

        Args:
            proxy: The property's schema slot
            schema: The resolved property schema (may be None)
            name: Property name
            required: Required map of the owning schema

        Returns:
            PropertyTypeResult
        """
        result = PropertyTypeResult()
        optional = "" if required.get(name) else "?"

        if proxy.is_reference():
            result.is_ref = True
            result.ref_path = proxy.get_reference()
            result.type = _ref_type_name(result.ref_path) + optional
            return result

        if schema is None:
            result.type = self.visitor.property_analyzer.generate_type_string(schema, name, required)
            return result

        if schema.first_type == "array":
            result.is_array = True
            if schema.items is not None and schema.items.is_reference():
                result.item_ref_path = schema.items.get_reference()
                result.type = f"{_ref_type_name(result.item_ref_path)}[]"
            else:
                result.type = self.visitor.property_analyzer.generate_type_string(schema, name, required)
            result.type += optional
            return result

        for variants in (schema.one_of, schema.any_of):
            if len(variants) > 1:
                result.type = self.build_union_type_string(variants) + optional
                return result

        for variants in (schema.one_of, schema.any_of):
            if len(variants) == 1 and variants[0].is_reference():
                result.is_ref = True
                result.ref_path = variants[0].get_reference()
                result.type = _ref_type_name(result.ref_path) + "?"
                return result

        if schema.all_of:
            result.is_all_of = True
            result.type = "allOf" + optional
            result.all_of_ref_paths = [m.get_reference() for m in schema.all_of if m.is_reference()]
            return result

        result.type = self.visitor.property_analyzer.generate_type_string(schema, name, required)
        return result

    def build_union_type_string(self, variants: list[SchemaProxy]) -> str:
        """Join the variant type names, e.g. ``Card | BankAccount`` or ``string | integer``."""
        names = [name for name in (self.get_variant_type_name(v) for v in variants) if name]
        return " | ".join(names) if names else "any"

    def get_variant_type_name(self, variant: SchemaProxy | None) -> str:
        if variant is None:
            return ""
        if variant.is_reference():
            return _ref_type_name(variant.get_reference())
        schema = variant.schema
        if schema is None:
            return ""
        if schema.title:
            return sanitize_id(schema.title)
        return schema.first_type or "object"

    def is_simple_scalar_variant(self, variant: SchemaProxy | None) -> bool:
        """True for untitled inline scalars, which appear only in the union type text."""
        if variant is None:
            return True
        if variant.is_reference():
            return False
        schema = variant.schema
        if schema is None:
            return True
        if schema.title or schema.properties:
            return False
        return schema.first_type in SCALAR_TYPES

    def build_property(
        self,
        name: str,
        proxy: SchemaProxy,
        required: dict[str, bool],
        owner: Schema | None = None,
    ) -> tuple[DiagramProperty, PropertyTypeResult]:
        """Build the class member for one property (without emitting edges)."""
        schema = proxy.schema
        result = self.determine_property_type(proxy, schema, name, required)
        visibility = self.visitor.property_analyzer.determine_visibility(name, schema, required)

        display_name = name
        if owner is not None and self.visitor.settings.schema.show_discriminators:
            info = self.visitor.discriminator_analyzer.get_discriminator_for_property(
                owner, name, self.visitor.get_class_id
            )
            if info is not None:
                display_name += " (discriminator)"
        display_name = self.build_property_display_name(display_name, schema)

        prop = DiagramProperty(
            name=display_name,
            type=result.type,
            visibility=visibility,
            required=bool(required.get(name)),
            nullable=bool(schema is not None and schema.nullable),
        )
        return prop, result

    def add_properties(
        self,
        cls: DiagramClass,
        schema: Schema,
        parent_id: str | None = None,
        owner: Schema | None = None,
    ) -> None:
        """
        Add a schema's properties to a class, up to the configured maximum.

        A ``... +N more`` row marks truncation. With ``parent_id`` set, the edges
        of each property are emitted as it is processed.
        """
        required = create_required_map(schema.required)
        max_properties = self.visitor.config.max_properties

        for count, (name, proxy) in enumerate(schema.properties.items()):
            if max_properties > 0 and count >= max_properties:
                break
            prop, result = self.build_property(name, proxy, required, owner)
            cls.add_property(prop)
            if parent_id is not None:
                self.create_property_relationships(parent_id, name, proxy, proxy.schema, result)

        hidden = len(schema.properties) - max_properties
        if max_properties > 0 and hidden > 0:
            cls.add_property(
                DiagramProperty(name=f"... +{hidden} more", type="", visibility=Visibility.PUBLIC, synthetic=True)
            )

    def create_property_relationships(
        self,
        parent_id: str,
        name: str,
        proxy: SchemaProxy,
        schema: Schema | None,
        result: PropertyTypeResult,
    ) -> None:
        """
        Emit the edges of a property.

        Unions link to every non-scalar variant, property-level allOf composes
        every member, and references (direct or as array items) compose the
        referenced component, which is visited first so its class exists.
        """
        v = self.visitor

        if schema is not None and not proxy.is_reference():
            if len(schema.one_of) > 1 or len(schema.any_of) > 1:
                self.handle_property_polymorphism(parent_id, name, schema)
                return
            if schema.all_of:
                self.handle_property_all_of(parent_id, name, schema)
                return

        if result.is_ref and result.ref_path:
            v.schemas.visit_component_schema_by_ref(result.ref_path)
            v.add_relationship(parent_id, v.reference_target_id(result.ref_path), RelationType.COMPOSITION, name)
            return

        if result.is_array and result.item_ref_path:
            v.schemas.visit_component_schema_by_ref(result.item_ref_path)
            cardinality = "0..*" if v.config.show_cardinality else ""
            v.add_relationship(
                parent_id, v.reference_target_id(result.item_ref_path), RelationType.COMPOSITION, name, cardinality
            )
            return

        if schema is not None and not proxy.is_reference():
            self._link_enum_class(parent_id, name, schema)

    def handle_property_polymorphism(self, parent_id: str, name: str, schema: Schema) -> None:
        v = self.visitor
        variants = schema.one_of if len(schema.one_of) > 1 else schema.any_of

        for i, variant in enumerate(variants):
            if self.is_simple_scalar_variant(variant):
                continue

            if variant.is_reference():
                ref = variant.get_reference()
                v.schemas.visit_component_schema_by_ref(ref)
                v.add_relationship(parent_id, v.reference_target_id(ref), RelationType.ASSOCIATION, name)
                continue

            variant_schema = variant.schema
            if variant_schema is None:
                continue
            if v.config.render_titled_inline_schema and variant_schema.title:
                variant_id = sanitize_id(variant_schema.title)
            elif variant_schema.properties:
                variant_id = f"{parent_id}_{name}_{i}"
            else:
                continue

            v.composition.create_inline_variant_class(variant_id, variant_schema)
            v.add_relationship(parent_id, variant_id, RelationType.ASSOCIATION, name)

    def handle_property_all_of(self, parent_id: str, name: str, schema: Schema) -> None:
        v = self.visitor

        for i, member in enumerate(schema.all_of):
            if member.is_reference():
                ref = member.get_reference()
                v.schemas.visit_component_schema_by_ref(ref)
                v.add_relationship(parent_id, v.reference_target_id(ref), RelationType.COMPOSITION, name)
                continue

            member_schema = member.schema
            if member_schema is None:
                continue
            if v.config.render_titled_inline_schema and member_schema.title:
                target_id = sanitize_id(member_schema.title)
            else:
                target_id = f"{parent_id}_{name}_allOf_{i}"

            v.composition.create_inline_variant_class(target_id, member_schema)
            v.add_relationship(parent_id, target_id, RelationType.COMPOSITION, name)

    def _link_enum_class(self, parent_id: str, name: str, schema: Schema) -> None:
        """With class enum visualization, give an inline enum its own class."""
        v = self.visitor
        info = v.enum_analyzer.analyze_enum(schema, name)
        if info is None or not v.enum_analyzer.should_render_as_class(info):
            return
        enum_class = v.enum_analyzer.create_enum_class(info, f"{parent_id}_{name}")
        stored = v.add_class(enum_class)
        if stored is not None:
            v.add_relationship(parent_id, stored.id, RelationType.ASSOCIATION, name)
