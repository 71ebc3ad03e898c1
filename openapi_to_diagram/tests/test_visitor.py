"""
Tests for the diagram visitor: schema classes, edges, cycles and filters.
"""

import threading
from pathlib import Path

import pytest

from openapi_to_diagram.config import EnumVisualization, VisualizationConfig
from openapi_to_diagram.diagram.model import ClassType, RelationType, Visibility
from openapi_to_diagram.document import load_document, parse_document
from openapi_to_diagram.visitor import DiagramVisitor, mermaidify

TEST_DATA = Path(__file__).parent / "test_data"


@pytest.fixture(scope="module")
def petstore():
    return load_document(TEST_DATA / "petstore.yaml")


@pytest.fixture(scope="module")
def scenarios():
    return load_document(TEST_DATA / "seed_scenarios.yaml")


@pytest.fixture(scope="module")
def edge_cases():
    return load_document(TEST_DATA / "edge_cases.yaml")


def class_ids(diagram):
    return [cls.id for cls in diagram.classes]


def edges(diagram):
    return [(r.source_id, r.type, r.target_id, r.label, r.cardinality) for r in diagram.relationships]


def prop(diagram, class_id, name):
    cls = diagram.get_class(class_id)
    return next(p for p in cls.properties if p.name == name)


def draw(document, name, settings=None):
    return mermaidify(document.components.schemas[name], visualization_config=settings)


class TestSchemaScenarios:
    def test_property_level_one_of(self, scenarios):
        diagram = draw(scenarios, "P")

        assert set(class_ids(diagram)) == {"P", "Card", "BankAccount"}
        assert prop(diagram, "P", "source").type == "Card | BankAccount?"
        assert edges(diagram) == [
            ("P", RelationType.ASSOCIATION, "Card", "source", ""),
            ("P", RelationType.ASSOCIATION, "BankAccount", "source", ""),
        ]

    def test_schema_level_one_of_with_discriminator(self, scenarios):
        diagram = draw(scenarios, "Pay")

        placeholder = diagram.get_class("Pay_Choice")
        assert placeholder.type == ClassType.INTERFACE
        assert placeholder.annotations == ["interface"]
        assert [p.name for p in placeholder.properties] == ["(oneOf)"]
        assert not diagram.has_class("Pay")
        assert edges(diagram) == [
            ("Pay_Choice", RelationType.INHERITANCE, "Succ", "", ""),
            ("Pay_Choice", RelationType.INHERITANCE, "Pend", "", ""),
        ]
        assert prop(diagram, "Pend", "status (enum:pending)").type == "string?"

    def test_inline_titled_all_of(self, scenarios):
        diagram = draw(scenarios, "Ext")

        assert class_ids(diagram) == ["Base", "Extras", "Ext"]
        assert edges(diagram) == [
            ("Base", RelationType.INHERITANCE, "Ext", "extends", ""),
            ("Extras", RelationType.INHERITANCE, "Ext", "extends", ""),
        ]
        # Member properties stay on the promoted bases
        assert diagram.get_class("Ext").properties == []
        assert [p.name for p in diagram.get_class("Base").properties] == ["id"]

    def test_nullable_single_reference(self, scenarios):
        diagram = draw(scenarios, "Acc")

        assert set(class_ids(diagram)) == {"Acc", "Profile"}
        assert prop(diagram, "Acc", "profile").type == "Profile?"
        assert edges(diagram) == [("Acc", RelationType.COMPOSITION, "Profile", "profile", "")]

    def test_array_of_references(self, scenarios):
        diagram = draw(scenarios, "Order")

        assert prop(diagram, "Order", "items").type == "OrderItem[]?"
        assert edges(diagram) == [("Order", RelationType.COMPOSITION, "OrderItem", "items", "0..*")]

    def test_property_level_all_of(self, scenarios):
        diagram = draw(scenarios, "R")

        assert set(class_ids(diagram)) == {"R", "LinksSelf", "LinksPagination"}
        assert prop(diagram, "R", "links").type == "allOf?"
        assert edges(diagram) == [
            ("R", RelationType.COMPOSITION, "LinksSelf", "links", ""),
            ("R", RelationType.COMPOSITION, "LinksPagination", "links", ""),
        ]

    def test_no_placeholders_for_property_unions(self, scenarios):
        diagram = mermaidify(scenarios)
        placeholders = [cls.id for cls in diagram.classes if cls.id.endswith(("_Choice", "_Union"))]
        assert placeholders == ["Pay_Choice"]


class TestCycles:
    def test_visiting_a_path_twice(self, scenarios):
        visitor = DiagramVisitor(scenarios)
        card = scenarios.components.schemas["Card"].schema

        visitor.visit(card)
        visitor.visit(card)

        assert class_ids(visitor.diagram) == ["Card"]
        assert edges(visitor.diagram) == [("Components", RelationType.DEPENDENCY, "Card", "circular", "")]

    def test_self_reference(self, edge_cases):
        diagram = draw(edge_cases, "Node")

        assert class_ids(diagram) == ["Node"]
        assert edges(diagram) == [
            ("Node", RelationType.DEPENDENCY, "Node", "circular", ""),
            ("Node", RelationType.COMPOSITION, "Node", "next", ""),
        ]
        assert prop(diagram, "Node", "next").type == "Node?"

    def test_reached_from_operation_and_components(self, edge_cases):
        diagram = mermaidify(edge_cases)

        assert class_ids(diagram).count("Node") == 1
        assert ("getNode_200", RelationType.COMPOSITION, "Node", "application/json", "") in edges(diagram)
        assert ("Components", RelationType.COMPOSITION, "Node", "schema", "") in edges(diagram)


class TestComposition:
    def test_union_placeholder_and_aliases(self, edge_cases):
        diagram = draw(edge_cases, "Holder")

        assert class_ids(diagram) == ["Circle", "Shape_anyOf_1", "Shape_Union", "Holder"]
        assert prop(diagram, "Holder", "shape").type == "Shape?"
        assert prop(diagram, "Holder", "wrapped").type == "Wrapper?"
        assert edges(diagram) == [
            ("Shape_Union", RelationType.INHERITANCE, "Circle", "", ""),
            ("Shape_Union", RelationType.INHERITANCE, "Shape_anyOf_1", "", ""),
            ("Holder", RelationType.COMPOSITION, "Shape_Union", "shape", ""),
            ("Holder", RelationType.COMPOSITION, "Circle", "wrapped", ""),
        ]
        assert [p.name for p in diagram.get_class("Shape_Union").properties] == ["(anyOf)"]

    def test_referenced_base_is_not_copied(self, petstore):
        diagram = draw(petstore, "NewPet")

        assert [p.name for p in diagram.get_class("NewPet").properties] == ["notes"]
        assert ("Pet", RelationType.INHERITANCE, "NewPet", "extends", "") in edges(diagram)
        assert not diagram.has_class("NewPet_allOf_1")

    def test_external_base(self, edge_cases):
        diagram = draw(edge_cases, "Animal")

        placeholder = diagram.get_class("common_yaml__components_schemas_Base")
        assert placeholder.name == "Base"
        assert placeholder.annotations == ["external", "file:common.yaml"]
        assert edges(diagram) == [
            ("common_yaml__components_schemas_Base", RelationType.INHERITANCE, "Animal", "extends", "")
        ]
        assert [p.name for p in diagram.get_class("Animal").properties] == ["sound"]

    def test_properties_beside_all_of(self):
        document = parse_document(
            {
                "openapi": "3.0.0",
                "components": {
                    "schemas": {
                        "Dog": {
                            "allOf": [{"$ref": "#/components/schemas/Base"}],
                            "type": "object",
                            "required": ["bark"],
                            "properties": {
                                "bark": {"type": "string"},
                                "owner": {"$ref": "#/components/schemas/Owner"},
                            },
                        },
                        "Base": {"type": "object", "properties": {"id": {"type": "string"}}},
                        "Owner": {"type": "object", "properties": {"name": {"type": "string"}}},
                    }
                },
            }
        )
        diagram = draw(document, "Dog")

        assert class_ids(diagram) == ["Base", "Owner", "Dog"]
        assert [p.name for p in diagram.get_class("Dog").properties] == ["bark", "owner"]
        assert prop(diagram, "Dog", "bark").visibility == Visibility.PROTECTED
        # Base properties stay on the base
        assert [p.name for p in diagram.get_class("Base").properties] == ["id"]
        assert edges(diagram) == [
            ("Dog", RelationType.COMPOSITION, "Owner", "owner", ""),
            ("Base", RelationType.INHERITANCE, "Dog", "extends", ""),
        ]

    def test_policy_without_polymorphism_detection(self, scenarios):
        settings = VisualizationConfig()
        settings.relation.detect_polymorphism = False
        diagram = draw(scenarios, "Pay", settings)

        assert not diagram.has_class("Pay_Choice")
        assert diagram.has_class("Pay")
        assert ("Pay", RelationType.ASSOCIATION, "Succ", "oneOf", "") in edges(diagram)


class TestProperties:
    def test_display_names_and_visibility(self, edge_cases):
        diagram = draw(edge_cases, "Account")

        secret = prop(diagram, "Account", "secret (writeOnly)")
        assert secret.visibility == Visibility.PACKAGE
        assert prop(diagram, "Account", "legacyId (deprecated)").type == "string?"
        assert prop(diagram, "Account", "email (format:email)").type == "string?"
        assert prop(diagram, "Account", "role (enum:admin,user)").type == "string?"

    def test_display_flags_can_be_hidden(self, edge_cases):
        settings = VisualizationConfig()
        settings.schema.show_format = False
        settings.schema.show_enums = False
        settings.schema.show_deprecated = False
        diagram = draw(edge_cases, "Account", settings)

        names = [p.name for p in diagram.get_class("Account").properties]
        assert names == ["status", "role", "secret (writeOnly)", "legacyId", "email"]

    def test_component_enum_inline(self, edge_cases):
        diagram = draw(edge_cases, "Account")

        status = diagram.get_class("Status")
        assert status.type == ClassType.CLASS
        assert status.annotations == ["string"]
        assert ("Account", RelationType.COMPOSITION, "Status", "status", "") in edges(diagram)

    def test_enum_class_mode(self, edge_cases):
        settings = VisualizationConfig()
        settings.schema.enum_visualization = EnumVisualization.CLASS
        diagram = draw(edge_cases, "Account", settings)

        assert class_ids(diagram) == ["Status", "Account_role", "Account"]
        status = diagram.get_class("Status")
        assert status.type == ClassType.ENUM
        assert status.annotations == ["enumeration"]
        assert [p.name for p in status.properties] == ["active", "inactive", "banned"]
        assert ("Account", RelationType.ASSOCIATION, "Account_role", "role", "") in edges(diagram)
        assert prop(diagram, "Account", "role").type == "string?"

    def test_truncation_marker(self, edge_cases):
        settings = VisualizationConfig()
        settings.schema.max_properties = 3
        diagram = draw(edge_cases, "Wide", settings)

        properties = diagram.get_class("Wide").properties
        assert [p.name for p in properties] == ["a", "b", "c", "... +2 more"]
        assert properties[-1].synthetic is True

    def test_required_properties(self, petstore):
        diagram = draw(petstore, "Pet")

        assert prop(diagram, "Pet", "id (format:int64)").type == "integer"
        assert prop(diagram, "Pet", "id (format:int64)").visibility == Visibility.PROTECTED
        assert prop(diagram, "Pet", "name").type == "string"
        assert prop(diagram, "Pet", "category").type == "Category?"
        assert prop(diagram, "Pet", "tags").type == "Tag[]?"


class TestDocumentWalk:
    def test_document_classes(self, petstore):
        diagram = mermaidify(petstore)
        ids = class_ids(diagram)

        for class_id in ["Document", "Info", "Paths", "Components", "Pet", "NewPet", "Pets", "Owner", "Error"]:
            assert class_id in ids
        assert "ShowPetById200Response" in ids
        assert len(ids) == len(set(ids))

        names = {cls.name for cls in diagram.classes}
        assert {"listPets", "createPet", "showPetById", "deletePet"} <= names

    def test_document_edges(self, petstore):
        all_edges = edges(mermaidify(petstore))

        assert ("Document", RelationType.COMPOSITION, "Info", "", "") in all_edges
        assert ("Document", RelationType.COMPOSITION, "Paths", "", "") in all_edges
        assert ("Document", RelationType.AGGREGATION, "servers_0", "", "0..*") in all_edges
        assert ("Paths", RelationType.COMPOSITION, "paths__pets", "/pets", "1") in all_edges
        assert ("paths__pets", RelationType.COMPOSITION, "paths__pets_get", "GET", "") in all_edges
        assert ("paths__pets_get", RelationType.ASSOCIATION, "listPets_Responses", "responses", "") in all_edges
        assert ("listPets_Responses", RelationType.COMPOSITION, "listPets_200", "200", "") in all_edges
        assert ("listPets_200", RelationType.COMPOSITION, "Pets", "application/json", "") in all_edges
        assert ("Pets", RelationType.COMPOSITION, "Pet", "items", "0..*") in all_edges
        assert ("Components", RelationType.COMPOSITION, "Pet", "schema", "") in all_edges

    def test_path_item_methods(self, petstore):
        diagram = mermaidify(petstore)
        methods = diagram.get_class("paths__pets").methods
        assert [(m.name, m.return_type) for m in methods] == [("get", "Operation"), ("post", "Operation")]

    def test_summary_rows(self, petstore):
        diagram = mermaidify(petstore)
        paths = diagram.get_class("Paths")
        assert [(p.name, p.type, p.default) for p in paths.properties] == [("pathCount", "int", "2")]
        assert diagram.get_class("Info").name == "Info"
        tag = diagram.get_class("tags_0")
        assert tag.name == "pets"
        assert tag.annotations == ["tag"]

    def test_metadata(self, petstore):
        diagram = mermaidify(petstore)
        assert diagram.metadata.title == "Swagger Petstore"
        assert diagram.metadata.version == "1.0.0"
        assert diagram.metadata.source.endswith("petstore.yaml")

        settings = VisualizationConfig()
        settings.general.title = "Override"
        assert mermaidify(petstore, visualization_config=settings).metadata.title == "Override"

    def test_edges_only_between_existing_classes(self, petstore):
        diagram = mermaidify(petstore)
        for rel in diagram.relationships:
            assert diagram.has_class(rel.source_id)
            assert diagram.has_class(rel.target_id)

    def test_deterministic(self, petstore):
        first = mermaidify(petstore)
        second = mermaidify(petstore)
        assert class_ids(first) == class_ids(second)
        assert edges(first) == edges(second)


def _operation_names(diagram):
    return {cls.name for cls in diagram.classes} & {"listPets", "createPet", "showPetById", "deletePet"}


class TestFilters:
    def test_exclude_tags(self, petstore):
        settings = VisualizationConfig()
        settings.filter.exclude_tags = ["internal"]
        assert _operation_names(mermaidify(petstore, visualization_config=settings)) == {
            "listPets",
            "createPet",
            "showPetById",
        }

    def test_include_tags(self, petstore):
        settings = VisualizationConfig()
        settings.filter.include_tags = ["internal"]
        assert _operation_names(mermaidify(petstore, visualization_config=settings)) == {"deletePet"}

    def test_exclude_deprecated(self, petstore):
        settings = VisualizationConfig()
        settings.filter.exclude_deprecated = True
        assert "deletePet" not in _operation_names(mermaidify(petstore, visualization_config=settings))

    def test_only_operations(self, petstore):
        settings = VisualizationConfig()
        settings.filter.only_operations = ["listPets"]
        assert _operation_names(mermaidify(petstore, visualization_config=settings)) == {"listPets"}

    def test_include_and_exclude_paths(self, petstore):
        settings = VisualizationConfig()
        settings.filter.include_paths = ["/pets"]
        assert _operation_names(mermaidify(petstore, visualization_config=settings)) == {"listPets", "createPet"}

        settings = VisualizationConfig()
        settings.filter.exclude_paths = ["/pets/*"]
        assert _operation_names(mermaidify(petstore, visualization_config=settings)) == {"listPets", "createPet"}

    def test_filtered_path_keeps_path_count(self, petstore):
        settings = VisualizationConfig()
        settings.filter.include_paths = ["/pets"]
        diagram = mermaidify(petstore, visualization_config=settings)
        assert diagram.get_class("Paths").properties[0].default == "2"
        assert not any(rel.label == "/pets/{petId}" for rel in diagram.relationships)


class TestLimits:
    def test_max_depth(self, petstore):
        settings = VisualizationConfig()
        settings.general.max_depth = 1
        diagram = mermaidify(petstore, visualization_config=settings)
        assert class_ids(diagram) == ["Document"]
        assert diagram.relationships == []

    def test_max_complexity(self, petstore):
        settings = VisualizationConfig()
        settings.filter.max_complexity = 3
        diagram = mermaidify(petstore, visualization_config=settings)
        assert class_ids(diagram) == ["Document", "Info", "Paths"]

    def test_cancelled_before_start(self, petstore):
        event = threading.Event()
        event.set()
        diagram = mermaidify(petstore, cancel_event=event)
        assert diagram.classes == []
        assert diagram.relationships == []
        assert diagram.metadata.title == "Swagger Petstore"

    def test_cancel_stops_dispatch(self, petstore):
        visitor = DiagramVisitor(petstore)
        visitor.cancel()
        assert visitor.cancelled is True
        visitor.visit(petstore)
        assert visitor.diagram.classes == []

    def test_list_of_entries(self, scenarios):
        entries = [scenarios.components.schemas["Acc"], scenarios.components.schemas["Order"]]
        diagram = mermaidify(entries)
        assert set(class_ids(diagram)) == {"Acc", "Profile", "Order", "OrderItem"}


class TestVisitorState:
    def test_mark_visited(self, scenarios):
        visitor = DiagramVisitor(scenarios)
        assert visitor.mark_visited("$.a") is True
        assert visitor.mark_visited("$.a") is False
        assert visitor.is_visited("$.a") is True
        assert visitor.is_visited("$.b") is False

    def test_descending_tracks_progress(self, scenarios):
        visitor = DiagramVisitor(scenarios)
        card = scenarios.components.schemas["Card"].schema
        with visitor.descending(card, "$.card") as allowed:
            assert allowed is True
            assert visitor.is_in_progress("$.card")
        assert not visitor.is_in_progress("$.card")

    def test_aliases_resolve_transitively(self, scenarios):
        visitor = DiagramVisitor(scenarios)
        visitor.add_alias("A", "B")
        visitor.add_alias("B", "C")
        assert visitor.resolve_alias("A") == "C"
        visitor.add_alias("C", "A")
        assert visitor.resolve_alias("A") in {"A", "B", "C"}

    def test_should_visit_path(self, scenarios):
        settings = VisualizationConfig()
        settings.filter.include_paths = ["/pets*"]
        settings.filter.exclude_paths = ["/pets/admin"]
        visitor = DiagramVisitor(scenarios, settings=settings)
        assert visitor.should_visit_path("/pets/{id}") is True
        assert visitor.should_visit_path("/pets/admin") is False
        assert visitor.should_visit_path("/store") is False


if __name__ == "__main__":
    pytest.main([__file__])
