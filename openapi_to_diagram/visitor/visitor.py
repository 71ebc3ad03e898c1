"""
The diagram visitor: walks a document and fills a ``Diagram``.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from fnmatch import fnmatch
from typing import Iterator

from ..analyzer.discriminator_analyzer import DiscriminatorAnalyzer
from ..analyzer.enum_analyzer import EnumAnalyzer
from ..analyzer.external_reference import ExternalReferenceHandler
from ..analyzer.inheritance_analyzer import InheritanceAnalyzer
from ..analyzer.property_analyzer import PropertyAnalyzer
from ..analyzer.relationship_analyzer import DEFAULT_MAX_DEPTH, RelationshipAnalyzer
from ..config import MermaidConfig, VisualizationConfig
from ..diagram.model import Diagram, DiagramClass, DiagramMetadata, DiagramRelationship, RelationType
from ..document.nodes import Document, DocumentNode, Operation, Schema, SchemaProxy
from ..log import get_logger
from ..utils import extract_schema_name_from_reference, sanitize_id
from .component_visitor import ComponentVisitor
from .composition_handler import CompositionHandler
from .identifier import Identifier
from .property_processor import PropertyProcessor
from .schema_visitor import SchemaVisitor

logger = get_logger(__name__)


class DiagramVisitor:
    """
    Walks an OpenAPI document and builds its class diagram.

    Every node is visited at most once, keyed by its JSON path. A node reached
    again while it is still being built is recorded as a ``circular`` dependency
    edge. Schema handling is delegated to ``SchemaVisitor``, ``PropertyProcessor``
    and ``CompositionHandler``; everything else to ``ComponentVisitor``.
    """

    def __init__(
        self,
        document: Document | None = None,
        config: MermaidConfig | None = None,
        settings: VisualizationConfig | None = None,
        cancel_event: threading.Event | None = None,
    ):
        self.settings = settings or VisualizationConfig()
        self.settings.apply_defaults()
        self.config = config or self.settings.to_mermaid_config()
        self.document = document
        self.diagram = Diagram()
        self.cancel_event = cancel_event or threading.Event()

        self.external_handler = ExternalReferenceHandler()
        self.property_analyzer = PropertyAnalyzer()
        self.enum_analyzer = EnumAnalyzer(
            self.settings.schema.enum_visualization, self.settings.schema.max_inline_enum_values
        )
        self.discriminator_analyzer = DiscriminatorAnalyzer()
        self.inheritance_analyzer = InheritanceAnalyzer()
        self.relationship_analyzer = RelationshipAnalyzer(DEFAULT_MAX_DEPTH)

        self.identifier = Identifier(self.external_handler)
        self.properties = PropertyProcessor(self)
        self.composition = CompositionHandler(self)
        self.schemas = SchemaVisitor(self)
        self.components = ComponentVisitor(self)
        self._handlers = self.components.handlers

        self._visited: set[str] = set()
        self._visited_lock = threading.Lock()
        # (path, class ID) of the nodes currently being built, innermost last
        self._stack: list[tuple[str, str]] = []
        self._in_progress: set[str] = set()
        self._aliases: dict[str, str] = {}
        self._complexity_warned = False

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        """Stop dispatching new visits; visits already running complete."""
        self.cancel_event.set()

    def get_class_id(self, obj) -> str:
        return self.identifier.get_class_id(obj)

    def reference_target_id(self, ref: str) -> str:
        """Class ID a reference points at (the reference itself for external ones)."""
        if self.external_handler.is_external(ref):
            return ref
        if self.document is not None:
            schema = self.document.resolve_schema_reference(ref)
            if schema is not None:
                return self.get_class_id(schema)
        return extract_schema_name_from_reference(ref)

    def add_class(self, cls: DiagramClass | None) -> DiagramClass | None:
        return self.diagram.add_class(cls)

    def add_relationship(
        self, source_id: str, target_id: str, rel_type: RelationType, label: str = "", cardinality: str = ""
    ) -> bool:
        if not source_id or not target_id:
            return False
        return self.diagram.add_relationship(
            DiagramRelationship(
                source_id=source_id, target_id=target_id, type=rel_type, label=label, cardinality=cardinality
            )
        )

    def add_alias(self, class_id: str, target_id: str) -> None:
        """Redirect edges aimed at ``class_id`` to ``target_id`` when the diagram is finalized."""
        class_id, target_id = sanitize_id(class_id), sanitize_id(target_id)
        if class_id and target_id and class_id != target_id:
            self._aliases[class_id] = target_id

    def resolve_alias(self, class_id: str) -> str:
        seen = set()
        while class_id in self._aliases and not self.diagram.has_class(class_id) and class_id not in seen:
            seen.add(class_id)
            class_id = self._aliases[class_id]
        return class_id

    def mark_visited(self, path: str) -> bool:
        """
        Mark a JSON path as visited.

        Returns:
            True if the path was not visited before
        """
        with self._visited_lock:
            if path in self._visited:
                return False
            self._visited.add(path)
            return True

    def is_visited(self, path: str) -> bool:
        with self._visited_lock:
            return path in self._visited

    def is_in_progress(self, path: str) -> bool:
        return path in self._in_progress

    @contextmanager
    def descending(self, node, path: str) -> Iterator[bool]:
        """
        Enter a node for the duration of the block.

        Yields False, entering nothing, when the traversal is cancelled, the nesting
        depth limit is reached or the diagram hit its complexity limit.
        """
        if not self._can_descend(path):
            yield False
            return

        self._stack.append((path, self.get_class_id(node)))
        self._in_progress.add(path)
        try:
            yield True
        finally:
            self._stack.pop()
            self._in_progress.discard(path)

    def _can_descend(self, path: str) -> bool:
        if self.cancelled:
            return False
        if len(self._stack) >= self.settings.general.max_depth:
            logger.debug(f"Max depth {self.settings.general.max_depth} reached at {path}")
            return False
        max_complexity = self.settings.filter.max_complexity
        if max_complexity > 0 and len(self.diagram.classes) >= max_complexity:
            if not self._complexity_warned:
                logger.warning(f"Diagram reached {max_complexity} classes, skipping the rest of the document")
                self._complexity_warned = True
            return False
        return True

    def add_circular_reference(self, node: DocumentNode) -> None:
        """Record a ``circular`` dependency from the class being built to ``node``'s class."""
        if self._stack:
            source_id = self._stack[-1][1]
        else:
            parent = node.parent
            if isinstance(node, Schema) and isinstance(parent, SchemaProxy):
                parent = parent.parent
            if parent is None:
                return
            source_id = self.get_class_id(parent)

        target_id = self.get_class_id(node)
        logger.debug(f"Circular reference {source_id} -> {target_id}")
        self.add_relationship(source_id, target_id, RelationType.DEPENDENCY, "circular")

    def visit(self, node) -> None:
        """
        Visit any document node.

        A node whose JSON path was already visited is not traversed again: a
        ``circular`` dependency edge is recorded instead.
        """
        if node is None or self.cancelled:
            return

        if isinstance(node, SchemaProxy):
            self.schemas.visit_schema_proxy(node)
            return

        if isinstance(node, Schema):
            if self.composition.is_composition_member_of_parent(node):
                logger.debug(f"Skipping composition member {node.generate_json_path()}")
                return
            handler = self.schemas.visit_schema_internal
        else:
            handler = self._handlers.get(type(node))
            if handler is None:
                logger.debug(f"No visitor for {type(node).__name__}")
                return

        path = node.generate_json_path()
        if not self.mark_visited(path):
            self.add_circular_reference(node)
            return

        with self.descending(node, path) as allowed:
            if allowed:
                handler(node)

    def should_visit_path(self, path: str) -> bool:
        """Apply the include/exclude path globs."""
        rules = self.settings.filter
        if rules.include_paths and not any(fnmatch(path, pattern) for pattern in rules.include_paths):
            return False
        return not any(fnmatch(path, pattern) for pattern in rules.exclude_paths)

    def should_visit_operation(self, operation: Operation) -> bool:
        """Apply the tag, deprecation and operation ID filters."""
        rules = self.settings.filter
        if rules.exclude_deprecated and operation.deprecated:
            return False
        if rules.only_operations and operation.operation_id not in rules.only_operations:
            return False
        tags = set(operation.tags)
        if rules.include_tags and not tags.intersection(rules.include_tags):
            return False
        return not tags.intersection(rules.exclude_tags)

    def finalize(self) -> Diagram:
        """
        Resolve aliases and drop dangling edges.

        Edges aimed at a union schema are redirected to its placeholder, and edges
        aimed at a single-member union to the member's class. Edges whose ends have
        no class (inline scalars, skipped nodes) are dropped.
        """
        kept = []
        for rel in self.diagram.relationships:
            rel.source_id = self.resolve_alias(rel.source_id)
            rel.target_id = self.resolve_alias(rel.target_id)
            if self.diagram.has_class(rel.source_id) and self.diagram.has_class(rel.target_id):
                kept.append(rel)
            else:
                logger.debug(f"Dropping dangling relationship {rel.source_id} -> {rel.target_id}")
        self.diagram.replace_relationships(kept)
        return self.diagram


def mermaidify(
    entry,
    mermaid_config: MermaidConfig | None = None,
    visualization_config: VisualizationConfig | None = None,
    cancel_event: threading.Event | None = None,
) -> Diagram:
    """
    Build the class diagram of a document or of any node in it.

    Args:
        entry: Document, component schema or any other document node, or a list
            of nodes of the same document drawn into one diagram
        mermaid_config: Flat visitor/renderer options (derived from visualization_config if omitted)
        visualization_config: Full configuration (defaults if omitted)
        cancel_event: Set it to stop the traversal; the partial diagram is returned

    Returns:
        The finalized diagram
    """
    entries = entry if isinstance(entry, list) else [entry]
    document = next((e.find_document() for e in entries if isinstance(e, DocumentNode)), None)
    visitor = DiagramVisitor(document, mermaid_config, visualization_config, cancel_event)
    visitor.diagram.metadata = _metadata(document, visitor.settings)

    for node in entries:
        visitor.visit(node)
    diagram = visitor.finalize()
    logger.info(f"Diagram has {len(diagram.classes)} classes and {len(diagram.relationships)} relationships")
    return diagram


def _metadata(document: Document | None, settings: VisualizationConfig) -> DiagramMetadata:
    metadata = DiagramMetadata(title=settings.general.title, description=settings.general.description)
    if document is not None:
        if document.info is not None:
            metadata.title = metadata.title or document.info.title
            metadata.description = metadata.description or document.info.description
            metadata.version = document.info.version
        metadata.source = document.source
    return metadata
