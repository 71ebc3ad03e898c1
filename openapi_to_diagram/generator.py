"""
Diagram generation pipeline.

1. Validate the configuration
2. Build the diagram from the document, selected component schemas or a given node
3. Annotate external references, then optionally usage tiers
4. Optionally merge duplicate association edges
5. Render in the configured output format
"""

from __future__ import annotations

import threading

from .analyzer.external_reference import ExternalReferenceHandler
from .analyzer.reference_aggregator import ReferenceAggregator
from .analyzer.usage_analyzer import ComponentUsageAnalyzer
from .config import RenderFormat, VisualizationConfig
from .diagram.model import Diagram
from .document.nodes import Document, DocumentNode, SchemaProxy
from .log import get_logger
from .renderers import get_renderer
from .visitor.visitor import mermaidify

logger = get_logger(__name__)


class DiagramGenerator:
    """Builds and renders the class diagram of an OpenAPI document."""

    def __init__(
        self,
        document: Document,
        config: VisualizationConfig | None = None,
        annotate_usage: bool = False,
        cancel_event: threading.Event | None = None,
    ):
        """
        Initialize the generator.

        Configuration errors are logged as warnings; missing sections get their
        defaults.

        Args:
            document: Parsed OpenAPI document
            config: Visualization configuration
            annotate_usage: Annotate heavily referenced classes with their reuse tier
            cancel_event: Set it to stop the traversal early
        """
        self.document = document
        self.config = config or VisualizationConfig()
        self.annotate_usage = annotate_usage
        self.cancel_event = cancel_event

        for error in self.config.validate():
            logger.warning(f"Invalid configuration: {error}")
        self.config.apply_defaults()
        self.mermaid_config = self.config.to_mermaid_config()

    def component_schema(self, name: str) -> SchemaProxy | None:
        """The component schema registered under ``name``, if any."""
        if self.document.components is None:
            return None
        return self.document.components.schemas.get(name)

    def entries(self) -> list[DocumentNode]:
        """The nodes the diagram is built from: the ``only_schemas`` components, else the document."""
        only_schemas = self.config.filter.only_schemas
        if not only_schemas:
            return [self.document]

        entries = []
        for name in only_schemas:
            proxy = self.component_schema(name)
            if proxy is None:
                logger.warning(f"Component schema not found: {name}")
                continue
            entries.append(proxy)
        return entries

    def build_diagram(self, entry: DocumentNode | None = None) -> Diagram:
        """
        Build the diagram and run the post-processing passes.

        Args:
            entry: Node to start from (defaults to ``entries()``)

        Returns:
            The post-processed diagram
        """
        entries = [entry] if entry is not None else self.entries()
        diagram = mermaidify(entries, self.mermaid_config, self.config, self.cancel_event)

        ExternalReferenceHandler().annotate_external_references(diagram)

        if self.annotate_usage:
            ComponentUsageAnalyzer().annotate_with_usage(diagram)

        if self.config.relation.merge_duplicate_refs:
            aggregator = ReferenceAggregator()
            if aggregator.should_aggregate(diagram.relationships):
                stats = aggregator.get_aggregation_stats(diagram.relationships)
                logger.info(f"Merging duplicate references: {stats['relationshipsSaved']} relationships saved")
                diagram.replace_relationships(aggregator.aggregate(diagram.relationships))

        return diagram

    def render(self, diagram: Diagram, format: RenderFormat | str | None = None) -> str:
        """Render a diagram in ``format`` (defaults to ``output.format``)."""
        renderer = get_renderer(format or self.config.output.format, self.mermaid_config)
        return renderer.render(diagram)

    def generate(self, entry: DocumentNode | None = None, format: RenderFormat | str | None = None) -> str:
        """
        Build and render the diagram.

        Raises:
            UnsupportedFormatError: If the output format has no renderer
        """
        return self.render(self.build_diagram(entry), format)
