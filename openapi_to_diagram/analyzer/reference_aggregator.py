"""
Merging of duplicate association edges.
"""

from __future__ import annotations

from typing import Any

from ..diagram.model import DiagramRelationship, RelationType

DEFAULT_MAX_LABELS_TO_SHOW = 10


class ReferenceAggregator:
    """Collapses associations sharing source and target into one labelled edge."""

    def __init__(self, max_labels_to_show: int = DEFAULT_MAX_LABELS_TO_SHOW):
        if max_labels_to_show <= 0:
            max_labels_to_show = DEFAULT_MAX_LABELS_TO_SHOW
        self.max_labels_to_show = max_labels_to_show

    def aggregate(self, relationships: list[DiagramRelationship] | None) -> list[DiagramRelationship] | None:
        """
        Merge associations with the same (source, target).

        A group of one is kept unchanged. Larger groups get a combined label such
        as ``"2 properties (owner, creator)"`` and ``aggregated``, ``count`` and
        ``labels`` metadata on top of the first edge's metadata and cardinality.
        Other relationship types are kept as they are and follow the associations.

        Returns:
            The merged relationship list, or None for None input
        """
        if relationships is None:
            return None

        grouped: dict[tuple[str, str], list[DiagramRelationship]] = {}
        others = []
        for rel in relationships:
            if rel.type == RelationType.ASSOCIATION:
                grouped.setdefault((rel.source_id, rel.target_id), []).append(rel)
            else:
                others.append(rel)

        merged = []
        for (source_id, target_id), group in grouped.items():
            if len(group) == 1:
                merged.append(group[0])
                continue
            labels = [rel.label for rel in group]
            merged.append(
                DiagramRelationship(
                    source_id,
                    target_id,
                    RelationType.ASSOCIATION,
                    label=self.format_aggregated_label(labels),
                    cardinality=group[0].cardinality,
                    metadata={**group[0].metadata, "aggregated": True, "count": len(labels), "labels": labels},
                )
            )

        return merged + others

    def format_aggregated_label(self, labels: list[str]) -> str:
        count = len(labels)
        if count <= self.max_labels_to_show:
            return f"{count} properties ({', '.join(labels)})"
        preview = ", ".join(labels[: self.max_labels_to_show])
        return f"{count} properties ({preview}... +{count - self.max_labels_to_show} more)"

    def should_aggregate(self, relationships: list[DiagramRelationship] | None) -> bool:
        """True when at least two associations repeat an earlier (source, target) pair."""
        if not relationships:
            return False
        seen: dict[tuple[str, str], int] = {}
        duplicates = 0
        for rel in relationships:
            if rel.type != RelationType.ASSOCIATION:
                continue
            key = (rel.source_id, rel.target_id)
            seen[key] = seen.get(key, 0) + 1
            if seen[key] > 1:
                duplicates += 1
        return duplicates >= 2

    def get_aggregation_stats(self, relationships: list[DiagramRelationship] | None) -> dict[str, Any]:
        relationships = relationships or []
        grouped: dict[tuple[str, str], int] = {}
        associations = 0
        for rel in relationships:
            if rel.type == RelationType.ASSOCIATION:
                associations += 1
                key = (rel.source_id, rel.target_id)
                grouped[key] = grouped.get(key, 0) + 1

        duplicate_groups = sum(1 for count in grouped.values() if count > 1)
        saved = sum(count - 1 for count in grouped.values() if count > 1)

        stats: dict[str, Any] = {
            "total": len(relationships),
            "associations": associations,
            "duplicateGroups": duplicate_groups,
            "relationshipsSaved": saved,
        }
        if relationships:
            stats["reductionPercent"] = saved / len(relationships) * 100
        return stats
