"""
Component reuse analysis.
"""

from __future__ import annotations

import heapq
from dataclasses import dataclass, field
from enum import Enum

from ..diagram.model import Diagram

DEFAULT_MIN_REFS_FOR_ANNOTATION = 5


class UsageTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very-high"


@dataclass
class ComponentUsage:
    class_id: str
    ref_count: int = 0
    tier: UsageTier = UsageTier.LOW
    # Source IDs of the incoming relationships
    incoming_refs: list[str] = field(default_factory=list)


def determine_tier(ref_count: int) -> UsageTier:
    if ref_count >= 50:
        return UsageTier.VERY_HIGH
    if ref_count >= 10:
        return UsageTier.HIGH
    if ref_count >= 5:
        return UsageTier.MEDIUM
    return UsageTier.LOW


class ComponentUsageAnalyzer:
    """Counts incoming references per class and annotates heavily reused ones."""

    def __init__(self, min_refs_for_annotation: int = DEFAULT_MIN_REFS_FOR_ANNOTATION):
        if min_refs_for_annotation <= 0:
            min_refs_for_annotation = DEFAULT_MIN_REFS_FOR_ANNOTATION
        self.min_refs_for_annotation = min_refs_for_annotation

    def analyze_reuse(self, diagram: Diagram | None) -> dict[str, ComponentUsage]:
        """
        Count the incoming relationships of every class.

        Relationship targets without a class (e.g. external references) get an
        entry as well.

        Returns:
            Mapping of class ID to usage, in diagram order
        """
        if diagram is None:
            return {}

        usage = {cls.id: ComponentUsage(class_id=cls.id) for cls in diagram.classes}
        for rel in diagram.relationships:
            entry = usage.setdefault(rel.target_id, ComponentUsage(class_id=rel.target_id))
            entry.ref_count += 1
            entry.incoming_refs.append(rel.source_id)

        for entry in usage.values():
            entry.tier = determine_tier(entry.ref_count)
        return usage

    def annotate_with_usage(self, diagram: Diagram | None) -> None:
        """Add a reuse annotation to classes referenced at least ``min_refs_for_annotation`` times."""
        if diagram is None:
            return
        usage = self.analyze_reuse(diagram)
        for cls in diagram.classes:
            entry = usage.get(cls.id)
            if entry is not None and entry.ref_count >= self.min_refs_for_annotation:
                cls.add_annotation(format_usage_annotation(entry))

    def get_most_reused_components(self, diagram: Diagram | None, top_n: int) -> list[ComponentUsage]:
        """Top ``top_n`` components by reference count, highest first."""
        usage = self.analyze_reuse(diagram)
        if not usage or top_n <= 0:
            return []
        # nlargest keeps ties in diagram order
        return heapq.nlargest(top_n, usage.values(), key=lambda u: u.ref_count)

    def get_unused_components(self, diagram: Diagram | None) -> list[ComponentUsage]:
        return [u for u in self.analyze_reuse(diagram).values() if u.ref_count == 0]


def format_usage_annotation(usage: ComponentUsage) -> str:
    if usage.tier == UsageTier.VERY_HIGH:
        return f"very highly reused ({usage.ref_count} refs)"
    if usage.tier == UsageTier.HIGH:
        return f"highly reused ({usage.ref_count} refs)"
    return f"reused {usage.ref_count} times"
