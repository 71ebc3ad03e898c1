"""
Analyzers that derive diagram facts from schemas and from finished diagrams.
"""

from .cache import Cache
from .discriminator_analyzer import DiscriminatorAnalyzer, DiscriminatorInfo
from .enum_analyzer import EnumAnalyzer, EnumInfo
from .external_reference import ExternalReference, ExternalReferenceHandler
from .inheritance_analyzer import InheritanceAnalyzer, PropertySource
from .property_analyzer import PropertyAnalyzer
from .reference_aggregator import ReferenceAggregator
from .relationship_analyzer import CompositionAnalysis, CompositionPattern, Relationship, RelationshipAnalyzer
from .usage_analyzer import ComponentUsage, ComponentUsageAnalyzer, UsageTier

__all__ = [
    "Cache",
    "ComponentUsage",
    "ComponentUsageAnalyzer",
    "CompositionAnalysis",
    "CompositionPattern",
    "DiscriminatorAnalyzer",
    "DiscriminatorInfo",
    "EnumAnalyzer",
    "EnumInfo",
    "ExternalReference",
    "ExternalReferenceHandler",
    "InheritanceAnalyzer",
    "PropertyAnalyzer",
    "PropertySource",
    "ReferenceAggregator",
    "Relationship",
    "RelationshipAnalyzer",
    "UsageTier",
]
