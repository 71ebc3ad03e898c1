from .model import (
    ClassType,
    Diagram,
    DiagramClass,
    DiagramMetadata,
    DiagramMethod,
    DiagramProperty,
    DiagramRelationship,
    PropertyConstraints,
    RelationType,
    Visibility,
)

__all__ = [
    "ClassType",
    "Diagram",
    "DiagramClass",
    "DiagramMetadata",
    "DiagramMethod",
    "DiagramProperty",
    "DiagramRelationship",
    "PropertyConstraints",
    "RelationType",
    "Visibility",
]
