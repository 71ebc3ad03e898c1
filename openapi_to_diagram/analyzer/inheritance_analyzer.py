"""
Inheritance flattening: where does each property of a schema come from?
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..document.nodes import Schema
from .cache import Cache

INHERITANCE_CACHE_SIZE = 256


@dataclass
class PropertySource:
    property_name: str
    source_schema: str
    inherited: bool = False
    overridden: bool = False


class InheritanceAnalyzer:
    """Computes property provenance across ``allOf`` chains."""

    def __init__(self):
        self.cache: Cache[str, dict[str, PropertySource]] = Cache(INHERITANCE_CACHE_SIZE, 0.2)

    def flatten_inheritance(self, schema: Schema | None, get_id: Callable[[Any], str]) -> dict[str, PropertySource]:
        """
        Map every property visible on a schema to its source.

        Properties contributed by ``allOf`` members are inherited; a name contributed
        twice, or redeclared locally, is marked overridden.

        Args:
            schema: Schema to analyze
            get_id: Function returning the class ID of a document node

        Returns:
            Property name -> PropertySource
        """
        if schema is None:
            return {}

        schema_id = get_id(schema)
        cached = self.cache.get(schema_id)
        if cached is not None:
            return cached

        sources: dict[str, PropertySource] = {}

        for member in schema.all_of:
            member_schema = member.schema
            if member_schema is None:
                continue
            member_id = get_id(member)
            for name in member_schema.properties:
                existing = sources.get(name)
                if existing is not None:
                    existing.overridden = True
                else:
                    sources[name] = PropertySource(property_name=name, source_schema=member_id, inherited=True)

        for name in schema.properties:
            sources[name] = PropertySource(
                property_name=name,
                source_schema=schema_id,
                inherited=False,
                overridden=name in sources,
            )

        self.cache.set(schema_id, sources)
        return sources

    def get_inherited_properties(self, sources: dict[str, PropertySource]) -> list[PropertySource]:
        return [source for source in sources.values() if source.inherited]

    def get_overridden_properties(self, sources: dict[str, PropertySource]) -> list[PropertySource]:
        return [source for source in sources.values() if source.overridden]

    def clear_cache(self) -> None:
        self.cache.clear()
