"""
Discriminator analysis for polymorphic schemas.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from ..document.nodes import Schema, SchemaProxy
from ..utils import extract_schema_name_from_reference
from .cache import Cache
from .property_analyzer import format_schema_value

DISCRIMINATOR_CACHE_SIZE = 128


@dataclass
class DiscriminatorInfo:
    property_name: str
    # Discriminator value -> schema reference or class ID
    mapping: dict[str, str] = field(default_factory=dict)
    # True when the mapping was inferred from the variants
    implicit: bool = False
    base_schema: str = ""


class DiscriminatorAnalyzer:
    """Resolves explicit discriminator mappings and infers implicit ones."""

    def __init__(self):
        self.cache: Cache[str, DiscriminatorInfo] = Cache(DISCRIMINATOR_CACHE_SIZE, 0.2)

    def analyze_discriminator(self, schema: Schema | None, get_id: Callable[[Any], str]) -> DiscriminatorInfo | None:
        """
        Analyze the discriminator of a schema.

        Args:
            schema: Schema that may declare a discriminator
            get_id: Function returning the class ID of a document node

        Returns:
            Discriminator information, or None if no discriminator is declared
        """
        if schema is None:
            return None

        schema_id = get_id(schema)
        cached = self.cache.get(schema_id)
        if cached is not None:
            return cached

        disc = schema.discriminator
        if disc is None or not disc.property_name:
            return None

        info = DiscriminatorInfo(property_name=disc.property_name, base_schema=schema_id)
        if disc.mapping:
            info.mapping = dict(disc.mapping)
            info.implicit = False
        else:
            info.mapping = self.detect_implicit_mapping(schema, get_id)
            info.implicit = True

        self.cache.set(schema_id, info)
        return info

    def detect_implicit_mapping(self, schema: Schema | None, get_id: Callable[[Any], str]) -> dict[str, str]:
        """Infer value -> variant ID pairs from const or single-value enum discriminator properties."""
        mapping: dict[str, str] = {}
        if schema is None or schema.discriminator is None:
            return mapping

        variants = schema.one_of or schema.any_of
        prop_name = schema.discriminator.property_name

        for variant in variants:
            variant_id = get_id(variant)
            value = self._value_from_proxy(variant, prop_name)
            if value:
                mapping[value] = variant_id
            elif variant.is_reference():
                mapping[extract_schema_name_from_reference(variant.get_reference())] = variant_id

        return mapping

    def _value_from_proxy(self, proxy: SchemaProxy | None, prop_name: str, seen: set[int] | None = None) -> str:
        if proxy is None:
            return ""
        schema = proxy.schema
        if schema is None:
            return ""

        # allOf chains may loop back through references
        seen = seen if seen is not None else set()
        if id(schema) in seen:
            return ""
        seen.add(id(schema))

        prop = schema.properties.get(prop_name)
        if prop is not None:
            value = self._value_from_property(prop)
            if value:
                return value

        for member in schema.all_of:
            value = self._value_from_proxy(member, prop_name, seen)
            if value:
                return value
        return ""

    def _value_from_property(self, prop: SchemaProxy) -> str:
        schema = prop.schema
        if schema is None:
            return ""
        if schema.enum is not None and len(schema.enum) == 1:
            return format_schema_value(schema.enum[0])
        if schema.has_const:
            return format_schema_value(schema.const)
        return ""

    def get_discriminator_for_property(
        self, schema: Schema | None, property_name: str, get_id: Callable[[Any], str]
    ) -> DiscriminatorInfo | None:
        """Return the discriminator info if ``property_name`` is the discriminator property."""
        info = self.analyze_discriminator(schema, get_id)
        if info is not None and info.property_name == property_name:
            return info
        return None

    def clear_cache(self) -> None:
        self.cache.clear()
