"""
External reference handling.

External references are not resolved; each becomes a placeholder class annotated
``external`` that records the file and fragment it points to.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..diagram.model import Diagram, DiagramClass
from ..utils import extract_schema_name_from_reference
from .cache import Cache

EXTERNAL_REFERENCE_CACHE_SIZE = 1000


@dataclass
class ExternalReference:
    ref: str
    file_path: str = ""
    fragment: str = ""
    schema_name: str = ""

    @property
    def is_external(self) -> bool:
        return bool(self.file_path)


class ExternalReferenceHandler:
    """Parses reference strings and builds placeholders for external targets."""

    def __init__(self, cache_size: int = EXTERNAL_REFERENCE_CACHE_SIZE):
        self._cache: Cache[str, ExternalReference] = Cache(cache_size, 0.2)

    def parse_external_reference(self, ref: str) -> ExternalReference | None:
        """
        Split a reference into file and fragment.

        ``#/...`` is local, ``file.yaml#/...`` and ``url#fragment`` are split at the
        first ``#``, and anything else is a whole-file reference.
        """
        if not ref:
            return None

        cached = self._cache.get(ref)
        if cached is not None:
            return cached

        ext = ExternalReference(ref=ref)
        if ref.startswith("#"):
            ext.fragment = ref
            ext.schema_name = extract_schema_name_from_reference(ref)
        elif "#" in ref:
            ext.file_path, ext.fragment = ref.split("#", 1)
        else:
            ext.file_path = ref

        if ext.file_path and ext.fragment:
            ext.schema_name = extract_schema_name_from_reference(ext.fragment)

        self._cache.set(ref, ext)
        return ext

    def is_external(self, ref: str) -> bool:
        ext = self.parse_external_reference(ref)
        return ext is not None and ext.is_external

    def create_external_placeholder(self, ref: str) -> DiagramClass | None:
        """Build the ``<<external>>`` class standing in for an external schema."""
        ext = self.parse_external_reference(ref)
        if ext is None:
            return None

        cls = DiagramClass(id=ref, name=ext.schema_name or "ExternalSchema", annotations=["external"])
        cls.metadata["ref"] = ref
        if ext.file_path:
            cls.metadata["file"] = ext.file_path
        if ext.fragment:
            cls.metadata["fragment"] = ext.fragment
        return cls

    def _target_reference(self, diagram: Diagram, target_id: str) -> ExternalReference | None:
        target = diagram.get_class(target_id)
        if target is None or "external" not in target.annotations:
            return None
        return self.parse_external_reference(target.metadata.get("ref", ""))

    def annotate_external_references(self, diagram: Diagram | None) -> None:
        """Mark edges that point at external placeholders with ``external``/``externalFile``."""
        if diagram is None:
            return
        for rel in diagram.relationships:
            ext = self._target_reference(diagram, rel.target_id)
            if ext is None:
                continue
            rel.metadata["external"] = True
            if ext.file_path:
                rel.metadata["externalFile"] = ext.file_path

    def get_external_references(self, diagram: Diagram | None) -> list[ExternalReference]:
        """External references targeted by the diagram's relationships, first seen first."""
        if diagram is None:
            return []
        found: dict[str, ExternalReference] = {}
        for rel in diagram.relationships:
            ext = self._target_reference(diagram, rel.target_id)
            if ext is not None and ext.ref not in found:
                found[ext.ref] = ext
        return list(found.values())

    def clear_cache(self) -> None:
        self._cache.clear()
