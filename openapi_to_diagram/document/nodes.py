"""
Node definitions for the OpenAPI document graph.

Every node knows its parent, the key it is stored under (for map members) and its
own segment of the JSON path, so any node can generate a path such as
``$.components.schemas['Pet'].properties['name']``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..log import get_logger

logger = get_logger(__name__)

COMPONENT_SCHEMA_PREFIX = "#/components/schemas/"

HTTP_METHODS = ("get", "post", "put", "delete", "patch", "options", "head", "trace")


@dataclass(eq=False)
class DocumentNode:
    """Base class for all document nodes."""

    # Key of the node in its parent map ("" for list items and fixed fields)
    key: str = ""

    parent: DocumentNode | None = field(default=None, repr=False)

    # This node's part of the JSON path, e.g. ".components" or "['Pet']"
    path_segment: str = field(default="", repr=False)

    # Raw mapping the node was built from
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    def generate_json_path(self) -> str:
        segments = []
        node: DocumentNode | None = self
        while node is not None:
            segments.append(node.path_segment)
            node = node.parent
        return "$" + "".join(reversed(segments))

    def get_parent(self) -> DocumentNode | None:
        return self.parent

    def find_document(self) -> Document | None:
        """Walk up the parent chain to the root document."""
        node: DocumentNode | None = self
        while node is not None:
            if isinstance(node, Document):
                return node
            node = node.parent
        return None


@dataclass(eq=False)
class Discriminator:
    """Discriminator object of a polymorphic schema."""

    property_name: str = ""
    mapping: dict[str, str] = field(default_factory=dict)


@dataclass(eq=False)
class Schema(DocumentNode):
    """A resolved schema object."""

    # Component key for schemas declared under components.schemas
    name: str = ""

    type: list[str] = field(default_factory=list)
    title: str = ""
    description: str = ""
    properties: dict[str, SchemaProxy] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)

    all_of: list[SchemaProxy] = field(default_factory=list)
    one_of: list[SchemaProxy] = field(default_factory=list)
    any_of: list[SchemaProxy] = field(default_factory=list)
    not_: SchemaProxy | None = None
    items: SchemaProxy | None = None

    # A schema, or a boolean when additionalProperties is true/false
    additional_properties: SchemaProxy | bool | None = None

    enum: list[Any] | None = None
    const: Any = None
    has_const: bool = False
    default: Any = None
    has_default: bool = False

    format: str = ""
    pattern: str = ""
    min_length: int | None = None
    max_length: int | None = None
    minimum: float | None = None
    maximum: float | None = None
    min_items: int | None = None
    max_items: int | None = None
    unique_items: bool | None = None

    discriminator: Discriminator | None = None

    read_only: bool | None = None
    write_only: bool | None = None
    nullable: bool | None = None
    deprecated: bool | None = None

    @property
    def first_type(self) -> str:
        """First entry of the type vector, or "" when untyped."""
        return self.type[0] if self.type else ""


@dataclass(eq=False)
class SchemaProxy(DocumentNode):
    """A schema slot: either an inline schema or a ``$ref``."""

    ref: str = ""
    inline_schema: Schema | None = field(default=None, repr=False)

    def is_reference(self) -> bool:
        return bool(self.ref)

    def get_reference(self) -> str:
        return self.ref

    @property
    def schema(self) -> Schema | None:
        """The schema behind this slot.

        Local component references resolve to the canonical component schema, other
        local pointers to a schema built from the target, external references to None.
        """
        if not self.ref:
            return self.inline_schema
        document = self.find_document()
        if document is None:
            return None
        return document.resolve_schema_reference(self.ref)


@dataclass(eq=False)
class Info(DocumentNode):
    title: str = ""
    version: str = ""
    description: str = ""


@dataclass(eq=False)
class Server(DocumentNode):
    url: str = ""
    description: str = ""


@dataclass(eq=False)
class Tag(DocumentNode):
    name: str = ""
    description: str = ""


@dataclass(eq=False)
class Example(DocumentNode):
    summary: str = ""
    description: str = ""
    value: Any = None
    external_value: str = ""


@dataclass(eq=False)
class Link(DocumentNode):
    operation_id: str = ""
    operation_ref: str = ""
    description: str = ""


@dataclass(eq=False)
class Header(DocumentNode):
    description: str = ""
    required: bool = False
    deprecated: bool = False
    schema: SchemaProxy | None = None


@dataclass(eq=False)
class MediaType(DocumentNode):
    schema: SchemaProxy | None = None
    examples: dict[str, Example] = field(default_factory=dict)


@dataclass(eq=False)
class Parameter(DocumentNode):
    name: str = ""
    in_: str = ""
    description: str = ""
    required: bool | None = None
    deprecated: bool = False
    schema: SchemaProxy | None = None


@dataclass(eq=False)
class RequestBody(DocumentNode):
    description: str = ""
    required: bool | None = None
    content: dict[str, MediaType] = field(default_factory=dict)


@dataclass(eq=False)
class Response(DocumentNode):
    description: str = ""
    headers: dict[str, Header] = field(default_factory=dict)
    content: dict[str, MediaType] = field(default_factory=dict)
    links: dict[str, Link] = field(default_factory=dict)


@dataclass(eq=False)
class Responses(DocumentNode):
    codes: dict[str, Response] = field(default_factory=dict)
    default: Response | None = None


@dataclass(eq=False)
class Callback(DocumentNode):
    # Runtime expression -> path item
    expressions: dict[str, PathItem] = field(default_factory=dict)


@dataclass(eq=False)
class Operation(DocumentNode):
    operation_id: str = ""
    summary: str = ""
    description: str = ""
    tags: list[str] = field(default_factory=list)
    deprecated: bool = False
    parameters: list[Parameter] = field(default_factory=list)
    request_body: RequestBody | None = None
    responses: Responses | None = None
    callbacks: dict[str, Callback] = field(default_factory=dict)


@dataclass(eq=False)
class PathItem(DocumentNode):
    summary: str = ""
    description: str = ""
    get: Operation | None = None
    post: Operation | None = None
    put: Operation | None = None
    delete: Operation | None = None
    patch: Operation | None = None
    options: Operation | None = None
    head: Operation | None = None
    trace: Operation | None = None
    parameters: list[Parameter] = field(default_factory=list)


@dataclass(eq=False)
class Paths(DocumentNode):
    items: dict[str, PathItem] = field(default_factory=dict)


@dataclass(eq=False)
class SecurityScheme(DocumentNode):
    type: str = ""
    scheme: str = ""
    name: str = ""
    in_: str = ""
    bearer_format: str = ""
    description: str = ""


@dataclass(eq=False)
class Components(DocumentNode):
    schemas: dict[str, SchemaProxy] = field(default_factory=dict)
    responses: dict[str, Response] = field(default_factory=dict)
    parameters: dict[str, Parameter] = field(default_factory=dict)
    examples: dict[str, Example] = field(default_factory=dict)
    request_bodies: dict[str, RequestBody] = field(default_factory=dict)
    headers: dict[str, Header] = field(default_factory=dict)
    security_schemes: dict[str, SecurityScheme] = field(default_factory=dict)
    links: dict[str, Link] = field(default_factory=dict)
    callbacks: dict[str, Callback] = field(default_factory=dict)


@dataclass(eq=False)
class Document(DocumentNode):
    """Root of the OpenAPI document graph."""

    openapi: str = ""
    info: Info | None = None
    servers: list[Server] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)
    paths: Paths | None = None
    components: Components | None = None

    # Where the document was loaded from, if anywhere
    source: str = ""

    # Schemas built from local JSON pointers, keyed by reference
    _pointer_schemas: dict[str, Schema | None] = field(default_factory=dict, repr=False)

    # References currently being resolved (guards reference-only cycles)
    _resolving: set[str] = field(default_factory=set, repr=False)

    def resolve_schema_reference(self, ref: str) -> Schema | None:
        """
        Resolve a local reference to a schema.

        Args:
            ref: Reference string, e.g. "#/components/schemas/Pet"

        Returns:
            The referenced schema, or None for external or unresolvable references
        """
        if not ref or not ref.startswith("#/"):
            return None
        if ref in self._resolving:
            logger.warning(f"Reference cycle without a schema body: {ref}")
            return None

        self._resolving.add(ref)
        try:
            name = ref.removeprefix(COMPONENT_SCHEMA_PREFIX)
            if ref.startswith(COMPONENT_SCHEMA_PREFIX) and "/" not in name:
                name = _unescape_pointer_token(name)
                proxy = self.components.schemas.get(name) if self.components else None
                if proxy is None:
                    logger.warning(f"Unresolvable schema reference: {ref}")
                    return None
                return proxy.schema
            return self._resolve_pointer_schema(ref)
        finally:
            self._resolving.discard(ref)

    def _resolve_pointer_schema(self, ref: str) -> Schema | None:
        if ref in self._pointer_schemas:
            return self._pointer_schemas[ref]

        from .parser import DocumentParser, pointer_to_json_path, resolve_pointer

        target = resolve_pointer(self.raw, ref)
        schema = None
        if isinstance(target, dict):
            schema = DocumentParser().parse_schema(target, parent=self, path_segment=pointer_to_json_path(ref))
        else:
            logger.warning(f"Unresolvable schema reference: {ref}")
        self._pointer_schemas[ref] = schema
        return schema


def _unescape_pointer_token(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")
