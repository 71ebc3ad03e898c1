"""
OpenAPI document graph.

A light-weight object model of an OpenAPI v3 document: every node exposes its
parent, its key and its JSON path; schema references resolve lazily.
"""

from .loader import DocumentLoadError, load_document
from .nodes import (
    Callback,
    Components,
    Discriminator,
    Document,
    DocumentNode,
    Example,
    Header,
    Info,
    Link,
    MediaType,
    Operation,
    Parameter,
    PathItem,
    Paths,
    RequestBody,
    Response,
    Responses,
    Schema,
    SchemaProxy,
    SecurityScheme,
    Server,
    Tag,
)
from .parser import DocumentParser, parse_document

__all__ = [
    "Callback",
    "Components",
    "Discriminator",
    "Document",
    "DocumentLoadError",
    "DocumentNode",
    "DocumentParser",
    "Example",
    "Header",
    "Info",
    "Link",
    "MediaType",
    "Operation",
    "Parameter",
    "PathItem",
    "Paths",
    "RequestBody",
    "Response",
    "Responses",
    "Schema",
    "SchemaProxy",
    "SecurityScheme",
    "Server",
    "Tag",
    "load_document",
    "parse_document",
]
