"""
Class identifiers and display names for document nodes.

IDs are stable for a given document: they are derived from node kinds, keys,
operation context and JSON paths, never from traversal order.
"""

from __future__ import annotations

import re

from ..analyzer.external_reference import ExternalReferenceHandler
from ..document.nodes import (
    Callback,
    Components,
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
)
from ..utils import (
    extract_schema_name_from_reference,
    generate_name_from_context,
    generate_request_body_schema_name,
    generate_response_schema_name,
    sanitize_id,
)

SCHEMAS_PATTERN = re.compile(r"\.schemas\['([^']+)'\]")
PROPERTIES_PATTERN = re.compile(r"\.properties\['([^']+)'\]")
COMPOSITION_PATTERN = re.compile(r"\.(allOf|anyOf|oneOf)\[(\d+)\]")

# Nodes that exist once per document and always get the same class ID
_FIXED_IDS = {
    Document: "Document",
    Info: "Info",
    Paths: "Paths",
    Components: "Components",
}

UNKNOWN = "Unknown"


def simplify_path(path: str) -> str:
    """Turn a JSON path into an identifier, e.g. ``$.paths['/pets']`` -> ``paths__pets``."""
    path = path.replace("$.", "")
    for old, new in ((".", "_"), ("[", "_"), ("]", ""), ("'", ""), ("/", "_"), ("{", "_"), ("}", "_"), ("-", "_")):
        path = path.replace(old, new)
    if path and not ("A" <= path[0] <= "Z" or "a" <= path[0] <= "z"):
        path = "C_" + path
    return path


def generate_composition_member_id(path: str, keyword: str, index: str) -> str:
    """ID of an inline allOf/anyOf/oneOf member, e.g. ``Payment_source_anyOf_0``."""
    schema_match = SCHEMAS_PATTERN.search(path)
    prop_match = PROPERTIES_PATTERN.search(path)
    if schema_match and prop_match:
        base = f"{schema_match.group(1)}_{prop_match.group(1)}"
    elif schema_match:
        base = schema_match.group(1)
    else:
        base = "Inline"
    return f"{base}_{keyword}_{index}"


class Identifier:
    """Computes class IDs, parent context names and schema display names."""

    def __init__(self, external_handler: ExternalReferenceHandler | None = None):
        self.external_handler = external_handler or ExternalReferenceHandler()

    def get_class_id(self, obj) -> str:
        """
        Return the class ID for a document node.

        Parameters use their name and headers their key. Responses, request bodies,
        examples, links, callbacks and media types are prefixed with the name of
        their operation or response. Schemas use their semantic payload name, their
        component key, their title, and finally a name derived from their JSON path.
        Unknown objects fall back to their type name.

        Args:
            obj: Document node (or any object)

        Returns:
            Raw (unsanitized) class ID
        """
        if obj is None:
            return UNKNOWN

        fixed = _FIXED_IDS.get(type(obj))
        if fixed is not None:
            return fixed

        if isinstance(obj, Parameter) and obj.name:
            return obj.name

        if isinstance(obj, Header) and obj.key:
            return obj.key

        if isinstance(obj, Response) and obj.key:
            return self._with_parent_context(obj.parent, obj.key)

        if isinstance(obj, Responses):
            parent_name = self.get_parent_context_name(obj.parent)
            if parent_name and parent_name != UNKNOWN:
                return f"{parent_name}_Responses"

        if isinstance(obj, RequestBody):
            parent_name = self.get_parent_context_name(obj.parent)
            if isinstance(obj.parent, Operation) and parent_name:
                return f"{parent_name}_RequestBody"
            if obj.key:
                return obj.key
            if parent_name and parent_name != UNKNOWN:
                return f"{parent_name}_RequestBody"

        if isinstance(obj, (Example, Link, Callback)) and obj.key:
            return self._with_parent_context(obj.parent, obj.key)

        if isinstance(obj, MediaType) and obj.key:
            return self._media_type_id(obj)

        if isinstance(obj, Schema):
            semantic_name = self.generate_semantic_schema_name(obj)
            if semantic_name:
                return semantic_name
            if obj.name:
                return obj.name
            if obj.title:
                return sanitize_id(obj.title)

        if isinstance(obj, SchemaProxy):
            proxy_id = self._proxy_id(obj)
            if proxy_id:
                return proxy_id

        if isinstance(obj, DocumentNode):
            return self._path_id(obj)

        return type(obj).__name__

    def _with_parent_context(self, parent: DocumentNode | None, key: str) -> str:
        parent_name = self.get_parent_context_name(parent)
        if parent_name and parent_name != UNKNOWN:
            return f"{parent_name}_{key}"
        return key

    def _media_type_id(self, media: MediaType) -> str:
        parent = media.parent
        if isinstance(parent, (Response, RequestBody)) and parent.key:
            parent_name = parent.key
        elif parent is not None:
            parent_name = self.get_class_id(parent)
        else:
            parent_name = ""

        key = media.key.replace("/", "_").replace("+", "_").replace("-", "_")
        if parent_name and parent_name != UNKNOWN:
            return f"{parent_name}_{key}"
        return key

    def _proxy_id(self, proxy: SchemaProxy) -> str:
        if proxy.is_reference():
            ref = proxy.get_reference()
            if self.external_handler.is_external(ref):
                return ref
            schema = proxy.schema
            if schema is not None:
                return self.get_class_id(schema)
            return extract_schema_name_from_reference(ref)

        schema = proxy.schema
        if schema is not None:
            return self.get_class_id(schema)
        return ""

    def _path_id(self, node: DocumentNode) -> str:
        path = node.generate_json_path()
        if not path:
            return type(node).__name__

        composition = COMPOSITION_PATTERN.search(path)
        if composition:
            return generate_composition_member_id(path, composition.group(1), composition.group(2))

        if ".properties[" in path:
            schema_match = SCHEMAS_PATTERN.search(path)
            prop_match = PROPERTIES_PATTERN.search(path)
            if schema_match and prop_match:
                return f"{schema_match.group(1)}_{prop_match.group(1)}"
        elif ".schemas[" in path:
            schema_match = SCHEMAS_PATTERN.search(path)
            if schema_match:
                return schema_match.group(1)

        return simplify_path(path)

    def get_parent_context_name(self, parent: DocumentNode | None) -> str:
        """Short name of a node's parent used to prefix child IDs."""
        if parent is None:
            return ""

        if isinstance(parent, Operation):
            return parent.operation_id or generate_name_from_context(parent)

        if isinstance(parent, Responses):
            return self.get_parent_context_name(parent.parent)

        if isinstance(parent, Response) and parent.key:
            context = self.get_parent_context_name(parent.parent)
            if context and context != UNKNOWN:
                return f"{context}_{parent.key}"
            return parent.key

        if isinstance(parent, RequestBody):
            if parent.parent is not None and not isinstance(parent.parent, Components):
                return self.get_parent_context_name(parent.parent)
            if parent.key:
                return parent.key

        if isinstance(parent, Schema) and parent.name:
            return parent.name

        if isinstance(parent, Parameter) and parent.name:
            return parent.name

        if isinstance(parent, PathItem) and parent.key:
            return parent.key.replace("/", "_").replace("{", "").replace("}", "").removeprefix("_")

        if isinstance(parent, MediaType) and parent.key:
            return parent.key.replace("/", "_")

        return self.get_class_id(parent)

    def extract_name(self, obj) -> str:
        """Last segment of the node's JSON path, e.g. ``paths_/pets``."""
        if isinstance(obj, DocumentNode):
            last = obj.generate_json_path().split(".")[-1]
            last = last.replace("[", "_").replace("]", "").replace("'", "")
            if last and last != "$":
                return last
        return type(obj).__name__

    def extract_schema_name(self, schema: Schema) -> str:
        """Display name of a schema class: title, payload name, component key, then path."""
        if schema.title:
            return schema.title

        semantic_name = self.generate_semantic_schema_name(schema)
        if semantic_name:
            return semantic_name

        if schema.name:
            return schema.name

        name = self.extract_name(schema)
        if name.lower() == "schema":
            class_id = self.get_class_id(schema)
            if class_id.lower() != "schema":
                return class_id
        return name

    def generate_semantic_schema_name(self, schema: Schema | None) -> str:
        """
        Name the top-level payload schema of a response or request body.

        Only schemas sitting directly in a media type qualify; nested property
        schemas and component schemas get no semantic name.

        Returns:
            e.g. ``ListPets200Response`` or ``CreatePetRequest``; "" when not a payload
        """
        if schema is None:
            return ""

        current = schema.parent
        if isinstance(current, SchemaProxy):
            if isinstance(current.parent, Schema):
                return ""
            current = current.parent

        if not isinstance(current, MediaType):
            return ""

        response = None
        request_body = None
        operation = None
        while current is not None and operation is None:
            if isinstance(current, Response):
                response = current
            elif isinstance(current, RequestBody):
                request_body = current
            elif isinstance(current, Operation):
                operation = current
                break
            current = current.parent

        if operation is None:
            return ""
        if response is not None and response.key:
            return generate_response_schema_name(operation, response.key)
        if request_body is not None:
            return generate_request_body_schema_name(operation)
        return ""
