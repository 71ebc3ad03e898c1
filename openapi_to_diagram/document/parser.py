"""
OpenAPI document parser.

Builds the node graph of ``nodes.py`` from a plain dictionary. Schema references
are kept as references and resolved lazily; references to other component types
(parameters, responses, ...) are resolved while parsing.
"""

from __future__ import annotations

from typing import Any

from ..log import get_logger
from .nodes import (
    HTTP_METHODS,
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

logger = get_logger(__name__)

# Object members whose children are keyed by name
_MAP_FIELDS = {
    "schemas",
    "properties",
    "paths",
    "responses",
    "parameters",
    "content",
    "headers",
    "examples",
    "links",
    "callbacks",
    "requestBodies",
    "securitySchemes",
}

# Hops allowed when following chains of non-schema references
_MAX_REF_HOPS = 16


def map_segment(key: str) -> str:
    return f"['{key}']"


def index_segment(index: int) -> str:
    return f"[{index}]"


def resolve_pointer(data: Any, ref: str) -> Any:
    """Follow a local JSON pointer ("#/a/b") through raw data; None when it does not resolve."""
    if not ref.startswith("#"):
        return None
    current = data
    for token in ref.removeprefix("#").strip("/").split("/"):
        if token == "":
            continue
        token = token.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict):
            if token not in current:
                return None
            current = current[token]
        elif isinstance(current, list) and token.isdigit() and int(token) < len(current):
            current = current[int(token)]
        else:
            return None
    return current


def pointer_to_json_path(ref: str) -> str:
    """Convert "#/components/schemas/Pet" into ".components.schemas['Pet']"."""
    segments = []
    previous = ""
    for token in ref.removeprefix("#").strip("/").split("/"):
        token = token.replace("~1", "/").replace("~0", "~")
        if token.isdigit() and previous in ("allOf", "oneOf", "anyOf", "parameters", "servers", "tags"):
            segments.append(index_segment(int(token)))
        elif previous in _MAP_FIELDS:
            segments.append(map_segment(token))
        else:
            segments.append(f".{token}")
        previous = token
    return "".join(segments)


def _as_bool(value: Any) -> bool | None:
    if value is None:
        return None
    return bool(value)


class DocumentParser:
    """Parses an OpenAPI dictionary into a Document."""

    def __init__(self):
        self._root: dict[str, Any] = {}

    def parse(self, data: dict[str, Any], source: str = "") -> Document:
        """
        Parse an OpenAPI document.

        Args:
            data: The OpenAPI document as a dictionary
            source: Where the document came from (for messages)

        Returns:
            Root Document node
        """
        self._root = data
        doc = Document(raw=data, source=source, openapi=str(data.get("openapi", "")))

        if isinstance(data.get("info"), dict):
            info = data["info"]
            doc.info = Info(
                parent=doc,
                path_segment=".info",
                raw=info,
                title=str(info.get("title", "")),
                version=str(info.get("version", "")),
                description=info.get("description", ""),
            )

        for i, server in enumerate(data.get("servers") or []):
            doc.servers.append(
                Server(
                    parent=doc,
                    path_segment=f".servers{index_segment(i)}",
                    raw=server,
                    url=server.get("url", ""),
                    description=server.get("description", ""),
                )
            )

        for i, tag in enumerate(data.get("tags") or []):
            doc.tags.append(
                Tag(
                    parent=doc,
                    path_segment=f".tags{index_segment(i)}",
                    raw=tag,
                    name=tag.get("name", ""),
                    description=tag.get("description", ""),
                )
            )

        if isinstance(data.get("paths"), dict):
            doc.paths = self._parse_paths(data["paths"], doc)

        if isinstance(data.get("components"), dict):
            doc.components = self._parse_components(data["components"], doc)

        return doc

    def _deref(self, raw: Any) -> Any:
        """Follow local ``$ref`` chains of non-schema objects."""
        hops = 0
        while isinstance(raw, dict) and isinstance(raw.get("$ref"), str) and hops < _MAX_REF_HOPS:
            target = resolve_pointer(self._root, raw["$ref"])
            if target is None:
                logger.warning(f"Unresolvable reference: {raw['$ref']}")
                return {}
            raw = target
            hops += 1
        return raw if isinstance(raw, dict) else {}

    def _parse_paths(self, raw: dict[str, Any], parent: DocumentNode) -> Paths:
        paths = Paths(parent=parent, path_segment=".paths", raw=raw)
        for path, item in raw.items():
            if isinstance(item, dict):
                paths.items[path] = self._parse_path_item(item, paths, path, map_segment(path))
        return paths

    def _parse_path_item(self, raw: dict[str, Any], parent: DocumentNode, key: str, segment: str) -> PathItem:
        raw = self._deref(raw)
        item = PathItem(
            key=key,
            parent=parent,
            path_segment=segment,
            raw=raw,
            summary=raw.get("summary", ""),
            description=raw.get("description", ""),
        )
        for method in HTTP_METHODS:
            if isinstance(raw.get(method), dict):
                setattr(item, method, self._parse_operation(raw[method], item, method))
        item.parameters = self._parse_parameter_list(raw.get("parameters"), item)
        return item

    def _parse_operation(self, raw: dict[str, Any], parent: PathItem, method: str) -> Operation:
        op = Operation(
            key=method,
            parent=parent,
            path_segment=f".{method}",
            raw=raw,
            operation_id=raw.get("operationId", ""),
            summary=raw.get("summary", ""),
            description=raw.get("description", ""),
            tags=list(raw.get("tags") or []),
            deprecated=bool(raw.get("deprecated", False)),
        )
        op.parameters = self._parse_parameter_list(raw.get("parameters"), op)
        if "requestBody" in raw:
            op.request_body = self._parse_request_body(raw["requestBody"], op, "", ".requestBody")
        if isinstance(raw.get("responses"), dict):
            op.responses = self._parse_responses(raw["responses"], op)
        for name, callback in (raw.get("callbacks") or {}).items():
            op.callbacks[name] = self._parse_callback(callback, op, name, f".callbacks{map_segment(name)}")
        return op

    def _parse_parameter_list(self, raw: Any, parent: DocumentNode) -> list[Parameter]:
        return [
            self._parse_parameter(param, parent, "", f".parameters{index_segment(i)}")
            for i, param in enumerate(raw or [])
        ]

    def _parse_parameter(self, raw: Any, parent: DocumentNode, key: str, segment: str) -> Parameter:
        raw = self._deref(raw)
        param = Parameter(
            key=key,
            parent=parent,
            path_segment=segment,
            raw=raw,
            name=raw.get("name", ""),
            in_=raw.get("in", ""),
            description=raw.get("description", ""),
            required=_as_bool(raw.get("required")),
            deprecated=bool(raw.get("deprecated", False)),
        )
        if "schema" in raw:
            param.schema = self.parse_schema_proxy(raw["schema"], param, "", ".schema")
        return param

    def _parse_request_body(self, raw: Any, parent: DocumentNode, key: str, segment: str) -> RequestBody:
        raw = self._deref(raw)
        body = RequestBody(
            key=key,
            parent=parent,
            path_segment=segment,
            raw=raw,
            description=raw.get("description", ""),
            required=_as_bool(raw.get("required")),
        )
        body.content = self._parse_content(raw.get("content"), body)
        return body

    def _parse_content(self, raw: Any, parent: DocumentNode) -> dict[str, MediaType]:
        content = {}
        for media_key, media_raw in (raw or {}).items():
            media_raw = media_raw if isinstance(media_raw, dict) else {}
            media = MediaType(
                key=media_key, parent=parent, path_segment=f".content{map_segment(media_key)}", raw=media_raw
            )
            if "schema" in media_raw:
                media.schema = self.parse_schema_proxy(media_raw["schema"], media, "", ".schema")
            for name, example in (media_raw.get("examples") or {}).items():
                media.examples[name] = self._parse_example(example, media, name, f".examples{map_segment(name)}")
            content[media_key] = media
        return content

    def _parse_responses(self, raw: dict[str, Any], parent: Operation) -> Responses:
        responses = Responses(parent=parent, path_segment=".responses", raw=raw)
        for code, response in raw.items():
            code = str(code)
            if code.startswith("x-"):
                continue
            parsed = self._parse_response(response, responses, code, map_segment(code))
            if code == "default":
                responses.default = parsed
            else:
                responses.codes[code] = parsed
        return responses

    def _parse_response(self, raw: Any, parent: DocumentNode, key: str, segment: str) -> Response:
        raw = self._deref(raw)
        response = Response(
            key=key, parent=parent, path_segment=segment, raw=raw, description=raw.get("description", "")
        )
        for name, header in (raw.get("headers") or {}).items():
            response.headers[name] = self._parse_header(header, response, name, f".headers{map_segment(name)}")
        response.content = self._parse_content(raw.get("content"), response)
        for name, link in (raw.get("links") or {}).items():
            response.links[name] = self._parse_link(link, response, name, f".links{map_segment(name)}")
        return response

    def _parse_header(self, raw: Any, parent: DocumentNode, key: str, segment: str) -> Header:
        raw = self._deref(raw)
        header = Header(
            key=key,
            parent=parent,
            path_segment=segment,
            raw=raw,
            description=raw.get("description", ""),
            required=bool(raw.get("required", False)),
            deprecated=bool(raw.get("deprecated", False)),
        )
        if "schema" in raw:
            header.schema = self.parse_schema_proxy(raw["schema"], header, "", ".schema")
        return header

    def _parse_example(self, raw: Any, parent: DocumentNode, key: str, segment: str) -> Example:
        raw = self._deref(raw)
        return Example(
            key=key,
            parent=parent,
            path_segment=segment,
            raw=raw,
            summary=raw.get("summary", ""),
            description=raw.get("description", ""),
            value=raw.get("value"),
            external_value=raw.get("externalValue", ""),
        )

    def _parse_link(self, raw: Any, parent: DocumentNode, key: str, segment: str) -> Link:
        raw = self._deref(raw)
        return Link(
            key=key,
            parent=parent,
            path_segment=segment,
            raw=raw,
            operation_id=raw.get("operationId", ""),
            operation_ref=raw.get("operationRef", ""),
            description=raw.get("description", ""),
        )

    def _parse_callback(self, raw: Any, parent: DocumentNode, key: str, segment: str) -> Callback:
        raw = self._deref(raw)
        callback = Callback(key=key, parent=parent, path_segment=segment, raw=raw)
        for expression, item in raw.items():
            if isinstance(item, dict) and not expression.startswith("x-"):
                callback.expressions[expression] = self._parse_path_item(
                    item, callback, expression, map_segment(expression)
                )
        return callback

    def _parse_security_scheme(self, raw: Any, parent: DocumentNode, key: str, segment: str) -> SecurityScheme:
        raw = self._deref(raw)
        return SecurityScheme(
            key=key,
            parent=parent,
            path_segment=segment,
            raw=raw,
            type=raw.get("type", ""),
            scheme=raw.get("scheme", ""),
            name=raw.get("name", ""),
            in_=raw.get("in", ""),
            bearer_format=raw.get("bearerFormat", ""),
            description=raw.get("description", ""),
        )

    def _parse_components(self, raw: dict[str, Any], parent: Document) -> Components:
        comp = Components(parent=parent, path_segment=".components", raw=raw)

        for name, schema in (raw.get("schemas") or {}).items():
            proxy = self.parse_schema_proxy(schema, comp, name, f".schemas{map_segment(name)}")
            if proxy.inline_schema is not None:
                proxy.inline_schema.name = name
            comp.schemas[name] = proxy

        sections = [
            ("responses", comp.responses, self._parse_response),
            ("parameters", comp.parameters, self._parse_parameter),
            ("examples", comp.examples, self._parse_example),
            ("requestBodies", comp.request_bodies, self._parse_request_body),
            ("headers", comp.headers, self._parse_header),
            ("securitySchemes", comp.security_schemes, self._parse_security_scheme),
            ("links", comp.links, self._parse_link),
            ("callbacks", comp.callbacks, self._parse_callback),
        ]
        for section, target, parse_member in sections:
            for name, member in (raw.get(section) or {}).items():
                target[name] = parse_member(member, comp, name, f".{section}{map_segment(name)}")

        return comp

    def parse_schema_proxy(self, raw: Any, parent: DocumentNode, key: str, segment: str) -> SchemaProxy:
        """
        Parse a schema slot.

        Args:
            raw: Raw schema (may contain $ref)
            parent: Owning node
            key: Key of the slot in its parent map
            segment: JSON path segment of the slot

        Returns:
            SchemaProxy wrapping either a reference or an inline schema
        """
        if isinstance(raw, dict) and isinstance(raw.get("$ref"), str):
            return SchemaProxy(key=key, parent=parent, path_segment=segment, raw=raw, ref=raw["$ref"])

        proxy = SchemaProxy(key=key, parent=parent, path_segment=segment, raw=raw if isinstance(raw, dict) else {})
        # The schema shares the proxy's JSON path
        proxy.inline_schema = self.parse_schema(raw if isinstance(raw, dict) else {}, parent=proxy, path_segment="")
        return proxy

    def parse_schema(self, raw: dict[str, Any], parent: DocumentNode | None, path_segment: str) -> Schema:
        """Parse an inline schema object and its sub-schemas."""
        schema = Schema(parent=parent, path_segment=path_segment, raw=raw)

        schema_type = raw.get("type")
        if isinstance(schema_type, str):
            schema.type = [schema_type]
        elif isinstance(schema_type, list):
            schema.type = [str(t) for t in schema_type]

        schema.title = raw.get("title", "")
        schema.description = raw.get("description", "")
        schema.required = list(raw.get("required") or [])

        for name, prop in (raw.get("properties") or {}).items():
            schema.properties[name] = self.parse_schema_proxy(prop, schema, name, f".properties{map_segment(name)}")

        for keyword, attr in (("allOf", "all_of"), ("oneOf", "one_of"), ("anyOf", "any_of")):
            members = [
                self.parse_schema_proxy(member, schema, "", f".{keyword}{index_segment(i)}")
                for i, member in enumerate(raw.get(keyword) or [])
            ]
            setattr(schema, attr, members)

        if isinstance(raw.get("not"), dict):
            schema.not_ = self.parse_schema_proxy(raw["not"], schema, "", ".not")
        if isinstance(raw.get("items"), dict):
            schema.items = self.parse_schema_proxy(raw["items"], schema, "", ".items")

        additional = raw.get("additionalProperties")
        if isinstance(additional, dict):
            schema.additional_properties = self.parse_schema_proxy(additional, schema, "", ".additionalProperties")
        elif isinstance(additional, bool):
            schema.additional_properties = additional

        if isinstance(raw.get("enum"), list):
            schema.enum = list(raw["enum"])
        if "const" in raw:
            schema.const = raw["const"]
            schema.has_const = True
        if "default" in raw:
            schema.default = raw["default"]
            schema.has_default = True

        schema.format = raw.get("format", "")
        schema.pattern = raw.get("pattern", "")
        schema.min_length = raw.get("minLength")
        schema.max_length = raw.get("maxLength")
        schema.minimum = raw.get("minimum")
        schema.maximum = raw.get("maximum")
        schema.min_items = raw.get("minItems")
        schema.max_items = raw.get("maxItems")
        schema.unique_items = _as_bool(raw.get("uniqueItems"))

        if isinstance(raw.get("discriminator"), dict):
            disc = raw["discriminator"]
            schema.discriminator = Discriminator(
                property_name=disc.get("propertyName", ""),
                mapping=dict(disc.get("mapping") or {}),
            )

        schema.read_only = _as_bool(raw.get("readOnly"))
        schema.write_only = _as_bool(raw.get("writeOnly"))
        schema.deprecated = _as_bool(raw.get("deprecated"))
        schema.nullable = _as_bool(raw.get("nullable"))
        if "null" in schema.type:
            schema.nullable = True

        return schema


def parse_document(data: dict[str, Any], source: str = "") -> Document:
    """Parse an OpenAPI dictionary into a Document."""
    return DocumentParser().parse(data, source=source)
