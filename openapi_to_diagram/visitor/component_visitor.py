"""
Visits the non-schema objects of a document.

Each object becomes a class with a few summary rows; its children are visited
through the driver and linked from it with an edge labelled after their slot.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from ..diagram.model import DiagramClass, DiagramMethod, DiagramProperty, RelationType
from ..document.nodes import (
    HTTP_METHODS,
    Callback,
    Components,
    Document,
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
    SecurityScheme,
    Server,
    Tag,
)
from ..log import get_logger

if TYPE_CHECKING:
    from .visitor import DiagramVisitor

logger = get_logger(__name__)


def _row(name: str, type_: str = "string", default: str = "") -> DiagramProperty:
    return DiagramProperty(name=name, type=type_, default=default)


class ComponentVisitor:
    """Builds the classes of documents, paths, operations and the component buckets."""

    def __init__(self, visitor: DiagramVisitor):
        self.visitor = visitor

    @property
    def handlers(self) -> dict[type, Callable[[Any], None]]:
        """Node type -> visit method."""
        return {
            Document: self.visit_document,
            Info: self.visit_info,
            Paths: self.visit_paths,
            PathItem: self.visit_path_item,
            Operation: self.visit_operation,
            Components: self.visit_components,
            Parameter: self.visit_parameter,
            Responses: self.visit_responses,
            Response: self.visit_response,
            RequestBody: self.visit_request_body,
            MediaType: self.visit_media_type,
            SecurityScheme: self.visit_security_scheme,
            Server: self.visit_server,
            Tag: self.visit_tag,
            Example: self.visit_example,
            Header: self.visit_header,
            Link: self.visit_link,
            Callback: self.visit_callback,
        }

    def _link(self, source, target, rel_type: RelationType, label: str = "", cardinality: str = "") -> None:
        v = self.visitor
        v.add_relationship(v.get_class_id(source), v.get_class_id(target), rel_type, label, cardinality)

    def _link_schema(self, source, proxy, label: str) -> None:
        if proxy is None:
            return
        self.visitor.schemas.visit_schema_proxy(proxy)
        self._link(source, proxy, RelationType.COMPOSITION, label)

    def visit_document(self, document: Document) -> None:
        v = self.visitor
        cls = DiagramClass(id=v.get_class_id(document), name="OpenAPI Document")
        cls.add_property(_row("version"))
        v.add_class(cls)

        if document.info is not None:
            v.visit(document.info)
            self._link(document, document.info, RelationType.COMPOSITION)
        if document.paths is not None:
            v.visit(document.paths)
            self._link(document, document.paths, RelationType.COMPOSITION)
        if document.components is not None:
            v.visit(document.components)
            self._link(document, document.components, RelationType.COMPOSITION)
        for server in document.servers:
            v.visit(server)
            self._link(document, server, RelationType.AGGREGATION, cardinality="0..*")
        for tag in document.tags:
            v.visit(tag)
            self._link(document, tag, RelationType.AGGREGATION, cardinality="0..*")

    def visit_info(self, info: Info) -> None:
        cls = DiagramClass(id=self.visitor.get_class_id(info), name="Info")
        for name in ("title", "version", "description"):
            if getattr(info, name):
                cls.add_property(_row(name))
        self.visitor.add_class(cls)

    def visit_paths(self, paths: Paths) -> None:
        v = self.visitor
        cls = DiagramClass(id=v.get_class_id(paths), name="API Paths")
        cls.add_property(_row("pathCount", "int", str(len(paths.items))))
        v.add_class(cls)

        for path, path_item in paths.items.items():
            if not v.should_visit_path(path):
                logger.debug(f"Path {path} filtered out")
                continue
            v.visit(path_item)
            self._link(paths, path_item, RelationType.COMPOSITION, path, "1")

    def visit_path_item(self, path_item: PathItem) -> None:
        """
        Add a path item class with one method per HTTP operation.

        Operations are visited before the path item class is stored, each linked
        with a composition edge labelled with the upper-case method.
        """
        v = self.visitor
        cls = DiagramClass(id=v.get_class_id(path_item), name=v.identifier.extract_name(path_item))

        for method in HTTP_METHODS:
            operation = getattr(path_item, method)
            if operation is None:
                continue
            if isinstance(path_item.parent, Paths) and not v.should_visit_operation(operation):
                logger.debug(f"Operation {method.upper()} {path_item.key} filtered out")
                continue
            cls.add_method(DiagramMethod(name=method, return_type="Operation"))
            v.visit(operation)
            self._link(path_item, operation, RelationType.COMPOSITION, method.upper())

        v.add_class(cls)

        for param in path_item.parameters:
            v.visit(param)
            self._link(path_item, param, RelationType.AGGREGATION, cardinality="0..*")

    def visit_operation(self, operation: Operation) -> None:
        v = self.visitor
        cls = DiagramClass(
            id=v.get_class_id(operation), name=operation.operation_id or v.identifier.extract_name(operation)
        )
        if operation.summary:
            cls.add_property(_row("summary"))
        if operation.deprecated:
            cls.add_annotation("deprecated")
        v.add_class(cls)

        if operation.request_body is not None:
            v.visit(operation.request_body)
            self._link(operation, operation.request_body, RelationType.ASSOCIATION, "request")
        if operation.responses is not None:
            v.visit(operation.responses)
            self._link(operation, operation.responses, RelationType.ASSOCIATION, "responses")
        for param in operation.parameters:
            v.visit(param)
            self._link(operation, param, RelationType.DEPENDENCY, cardinality="0..*")
        for key, callback in operation.callbacks.items():
            v.visit(callback)
            self._link(operation, callback, RelationType.COMPOSITION, key)

    def visit_components(self, components: Components) -> None:
        """
        Add the components class and visit every bucket.

        Schemas are visited first so that the classes of referenced components
        exist before the objects that use them.
        """
        v = self.visitor
        v.add_class(DiagramClass(id=v.get_class_id(components), name="Components"))

        for proxy in components.schemas.values():
            self._link_schema(components, proxy, "schema")

        buckets = (
            (components.responses, "response"),
            (components.parameters, "parameter"),
            (components.request_bodies, "requestBody"),
            (components.security_schemes, "security"),
            (components.headers, "header"),
            (components.examples, "example"),
            (components.links, "link"),
            (components.callbacks, "callback"),
        )
        for bucket, label in buckets:
            for node in bucket.values():
                v.visit(node)
                self._link(components, node, RelationType.COMPOSITION, label)

    def visit_parameter(self, param: Parameter) -> None:
        v = self.visitor
        cls = DiagramClass(id=v.get_class_id(param), name=param.name or "Parameter")
        if param.in_:
            cls.add_property(_row("in", param.in_))
        if param.required:
            cls.add_property(_row("required", "boolean", "true"))
        if param.deprecated:
            cls.add_annotation("deprecated")
        v.add_class(cls)
        self._link_schema(param, param.schema, "schema")

    def visit_responses(self, responses: Responses) -> None:
        v = self.visitor
        v.add_class(DiagramClass(id=v.get_class_id(responses), name="Responses"))

        for code, response in responses.codes.items():
            v.visit(response)
            self._link(responses, response, RelationType.COMPOSITION, code)
        if responses.default is not None:
            v.visit(responses.default)
            self._link(responses, responses.default, RelationType.COMPOSITION, "default")

    def visit_response(self, response: Response) -> None:
        v = self.visitor
        cls = DiagramClass(id=v.get_class_id(response), name=response.key or "Response")
        if response.description:
            cls.add_property(_row("description"))
        v.add_class(cls)

        self._visit_content(response, response.content)
        for header in response.headers.values():
            v.visit(header)
            self._link(response, header, RelationType.AGGREGATION, "header")
        for link in response.links.values():
            v.visit(link)
            self._link(response, link, RelationType.ASSOCIATION, "link")

    def visit_request_body(self, request_body: RequestBody) -> None:
        v = self.visitor
        cls = DiagramClass(id=v.get_class_id(request_body), name=request_body.key or "RequestBody")
        if request_body.required:
            cls.add_property(_row("required", "boolean", "true"))
        v.add_class(cls)
        self._visit_content(request_body, request_body.content)

    def _visit_content(self, owner, content: dict[str, MediaType]) -> None:
        for media_key, media in content.items():
            self.visitor.visit(media)
            if media.schema is not None:
                self._link(owner, media.schema, RelationType.COMPOSITION, media_key)

    def visit_media_type(self, media: MediaType) -> None:
        # Media types are transparent: only their schema gets a class
        self.visitor.schemas.visit_schema_proxy(media.schema)

    def visit_security_scheme(self, scheme: SecurityScheme) -> None:
        cls = DiagramClass(id=self.visitor.get_class_id(scheme), name="SecurityScheme")
        cls.add_property(_row("type", scheme.type))
        if scheme.scheme:
            cls.add_property(_row("scheme", scheme.scheme))
        self.visitor.add_class(cls)

    def visit_server(self, server: Server) -> None:
        cls = DiagramClass(id=self.visitor.get_class_id(server), name="Server")
        cls.add_property(_row("url"))
        if server.description:
            cls.add_property(_row("description"))
        self.visitor.add_class(cls)

    def visit_tag(self, tag: Tag) -> None:
        cls = DiagramClass(id=self.visitor.get_class_id(tag), name=tag.name or "Tag", annotations=["tag"])
        if tag.description:
            cls.add_property(_row("description"))
        self.visitor.add_class(cls)

    def visit_example(self, example: Example) -> None:
        name = example.key or example.summary or "Example"
        cls = DiagramClass(id=self.visitor.get_class_id(example), name=name, annotations=["example"])
        if example.summary:
            cls.add_property(_row("summary"))
        self.visitor.add_class(cls)

    def visit_header(self, header: Header) -> None:
        v = self.visitor
        cls = DiagramClass(id=v.get_class_id(header), name=header.key or "Header")
        if header.required:
            cls.add_property(_row("required", "boolean", "true"))
        if header.deprecated:
            cls.add_annotation("deprecated")
        v.add_class(cls)
        self._link_schema(header, header.schema, "schema")

    def visit_link(self, link: Link) -> None:
        name = link.key or link.operation_id or "Link"
        cls = DiagramClass(id=self.visitor.get_class_id(link), name=name, annotations=["link"])
        if link.operation_id:
            cls.add_property(_row("operationId"))
        self.visitor.add_class(cls)

    def visit_callback(self, callback: Callback) -> None:
        v = self.visitor
        v.add_class(
            DiagramClass(id=v.get_class_id(callback), name=callback.key or "Callback", annotations=["callback"])
        )

        for expression, path_item in callback.expressions.items():
            v.visit(path_item)
            self._link(callback, path_item, RelationType.COMPOSITION, expression)
