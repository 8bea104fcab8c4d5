"""Typed view of a Swagger 2.0 document.

The document envelope (info, paths, operations, parameters) is validated with
pydantic. Response schemas are turned into a small tagged tree of
:class:`Object`, :class:`Array` and :class:`Scalar` nodes for the flattener.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError

from .errors import MalformedDocument

TOKEN_REF = "#/parameters/token"
CHARACTER_PARAMETER = "character_id"
REF_PREFIX = "#/parameters/"


# --- Response schema nodes ---


@dataclass(frozen=True)
class Scalar:
    """A leaf schema: string, integer, number, boolean or anything unknown."""

    type: str | None
    format: str | None = None
    description: str | None = None
    title: str | None = None
    required: bool = False


@dataclass(frozen=True)
class Array:
    items: "SchemaNode"
    description: str | None = None
    title: str | None = None
    required: bool = False

    type = "array"
    format = None


@dataclass(frozen=True)
class Object:
    properties: dict[str, "SchemaNode"] = field(default_factory=dict)
    required_fields: tuple[str, ...] = ()
    description: str | None = None
    title: str | None = None

    type = "object"
    format = None


SchemaNode = Union[Object, Array, Scalar]


def _shape(value: Any, where: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise MalformedDocument(f"schema at {where} must be an object, got {type(value).__name__}")
    return value


def parse_schema(raw: Any, where: str = "schema") -> SchemaNode:
    """Turn one raw JSON schema into a tree of schema nodes.

    Raises :class:`MalformedDocument` naming the offending location when a node,
    its ``properties`` or its ``items`` is not a JSON object.
    """
    raw = _shape(raw, where)
    kind = raw.get("type")
    description = raw.get("description")
    title = raw.get("title")
    if kind == "object":
        required = raw.get("required")
        properties = _shape(raw.get("properties") or {}, f"{where}.properties")
        return Object(
            properties={
                name: parse_schema(prop, f"{where}.properties.{name}")
                for name, prop in properties.items()
            },
            required_fields=tuple(required) if isinstance(required, list) else (),
            description=description,
            title=title,
        )
    if kind == "array":
        return Array(
            items=parse_schema(raw.get("items") or {}, f"{where}.items"),
            description=description,
            title=title,
            required=raw.get("required") is True,
        )
    return Scalar(
        type=kind,
        format=raw.get("format"),
        description=description,
        title=title,
        required=raw.get("required") is True,
    )


# --- Document envelope ---


class _Model(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class Info(_Model):
    title: str
    version: str
    description: str | None = None


class Parameter(_Model):
    """An inline parameter, a shared catalog entry, or a ``$ref`` to one."""

    ref: str | None = Field(default=None, alias="$ref")
    name: str | None = None
    location: str | None = Field(default=None, alias="in")
    type: str | None = None
    format: str | None = None
    required: bool = False
    description: str | None = None

    @property
    def in_path(self) -> bool:
        return self.location == "path"


class Response(_Model):
    raw_schema: dict[str, Any] | None = Field(default=None, alias="schema")
    _node: SchemaNode | None = PrivateAttr(default=None)

    @property
    def schema_node(self) -> SchemaNode | None:
        if self._node is None and self.raw_schema is not None:
            self._node = parse_schema(self.raw_schema)
        return self._node


class Operation(_Model):
    operation_id: str = Field(alias="operationId")
    summary: str | None = None
    parameters: list[Parameter] = Field(default_factory=list)
    required_roles: list[str] | None = Field(default=None, alias="x-required-roles")
    responses: dict[str, Response] = Field(default_factory=dict)

    @property
    def success_schema(self) -> SchemaNode | None:
        response = self.responses.get("200")
        return response.schema_node if response else None


class PathItem(_Model):
    get: Operation | None = None


class Document(_Model):
    info: Info
    paths: dict[str, PathItem]
    parameters: dict[str, Parameter] = Field(default_factory=dict)

    def get_operations(self) -> Iterator[tuple[str, Operation]]:
        """Yield ``(path, operation)`` for every path that defines a GET."""
        for path, item in self.paths.items():
            if item.get is not None:
                yield path, item.get

    def shared_parameter(self, name: str) -> Parameter | None:
        return self.parameters.get(name)


def parse_document(raw: Any) -> Document:
    """Validate a decoded JSON document, including every GET success schema."""
    try:
        doc = Document.model_validate(raw)
    except ValidationError as exc:
        raise MalformedDocument(f"not a Swagger 2.0 document: {exc}") from exc
    for _, op in doc.get_operations():
        try:
            op.success_schema  # parsed and cached before extraction starts
        except MalformedDocument as exc:
            exc.at(op.operation_id)
            raise
    return doc
