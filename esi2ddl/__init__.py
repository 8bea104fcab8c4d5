"""Compile a Swagger 2.0 API description into a PostgreSQL schema."""

from .ddl import catalog, to_sql
from .document import Document, parse_document
from .errors import (
    CompileError,
    DocumentLoadError,
    IdentifierTooLong,
    MalformedDocument,
    ParameterResolutionError,
    TableNameCollision,
    UnsupportedSchemaType,
    UnsupportedType,
)
from .extract import compile_document
from .identifiers import path2table, to31char
from .model import Column, Mapping, Table
from .sqltypes import esi2dbtype

__all__ = [
    "Column",
    "CompileError",
    "Document",
    "DocumentLoadError",
    "IdentifierTooLong",
    "MalformedDocument",
    "Mapping",
    "ParameterResolutionError",
    "Table",
    "TableNameCollision",
    "UnsupportedSchemaType",
    "UnsupportedType",
    "catalog",
    "compile_document",
    "esi2dbtype",
    "parse_document",
    "path2table",
    "to31char",
    "to_sql",
]
