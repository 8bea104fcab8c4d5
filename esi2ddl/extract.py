"""Build one table per GET operation of an API document."""

from __future__ import annotations

import logging
from typing import Any

from .document import (
    CHARACTER_PARAMETER,
    REF_PREFIX,
    TOKEN_REF,
    Document,
    Object,
    Operation,
    Parameter,
    parse_document,
)
from .errors import CompileError, MalformedDocument, ParameterResolutionError, TableNameCollision
from .flatten import fill_columns
from .identifiers import path2table
from .model import Mapping, Table
from .sqltypes import esi2dbtype

logger = logging.getLogger(__name__)

# Granted when an operation declares an empty role list.
DEFAULT_ROLE = "CEO"
AUTH_COLUMN = "auth_character_id"


def expand_required_roles(roles: list[str] | None) -> list[str] | None:
    if roles is None:
        return None
    return list(roles) or [DEFAULT_ROLE]


def collect_roles(tables: list[Table]) -> list[str]:
    """Distinct roles required by any table, in first-seen order."""
    roles: dict[str, None] = {}
    for table in tables:
        for role in table.required_roles or ():
            roles.setdefault(role)
    return list(roles)


def _resolve(param: Parameter, doc: Document) -> tuple[str, Parameter]:
    """Return the column name and definition behind an inline or referenced parameter."""
    if param.ref is None:
        if not param.name:
            raise MalformedDocument("inline parameter without a name")
        return param.name, param
    name = param.ref[len(REF_PREFIX):] if param.ref.startswith(REF_PREFIX) else None
    shared = doc.shared_parameter(name) if name else None
    if shared is None:
        raise ParameterResolutionError(param.ref)
    return name, shared


def _add_auth_column(table: Table, doc: Document) -> None:
    source = doc.shared_parameter(CHARACTER_PARAMETER)
    if source is None:
        raise ParameterResolutionError(REF_PREFIX + CHARACTER_PARAMETER)
    table.add_column(
        AUTH_COLUMN,
        esi2dbtype(source.type, source.format),
        required=True,
        description="Authenticated Character Id",
    )


def extract_table(path: str, op: Operation, doc: Document) -> Table:
    """Compile one GET operation into a table."""
    try:
        table = Table(
            name=path2table(path),
            operation=op.operation_id,
            description=op.summary,
            required_roles=expand_required_roles(op.required_roles),
        )
        for param in op.parameters:
            if param.ref == TOKEN_REF:
                table.protected = True
                # Caller-scoped rows need the caller's id.
                if table.required_roles is None:
                    _add_auth_column(table, doc)
                continue
            name, resolved = _resolve(param, doc)
            if resolved.required and name not in table:
                table.add_column(
                    name,
                    esi2dbtype(resolved.type, resolved.format),
                    required=True,
                    description=resolved.description,
                    path=resolved.in_path,
                )

        schema = op.success_schema
        if schema is None:
            raise MalformedDocument(f"no 200 response schema for {path}")
        fill_columns(schema, table)

        if isinstance(schema, Object):
            keys = table.path_columns
            if len(keys) == 1:
                keys[0].primary = True
    except CompileError as exc:
        exc.at(op.operation_id)
        raise
    return table


def compile_document(
    document: Document | dict[str, Any],
    schema: str,
    protected_role: str,
    public_role: str,
) -> Mapping:
    """Compile a whole document into a Mapping."""
    doc = document if isinstance(document, Document) else parse_document(document)

    tables: list[Table] = []
    owners: dict[str, str] = {}
    for path, op in doc.get_operations():
        table = extract_table(path, op, doc)
        if table.name in owners:
            raise TableNameCollision(table.name, owners[table.name], table.operation)
        owners[table.name] = table.operation
        logger.debug("%s -> %s (%d columns)", path, table.name, len(table.columns))
        tables.append(table)

    roles = collect_roles(tables)
    logger.info("compiled %d tables, %d roles from %d paths", len(tables), len(roles), len(doc.paths))
    return Mapping(
        title=doc.info.title,
        version=doc.info.version,
        description=doc.info.description,
        schema=schema,
        protected_role=protected_role,
        public_role=public_role,
        roles=roles,
        tables=tables,
    )
