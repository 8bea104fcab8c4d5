"""Render a compiled Mapping as a PostgreSQL script.

All quoting and escaping of emitted text goes through the helpers at the top of
this module.
"""

from __future__ import annotations

import json
from typing import Any

from .model import Column, Mapping, Table
from .policy import synthesize
from .sqltypes import render_type

DEFAULT_DATABASE = "horizon"
CATALOG_TABLE = "swagger_mapping"


# --- Escaping ---


def quote_literal(value: str | None) -> str:
    """Standard SQL string literal, or NULL."""
    if value is None:
        return "NULL"
    return "'" + value.replace("'", "''") + "'"


def escape_literal(value: str) -> str:
    """``E''`` string literal with backslashes and single quotes backslash-escaped."""
    return "E'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def comment(text: str | None) -> str:
    """Single-line SQL comment."""
    return f"-- {' '.join((text or '').split())}".rstrip()


# --- Catalog ---


def catalog(mapping: Mapping) -> dict[str, Any]:
    """Operation id -> table, kind, field -> column identifier and path keys."""
    operations: dict[str, Any] = {}
    for table in mapping:
        operations[table.operation] = {
            "table": table.name,
            "type": table.kind,
            "fields": {c.name: c.cname for c in table.columns.values()},
            "key": [c.name for c in table.path_columns],
        }
    return {
        "title": mapping.title,
        "version": mapping.version,
        "description": mapping.description,
        "operations": operations,
    }


def _catalog_statements(mapping: Mapping) -> list[str]:
    blob = json.dumps(catalog(mapping), separators=(",", ":"))
    return [
        "-- Swagger Mapping",
        f"CREATE TABLE {CATALOG_TABLE}",
        "(",
        "  version varchar(50) NOT NULL,",
        "  description varchar(255),",
        "  mapping text not null",
        ");",
        f"ALTER TABLE {CATALOG_TABLE} OWNER TO {mapping.schema};",
        f"INSERT INTO {CATALOG_TABLE}(version, description, mapping) VALUES "
        f"({quote_literal(mapping.version)}, {quote_literal(mapping.description)}, {escape_literal(blob)});",
    ]


# --- Tables ---


def _column_definition(column: Column) -> str:
    if column.primary:
        qualifier = " PRIMARY KEY"
    elif column.required:
        qualifier = " NOT NULL"
    else:
        qualifier = ""
    return f"  {column.cname} {render_type(column.type)}{qualifier}"


def create_table(table: Table) -> str:
    """CREATE TABLE statement with columns in insertion order."""
    lines = [f"CREATE TABLE {table.name}", "("]
    if table.columns:
        lines.append(",\n".join(_column_definition(c) for c in table.columns.values()))
    lines.append(");")
    return "\n".join(lines)


def _table_statements(table: Table, mapping: Mapping) -> list[str]:
    policy = synthesize(table, mapping)
    grantees = ",".join(policy.grantees)
    sql = [
        comment(table.description),
        comment(f"operation id: {table.operation}"),
        create_table(table),
        f"ALTER TABLE {table.name} OWNER TO {mapping.schema};",
        f"GRANT SELECT ON TABLE {table.name} TO {grantees};",
    ]
    if policy.row_security:
        sql.append(f"ALTER TABLE {table.name} ENABLE ROW LEVEL SECURITY;")
        sql.append(f"CREATE POLICY {table.name} ON {table.name} TO {grantees} USING ({policy.predicate});")
    sql.append("")
    return sql


# --- Script ---


def _provisioning(mapping: Mapping, database: str) -> list[str]:
    sql = [
        f"CREATE USER {mapping.schema} with password {quote_literal(mapping.schema)};",
        f"GRANT CONNECT ON DATABASE {database} TO {mapping.schema};",
        f"CREATE SCHEMA AUTHORIZATION {mapping.schema};",
    ]
    if mapping.roles:
        sql.append(f"DROP ROLE IF EXISTS {','.join(mapping.roles)};")
        sql.extend(f"CREATE ROLE {role};" for role in mapping.roles)
    sql.extend(["--", f"SET SEARCH_PATH TO {mapping.schema};", "--"])
    return sql


def to_sql(mapping: Mapping, database: str = DEFAULT_DATABASE) -> str:
    """The full script: header, provisioning, one block per table, catalog."""
    sql = [
        comment(f"{mapping.title} v{mapping.version}"),
        comment(mapping.description),
        "--",
    ]
    sql.extend(_provisioning(mapping, database))
    for table in mapping:
        sql.extend(_table_statements(table, mapping))
    sql.extend(_catalog_statements(mapping))
    return "\n".join(sql)
