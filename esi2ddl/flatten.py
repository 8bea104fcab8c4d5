"""Flatten a response schema into the columns of one table."""

from __future__ import annotations

import re

from .document import Array, Object, Scalar, SchemaNode
from .errors import UnsupportedSchemaType
from .model import Table
from .sqltypes import esi2dbtype

NUMERIC_TYPES = {"integer", "number"}


def _scalar_column_name(table: Table, prefix: str) -> str:
    # chr_wallet -> wallet_id
    return f"{prefix}{re.sub(r'.+_', '', table.name)}_id"


def fill_columns(node: SchemaNode, table: Table, prefix: str = "") -> None:
    """Add one column per leaf of ``node``, nested objects prefixing their names."""
    if isinstance(node, Object):
        for name, prop in node.properties.items():
            if isinstance(prop, Object):
                fill_columns(prop, table, f"{prefix}{name}")
            else:
                table.add_column(
                    f"{prefix}{name}",
                    esi2dbtype(prop.type, prop.format),
                    required=prop.required or name in node.required_fields,
                    description=prop.description,
                )
    elif isinstance(node, Array):
        fill_columns(node.items, table, prefix)
    elif isinstance(node, Scalar) and node.type in NUMERIC_TYPES:
        table.primitive = True
        table.add_column(
            _scalar_column_name(table, prefix),
            esi2dbtype(node.type, node.format),
            required=node.required,
            description=node.description,
        )
    else:
        raise UnsupportedSchemaType(node.type, node.title)
