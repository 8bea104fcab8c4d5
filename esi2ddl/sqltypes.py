"""Swagger primitive types to PostgreSQL column types."""

from __future__ import annotations

from .errors import UnsupportedType

# Length bound rendered for variable-length text columns.
VARCHAR_LENGTH = 4000

_TYPES: dict[tuple[str, str | None], str] = {
    ("string", "date"): "date",
    ("string", "date-time"): "timestamp",
    ("string", None): "varchar",
    ("integer", "int32"): "integer",
    ("integer", None): "integer",
    ("integer", "int64"): "bigint",
    ("number", "float"): "float",
    ("number", "double"): "double precision",
}

# Types whose format is irrelevant.
_ANY_FORMAT: dict[str, str] = {
    "boolean": "boolean",
    "array": "varchar",
}


def esi2dbtype(type_: str | None, format_: str | None = None) -> str:
    """Map a Swagger ``type``/``format`` pair to a SQL column type."""
    if type_ in _ANY_FORMAT:
        return _ANY_FORMAT[type_]
    try:
        return _TYPES[(type_, format_)]
    except KeyError:
        raise UnsupportedType(type_, format_) from None


def render_type(sql_type: str) -> str:
    """Column type as written in DDL, with the length bound for varchar."""
    if sql_type == "varchar":
        return f"varchar({VARCHAR_LENGTH})"
    return sql_type
