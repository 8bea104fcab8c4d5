#!/usr/bin/env python3
"""
End-to-End PostgreSQL Test for esi2ddl

Applies a generated script to a live database inside a transaction, checks the
tables, the catalog row and the row-level security policies, then rolls everything back.
Needs a superuser connection:

    ESI2DDL_PG_USER=postgres ESI2DDL_PG_PASSWORD=secret python test_postgres.py

Skipped when ESI2DDL_PG_USER is not set.
"""

import os
import sys
import uuid
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from framework import make_document, make_operation, widget_document  # noqa: E402

from esi2ddl import compile_document, to_sql  # noqa: E402

pg8000 = pytest.importorskip("pg8000.native")

PG_SETTINGS = {
    "user": os.environ.get("ESI2DDL_PG_USER"),
    "password": os.environ.get("ESI2DDL_PG_PASSWORD"),
    "host": os.environ.get("ESI2DDL_PG_HOST", "localhost"),
    "port": int(os.environ.get("ESI2DDL_PG_PORT", "5432")),
    "database": os.environ.get("ESI2DDL_PG_DATABASE", "postgres"),
}


def connect():
    if not PG_SETTINGS["user"]:
        pytest.skip("ESI2DDL_PG_USER not set")
    return pg8000.Connection(**PG_SETTINGS)


def statements(sql: str):
    """Split a generated script into single statements"""
    body = "\n".join(line for line in sql.splitlines() if not line.startswith("--"))
    for statement in body.split(";\n"):
        statement = statement.strip().rstrip(";")
        if statement:
            yield statement


def build_script(suffix: str):
    document = widget_document(token=True)
    document["paths"].update(make_document({
        "/corporations/{corporation_id}/wallets/": make_operation(
            "get_corporations_corporation_id_wallets",
            {"type": "array", "items": {"type": "object", "properties": {
                "division": {"type": "integer"},
                "balance": {"type": "number", "format": "double"},
            }}},
            [{"$ref": "#/parameters/corporation_id"}, {"$ref": "#/parameters/token"}],
            roles=[f"accountant_{suffix}"],
        ),
    })["paths"])
    mapping = compile_document(document, f"esi_{suffix}", f"auth_{suffix}", f"public_{suffix}")
    return mapping, to_sql(mapping, database=PG_SETTINGS["database"])


def test_apply_script():
    suffix = uuid.uuid4().hex[:8]
    auth, public, schema = f"auth_{suffix}", f"public_{suffix}", f"esi_{suffix}"
    mapping, sql = build_script(suffix)

    conn = connect()
    try:
        conn.run("BEGIN")
        conn.run(f"CREATE ROLE {auth}")
        conn.run(f"CREATE ROLE {public}")
        for statement in statements(sql):
            conn.run(statement)

        tables = {
            row[0]
            for row in conn.run(
                "SELECT table_name FROM information_schema.tables WHERE table_schema = :schema",
                schema=schema,
            )
        }
        assert tables == {"widget", "crp_wallet", "swagger_mapping"}

        rows = conn.run("SELECT version, mapping FROM swagger_mapping")
        assert rows[0][0] == mapping.version
        assert '"get_widgets_widget_id"' in rows[0][1]

        secured = {
            row[0]
            for row in conn.run(
                "SELECT c.relname FROM pg_class c JOIN pg_namespace n ON n.oid = c.relnamespace "
                "WHERE n.nspname = :schema AND c.relrowsecurity",
                schema=schema,
            )
        }
        assert secured == {"widget", "crp_wallet"}

        policies = {
            row[0]: (row[1], row[2])
            for row in conn.run(
                "SELECT tablename, roles::text, qual FROM pg_policies WHERE schemaname = :schema",
                schema=schema,
            )
        }
        assert set(policies) == {"widget", "crp_wallet"}
        widget_roles, widget_qual = policies["widget"]
        assert auth in widget_roles
        assert "auth_character_id" in widget_qual
        assert "current_setting('character_id'" in widget_qual
        wallet_roles, wallet_qual = policies["crp_wallet"]
        assert f"accountant_{suffix}" in wallet_roles
        assert "current_setting('corporation_id'" in wallet_qual
    finally:
        conn.run("ROLLBACK")
        conn.close()


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
