"""Command line entry point.

    esi2ddl --file swagger.json --schema esi --roles esi_auth,esi_public --out esi.sql
    esi2ddl --url https://esi.evetech.net/latest/swagger.json --schema esi --roles esi_auth,esi_public

Flags fall back to ``ESI2DDL_*`` environment variables, optionally read from a
``.env`` file in the working directory.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .ddl import DEFAULT_DATABASE, catalog, to_sql
from .errors import CompileError
from .extract import compile_document
from .loader import load_document

logger = logging.getLogger("esi2ddl")

LOG_LEVELS = ("debug", "info", "warning", "error")


class Settings(BaseModel):
    """Validated run configuration."""

    schema_name: str = Field(min_length=1)
    roles: tuple[str, str]
    database: str = Field(default=DEFAULT_DATABASE, min_length=1)
    out: Path | None = None
    catalog: Path | None = None
    log: str = "warning"

    @field_validator("roles", mode="before")
    @classmethod
    def _split_roles(cls, value: Any) -> Any:
        if isinstance(value, str):
            return tuple(role.strip() for role in value.split(",") if role.strip())
        return value

    @field_validator("log")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.lower()
        if value not in LOG_LEVELS:
            raise ValueError(f"log level must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
        return value

    @property
    def protected_role(self) -> str:
        return self.roles[0]

    @property
    def public_role(self) -> str:
        return self.roles[1]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="esi2ddl",
        description="Compile a Swagger 2.0 document into a PostgreSQL schema.",
    )
    source = p.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", help="path to a swagger.json")
    source.add_argument("--url", help="URL of a swagger.json")
    p.add_argument("--schema", default=os.getenv("ESI2DDL_SCHEMA"), help="target schema and owner user")
    p.add_argument(
        "--roles",
        default=os.getenv("ESI2DDL_ROLES"),
        help="protected and public role names, comma separated",
    )
    p.add_argument(
        "--database",
        default=os.getenv("ESI2DDL_DATABASE", DEFAULT_DATABASE),
        help="database the schema user may connect to",
    )
    p.add_argument("--out", help="write the SQL script here instead of stdout")
    p.add_argument("--catalog", help="also write the operation catalog as JSON")
    p.add_argument(
        "--log",
        choices=LOG_LEVELS,
        default=os.getenv("ESI2DDL_LOG", "warning"),
        help="log level",
    )
    return p


def _write_outputs(outputs: list[tuple[Path, str]]) -> None:
    """Write every output file, or none of them."""
    written: list[Path] = []
    try:
        for path, text in outputs:
            path.write_text(text, encoding="utf-8")
            written.append(path)
            logger.info("wrote %s", path)
    except OSError:
        for path in written:
            path.unlink(missing_ok=True)
        raise


def main(argv: list[str] | None = None) -> int:
    load_dotenv(find_dotenv(usecwd=True))
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings(
            schema_name=args.schema,
            roles=args.roles,
            database=args.database,
            out=args.out,
            catalog=args.catalog,
            log=args.log,
        )
    except ValidationError as exc:
        parser.error(f"invalid configuration: {exc}")

    logging.basicConfig(
        level=settings.log.upper(),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        raw = load_document(file=args.file, url=args.url)
        mapping = compile_document(raw, settings.schema_name, settings.protected_role, settings.public_role)
    except CompileError as exc:
        logger.error("%s", exc)
        return 1

    sql = to_sql(mapping, database=settings.database) + "\n"
    outputs: list[tuple[Path, str]] = []
    if settings.out:
        outputs.append((settings.out, sql))
    if settings.catalog:
        outputs.append((settings.catalog, json.dumps(catalog(mapping), indent=2) + "\n"))
    try:
        _write_outputs(outputs)
    except OSError as exc:
        logger.error("cannot write %s: %s", exc.filename, exc.strerror)
        return 1
    if not settings.out:
        sys.stdout.write(sql)
    return 0


if __name__ == "__main__":
    sys.exit(main())
