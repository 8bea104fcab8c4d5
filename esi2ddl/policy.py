"""Grants and row-level security for compiled tables."""

from __future__ import annotations

from dataclasses import dataclass

from .model import Mapping, Table

# Session settings the query runtime sets before reading protected tables.
CORPORATION_SETTING = "corporation_id"
CHARACTER_SETTING = "character_id"


@dataclass(frozen=True)
class AccessPolicy:
    grantees: tuple[str, ...]
    row_security: bool = False
    predicate: str | None = None


def synthesize(table: Table, mapping: Mapping) -> AccessPolicy:
    """Decide who may read ``table`` and which rows they see."""
    if not table.protected:
        return AccessPolicy(grantees=(mapping.public_role,))
    if table.required_roles:
        return AccessPolicy(
            grantees=tuple(table.required_roles),
            row_security=True,
            predicate=f"corporation_id = current_setting('{CORPORATION_SETTING}')::INTEGER",
        )
    return AccessPolicy(
        grantees=(mapping.protected_role,),
        row_security=True,
        predicate=f"auth_character_id = current_setting('{CHARACTER_SETTING}')::INTEGER",
    )
