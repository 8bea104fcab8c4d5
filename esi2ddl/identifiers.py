"""SQL identifiers derived from API paths and response field names.

Table names are built from the path tokens and must fit in 30 characters.
Column identifiers are the field name itself when it fits in 31 characters;
longer names get a decimal hash spliced into their middle so the result is
exactly 31 characters long and stable for a given name.
"""

from __future__ import annotations

import logging
import re

from .errors import IdentifierTooLong

logger = logging.getLogger(__name__)

MAX_TABLE_NAME = 30
MAX_COLUMN_NAME = 31

# Applied in order, first occurrence only, to the leading path token.
ABBREVIATIONS: tuple[tuple[str, str], ...] = (
    ("alliance", "alli"),
    ("calendar", "cal"),
    ("character", "chr"),
    ("corporation", "crp"),
    ("dogma", "dgm"),
    ("fleet", "flt"),
    ("incursions", "inc"),
    ("industry", "ind"),
    ("insurance", "ins"),
    ("killmail", "km"),
    ("loyalty", "loy"),
    ("market", "mkt"),
    ("opportunity", "opp"),
    ("search", "srch"),
    ("sovereignty", "sov"),
    ("universe", "uv"),
    ("contract", "ctr"),
)

RESERVED = {"from"}

_EDGE_SLASHES = re.compile(r"^\s*/+|\s*/+$")
_PLACEHOLDER = re.compile(r"\{|\}|_id")


# --- Table names ---


def _singular(token: str) -> str:
    """Strip placeholders, ``_id`` and plural endings from one path token."""
    tk = _PLACEHOLDER.sub("", token).replace("division", "div", 1)
    tk = re.sub(r"ies$", "y", tk)
    if not tk.endswith("us"):
        tk = re.sub(r"s$", "", tk)
    return tk


def abbreviate(token: str) -> str:
    for word, short in ABBREVIATIONS:
        token = token.replace(word, short, 1)
    return token


def path2table(path: str) -> str:
    """Compile an API path such as ``/characters/{character_id}/skills/`` to a table name."""
    tokens = _EDGE_SLASHES.sub("", path).split("/")
    name = ""
    for i, raw in enumerate(tokens):
        tk = _singular(raw)
        if len(tokens) == 1:
            name += raw
        elif i == 0:
            # /things/{thing_id}/ keeps the unabbreviated word
            if len(tokens) == 2 and tokens[1].startswith("{") and tk in tokens[1]:
                name += tk
            else:
                name += abbreviate(tk) + "_"
        elif i == len(tokens) - 1:
            if tk in tokens[i - 1]:
                name += "dtl" if name.endswith("_") else ""
            else:
                name += tk
        elif tk not in tokens[i - 1]:
            name += tk + "_"
    if len(name) > MAX_TABLE_NAME:
        raise IdentifierTooLong(name, tokens)
    return name


# --- Column names ---


def hash_code(text: str) -> int:
    """32-bit polynomial string hash (multiplier 31), made non-negative."""
    h = 0
    for ch in text:
        h = (31 * h + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def to31char(name: str) -> str:
    """Compile a field name to a column identifier of at most 31 characters."""
    if name in RESERVED:
        name = f'"{name}"'
    if len(name) <= MAX_COLUMN_NAME:
        return name
    digest = str(hash_code(name))
    cut = len(name) - MAX_COLUMN_NAME + len(digest)
    short = name[: (len(name) - cut) // 2] + digest + name[(len(name) + cut) // 2 :]
    logger.debug("shortened column %s to %s", name, short)
    return short
