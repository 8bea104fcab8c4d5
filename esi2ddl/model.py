"""In-memory model of a compiled API: one Mapping holding its Tables and Columns."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from .identifiers import to31char


@dataclass
class Column:
    """A table column compiled from a parameter or a response field."""

    name: str
    cname: str
    type: str
    required: bool = False
    description: str | None = None
    path: bool = False
    primary: bool = False


@dataclass
class Table:
    """A table mirroring one GET operation."""

    name: str
    operation: str
    description: str | None = None
    required_roles: list[str] | None = None
    protected: bool = False
    primitive: bool = False
    columns: dict[str, Column] = field(default_factory=dict)

    def __getitem__(self, name: str) -> Column:
        return self.columns[name]

    def __contains__(self, name: str) -> bool:
        return name in self.columns

    def add_column(
        self,
        name: str,
        type_: str,
        required: bool = False,
        description: str | None = None,
        path: bool = False,
    ) -> Column:
        """Add a column unless one with this name exists; return the column kept."""
        if name not in self.columns:
            self.columns[name] = Column(
                name=name,
                cname=to31char(name),
                type=type_,
                required=required,
                description=description,
                path=path,
            )
        return self.columns[name]

    @property
    def path_columns(self) -> list[Column]:
        return [c for c in self.columns.values() if c.path]

    @property
    def primary_key(self) -> Column | None:
        return next((c for c in self.columns.values() if c.primary), None)

    @property
    def kind(self) -> str:
        return "primitive" if self.primitive else "object"


@dataclass
class Mapping:
    """Result of compiling one API document."""

    title: str
    version: str
    description: str | None
    schema: str
    protected_role: str
    public_role: str
    roles: list[str] = field(default_factory=list)
    tables: list[Table] = field(default_factory=list)

    def __iter__(self) -> Iterator[Table]:
        return iter(self.tables)

    def by_table(self, name: str) -> Table | None:
        """Find a table by its SQL name."""
        return next((t for t in self.tables if t.name == name), None)

    def by_operation(self, operation: str) -> Table | None:
        """Find the table compiled from an operation id."""
        return next((t for t in self.tables if t.operation == operation), None)
