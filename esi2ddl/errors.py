"""Errors raised while loading or compiling an API document.

Every failure is fatal for the run: the CLI reports it and writes nothing.
"""

from __future__ import annotations


class CompileError(Exception):
    """Base class for all esi2ddl failures."""

    operation: str | None = None

    def at(self, operation: str) -> CompileError:
        """Attach the operation id being compiled when the error surfaced."""
        if self.operation is None:
            self.operation = operation
        return self

    def __str__(self) -> str:
        message = super().__str__()
        if self.operation:
            return f"{message} (operation: {self.operation})"
        return message


class UnsupportedSchemaType(CompileError):
    """A response schema node the flattener cannot turn into columns."""

    def __init__(self, type_: str | None, title: str | None = None) -> None:
        self.type = type_
        self.title = title
        super().__init__(f"Unknown model type: {type_} for {title}")


class UnsupportedType(CompileError):
    """A (type, format) pair with no SQL column type."""

    def __init__(self, type_: str | None, format_: str | None) -> None:
        self.type = type_
        self.format = format_
        super().__init__(f"unknown type: {type_}, format: {format_}")


class IdentifierTooLong(CompileError):
    """A compiled table name over the 30 character budget."""

    def __init__(self, name: str, tokens: list[str]) -> None:
        self.name = name
        self.tokens = tokens
        super().__init__(f"table name > 30: {name}, tks: {','.join(tokens)}")


class ParameterResolutionError(CompileError):
    """A ``$ref`` into the shared parameter catalog that does not resolve."""

    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f"cannot resolve parameter reference: {ref}")


class TableNameCollision(CompileError):
    """Two operations compiled to the same table name."""

    def __init__(self, name: str, first: str, second: str) -> None:
        self.name = name
        self.first = first
        self.second = second
        super().__init__(f"table {name} already defined by {first}, redefined by {second}")


class MalformedDocument(CompileError):
    """The input does not have the shape of a Swagger 2.0 document."""


class DocumentLoadError(CompileError):
    """The document could not be read from its source."""

    def __init__(self, source: str, detail: str) -> None:
        self.source = source
        self.detail = detail
        super().__init__(f"cannot load {source}: {detail}")
