"""Exception taxonomy for the aggregation engine.

Every failure raised by the engine derives from ``DahError`` and carries a
machine-readable ``code`` plus the data needed to locate the bad input (an
entry id, a factor name, a cycle path). None of these errors are retryable:
an aggregation run either succeeds as a whole or raises.

Examples
--------
Inspect a failure raised by ``aggregate``:

>>> try:
...     aggregate(context, data)
... except CyclicEntryGraphError as err:
...     print(err.code, " -> ".join(err.cycle))
cyclic_entry_graph a -> b -> a
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class DahError(Exception):
    """Base exception with structured metadata for engine failures."""

    error_code: typ.ClassVar[str] = "dah_error"

    code: str

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code if code is not None else type(self).error_code


class UnknownFactorError(DahError, LookupError):
    """Raised when a factor name has no registry entry."""

    error_code: typ.ClassVar[str] = "unknown_factor"

    def __init__(self, factor_name: str, *, code: str | None = None) -> None:
        super().__init__(f"Unknown factor {factor_name!r}.", code=code)
        self.factor_name = factor_name


class DimensionMismatchError(DahError, ValueError):
    """Raised when vector or matrix operands disagree on factor count."""

    error_code: typ.ClassVar[str] = "dimension_mismatch"

    def __init__(
        self,
        expected: int,
        actual: int,
        *,
        what: str = "vector",
        code: str | None = None,
    ) -> None:
        super().__init__(
            f"Expected {what} of dimension {expected}, got {actual}.",
            code=code,
        )
        self.expected = expected
        self.actual = actual


class DanglingReferenceError(DahError):
    """Raised when an entry, impact, or relation references an unknown id."""

    error_code: typ.ClassVar[str] = "dangling_reference"

    def __init__(
        self,
        entry_id: str,
        *,
        referrer: str,
        code: str | None = None,
    ) -> None:
        super().__init__(
            f"Entry id {entry_id!r} referenced by {referrer} does not exist.",
            code=code,
        )
        self.entry_id = entry_id
        self.referrer = referrer


class CyclicEntryGraphError(DahError):
    """Raised when the entry dependency graph contains a cycle."""

    error_code: typ.ClassVar[str] = "cyclic_entry_graph"

    def __init__(
        self,
        cycle: cabc.Sequence[str],
        *,
        code: str | None = None,
    ) -> None:
        self.cycle = tuple(cycle)
        super().__init__(
            f"Entry graph contains a cycle: {' -> '.join(self.cycle)}.",
            code=code,
        )


class EmptyCombineInputError(DahError):
    """Raised when combine is invoked without any contributions."""

    error_code: typ.ClassVar[str] = "empty_combine_input"

    def __init__(self, *, code: str | None = None) -> None:
        super().__init__("Cannot combine an empty sequence of values.", code=code)


class ExtensionDependencyError(DahError):
    """Raised when extension dependencies are missing or cyclic."""

    error_code: typ.ClassVar[str] = "extension_dependency"

    def __init__(
        self,
        message: str,
        *,
        extension: str | None = None,
        missing: str | None = None,
        cycle: cabc.Sequence[str] = (),
        code: str | None = None,
    ) -> None:
        super().__init__(message, code=code)
        self.extension = extension
        self.missing = missing
        self.cycle = tuple(cycle)


class ExtensionValidationError(DahError, ValueError):
    """Raised by an extension when a domain input is malformed."""

    error_code: typ.ClassVar[str] = "extension_validation"

    def __init__(
        self,
        message: str,
        *,
        extension: str | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message, code=code)
        self.extension = extension


__all__ = (
    "CyclicEntryGraphError",
    "DahError",
    "DanglingReferenceError",
    "DimensionMismatchError",
    "EmptyCombineInputError",
    "ExtensionDependencyError",
    "ExtensionValidationError",
    "UnknownFactorError",
)
