"""Fixed-dimension vectors and edge matrices in factor space.

A vector holds one float per factor of the active ``Context``; index ``i``
corresponds to ``context.factors[i]``. Matrices are attached to graph edges
and transform a vector in factor space into another vector in the same
space. Two kinds exist: ``DiagonalMatrix`` (per-factor multiplier, the only
kind produced by the standard extensions) and ``FullMatrix`` (a dense
square map).

Vectors are plain ``numpy`` float arrays. Once a vector is attached to an
impact, a matrix, or a result it is marked read-only.

Examples
--------
>>> matrix = scalar_matrix(context, 0.5)
>>> float(apply_matrix(matrix, context.vector({"AP": 2.0}))[0])
1.0
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import numpy as np
import numpy.typing as npt

from dah.errors import DimensionMismatchError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .factors import Context

type Vector = npt.NDArray[np.float64]


def as_vector(values: npt.ArrayLike, *, dimension: int | None = None) -> Vector:
    """Copy ``values`` into a new one-dimensional float vector.

    Raises
    ------
    ValueError
        If ``values`` is not one-dimensional.
    DimensionMismatchError
        If ``dimension`` is given and the length differs.
    """
    vector = np.array(values, dtype=np.float64)
    if vector.ndim != 1:
        msg = f"Vectors must be one-dimensional, got shape {vector.shape}."
        raise ValueError(msg)
    if dimension is not None:
        check_dimension(vector, dimension)
    return vector


def check_dimension(vector: Vector, expected: int, *, what: str = "vector") -> None:
    """Raise ``DimensionMismatchError`` unless ``vector`` has ``expected`` items."""
    actual = vector.shape[0]
    if actual != expected:
        raise DimensionMismatchError(expected, actual, what=what)


def freeze(vector: Vector) -> Vector:
    """Mark ``vector`` read-only and return it."""
    vector.setflags(write=False)
    return vector


def add_vectors(left: Vector, right: Vector) -> Vector:
    """Return the component-wise sum of two vectors of equal length."""
    check_dimension(right, left.shape[0])
    return left + right


def map_vector(vector: Vector, func: cabc.Callable[[float], float]) -> Vector:
    """Apply ``func`` to every component and return a new vector."""
    return np.fromiter(
        (func(float(value)) for value in vector),
        dtype=np.float64,
        count=vector.shape[0],
    )


@dc.dataclass(frozen=True, slots=True, eq=False)
class DiagonalMatrix:
    """Per-factor scalar multiplier.

    Attributes
    ----------
    data : Vector
        Scaling factor for each factor index.
    """

    data: Vector

    kind: typ.ClassVar[str] = "diagonal"

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", freeze(as_vector(self.data)))

    @property
    def dimension(self) -> int:
        """Number of factors this matrix operates on."""
        return self.data.shape[0]


@dc.dataclass(frozen=True, slots=True, eq=False)
class FullMatrix:
    """Dense square linear map; ``rows[i]`` produces output component ``i``."""

    rows: npt.NDArray[np.float64]

    kind: typ.ClassVar[str] = "full"

    def __post_init__(self) -> None:
        rows = np.array(self.rows, dtype=np.float64)
        if rows.ndim != 2 or rows.shape[0] != rows.shape[1]:
            msg = f"Full matrices must be square, got shape {rows.shape}."
            raise ValueError(msg)
        rows.setflags(write=False)
        object.__setattr__(self, "rows", rows)

    @property
    def dimension(self) -> int:
        """Number of factors this matrix operates on."""
        return self.rows.shape[0]


type Matrix = DiagonalMatrix | FullMatrix


def apply_matrix(matrix: Matrix, vector: Vector) -> Vector:
    """Transform ``vector`` by ``matrix`` and return a new vector.

    Raises
    ------
    DimensionMismatchError
        If the matrix and vector disagree on factor count.
    """
    check_dimension(vector, matrix.dimension)
    match matrix:
        case DiagonalMatrix(data=data):
            return data * vector
        case FullMatrix(rows=rows):
            return rows @ vector
    msg = f"Unsupported matrix type {type(matrix).__name__}."
    raise TypeError(msg)


def identity_matrix(context: Context) -> DiagonalMatrix:
    """Return the matrix that leaves every vector unchanged."""
    return DiagonalMatrix(np.ones(context.factor_count, dtype=np.float64))


def scalar_matrix(context: Context, scale: float) -> DiagonalMatrix:
    """Return a diagonal matrix scaling every factor by ``scale``."""
    return DiagonalMatrix(np.full(context.factor_count, scale, dtype=np.float64))


def diagonal_matrix(
    context: Context,
    scales: cabc.Mapping[str, float],
) -> DiagonalMatrix:
    """Return a diagonal matrix from ``{factor name: scale}``; others are zero."""
    return DiagonalMatrix(context.vector(scales))


__all__ = [
    "DiagonalMatrix",
    "FullMatrix",
    "Matrix",
    "Vector",
    "add_vectors",
    "apply_matrix",
    "as_vector",
    "check_dimension",
    "diagonal_matrix",
    "freeze",
    "identity_matrix",
    "map_vector",
    "scalar_matrix",
]
