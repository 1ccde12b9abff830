"""Unit tests for factor-space vectors and edge matrices."""

from __future__ import annotations

import typing as typ

import numpy as np
import pytest

from dah.errors import DimensionMismatchError
from dah.scoring import (
    DiagonalMatrix,
    FullMatrix,
    add_vectors,
    apply_matrix,
    diagonal_matrix,
    identity_matrix,
    map_vector,
    scalar_matrix,
)
from dah.scoring.linalg import as_vector, freeze

if typ.TYPE_CHECKING:
    from dah.scoring import Context


def test_identity_matrix_leaves_vector_unchanged(small_context: Context) -> None:
    """Applying the identity returns an equal, distinct vector."""
    vector = small_context.vector({"AP": 2.0, "AM": -1.0})

    result = apply_matrix(identity_matrix(small_context), vector)

    assert result.tolist() == [2.0, -1.0], f"unexpected result {result.tolist()!r}"
    assert result is not vector, "expected a new vector"


def test_diagonal_matrix_scales_named_factors(small_context: Context) -> None:
    """Unnamed factors are zeroed by a named diagonal matrix."""
    matrix = diagonal_matrix(small_context, {"AM": 0.2})

    result = apply_matrix(matrix, small_context.vector({"AP": 3.0, "AM": 5.0}))

    assert result.tolist() == pytest.approx([0.0, 1.0]), (
        f"unexpected result {result.tolist()!r}"
    )


def test_scalar_matrix_scales_every_factor(small_context: Context) -> None:
    """A scalar matrix multiplies every component."""
    result = apply_matrix(
        scalar_matrix(small_context, 0.5),
        small_context.vector({"AP": 2.0, "AM": 4.0}),
    )

    assert result.tolist() == [1.0, 2.0], f"unexpected result {result.tolist()!r}"


def test_full_matrix_mixes_factors(small_context: Context) -> None:
    """Dense matrices map each output from every input component."""
    matrix = FullMatrix([[0.0, 1.0], [1.0, 0.5]])

    result = apply_matrix(matrix, small_context.vector({"AP": 2.0, "AM": 4.0}))

    assert result.tolist() == [4.0, 4.0], f"unexpected result {result.tolist()!r}"


def test_full_matrix_must_be_square() -> None:
    """Non-square dense matrices are rejected on construction."""
    with pytest.raises(ValueError, match="square"):
        FullMatrix([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])


def test_apply_matrix_rejects_wrong_dimension(small_context: Context) -> None:
    """Matrix and vector must agree on factor count."""
    with pytest.raises(DimensionMismatchError) as excinfo:
        apply_matrix(identity_matrix(small_context), np.ones(3))

    assert (excinfo.value.expected, excinfo.value.actual) == (2, 3), (
        "expected the mismatch to report both dimensions"
    )


def test_matrix_data_is_read_only(small_context: Context) -> None:
    """Matrices freeze their data so shared edges cannot be mutated."""
    matrix = scalar_matrix(small_context, 2.0)

    with pytest.raises(ValueError, match="read-only"):
        matrix.data[0] = 3.0


def test_diagonal_matrix_copies_its_input() -> None:
    """Mutating the source array does not affect the matrix."""
    source = np.array([1.0, 2.0])
    matrix = DiagonalMatrix(source)

    source[0] = 9.0

    assert matrix.data.tolist() == [1.0, 2.0], "expected the matrix to own its data"


def test_add_vectors_is_component_wise(small_context: Context) -> None:
    """Vectors add factor by factor."""
    result = add_vectors(
        small_context.vector({"AP": 1.0}),
        small_context.vector({"AP": 0.5, "AM": 2.0}),
    )

    assert result.tolist() == [1.5, 2.0], f"unexpected result {result.tolist()!r}"


def test_add_vectors_rejects_mismatched_lengths() -> None:
    """Vectors of different lengths cannot be added."""
    with pytest.raises(DimensionMismatchError):
        add_vectors(np.zeros(2), np.zeros(3))


def test_map_vector_applies_function(small_context: Context) -> None:
    """Every component is transformed independently."""
    result = map_vector(small_context.vector({"AP": 2.0, "AM": 3.0}), lambda v: v * v)

    assert result.tolist() == [4.0, 9.0], f"unexpected result {result.tolist()!r}"


def test_as_vector_rejects_nested_values() -> None:
    """Only one-dimensional input becomes a vector."""
    with pytest.raises(ValueError, match="one-dimensional"):
        as_vector([[1.0], [2.0]])


def test_freeze_marks_vector_read_only() -> None:
    """Frozen vectors reject writes."""
    vector = freeze(as_vector([1.0, 2.0]))

    assert not vector.flags.writeable, "expected a read-only vector"
