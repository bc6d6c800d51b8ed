"""Generalised Cholesky decomposition C = F D F', solving and inversion.

Matrices are square lists of row lists of floats and are worked on in place.
"""

from __future__ import annotations

from typing import MutableSequence, Sequence

Matrix = MutableSequence[MutableSequence[float]]


def cholesky2(matrix: Matrix, toler: float) -> int:
    """Factor ``matrix`` in place as F D F'.

    Only the upper triangle is read. On return D is on the diagonal and F
    (unit lower triangular) below it; the upper triangle is left unchanged.
    A column judged redundant gets a zero diagonal. Returns the rank, negated
    when the matrix is not non-negative definite.
    """
    n = len(matrix)
    eps = 0.0
    for i in range(n):
        if matrix[i][i] > eps:
            eps = matrix[i][i]
        for j in range(i + 1, n):
            matrix[j][i] = matrix[i][j]
    eps *= toler

    rank = 0
    nonneg = 1
    for i in range(n):
        pivot = matrix[i][i]
        if pivot < eps:
            matrix[i][i] = 0.0
            if pivot < -8 * eps:
                nonneg = -1
            continue
        rank += 1
        for j in range(i + 1, n):
            temp = matrix[j][i] / pivot
            matrix[j][i] = temp
            matrix[j][j] -= temp * temp * pivot
            for k in range(j + 1, n):
                matrix[k][j] -= temp * matrix[k][i]
    return rank * nonneg


def chinv2(matrix: Matrix) -> None:
    """Invert in place from the factorisation left by :func:`cholesky2`.

    Afterwards the upper triangle and diagonal hold the inverse of the
    original matrix and the lower triangle holds F inverse.
    """
    n = len(matrix)
    for i in range(n):
        if matrix[i][i] > 0:
            matrix[i][i] = 1 / matrix[i][i]
            for j in range(i + 1, n):
                matrix[j][i] = -matrix[j][i]
                for k in range(i):
                    matrix[j][k] += matrix[j][i] * matrix[i][k]

    for i in range(n):
        if matrix[i][i] == 0:
            for j in range(i):
                matrix[j][i] = 0.0
            for j in range(i, n):
                matrix[i][j] = 0.0
            continue
        for j in range(i + 1, n):
            temp = matrix[j][i] * matrix[j][j]
            matrix[i][j] = temp
            for k in range(i, j):
                matrix[i][k] += temp * matrix[j][k]


def chsolve2(matrix: Sequence[Sequence[float]], y: Sequence[float]) -> list[float]:
    """Solve A b = y given the factorisation of A from :func:`cholesky2`.

    Components belonging to a zero diagonal are set to zero.
    """
    n = len(matrix)
    b = list(y)
    for i in range(n):
        temp = b[i]
        for j in range(i):
            temp -= b[j] * matrix[i][j]
        b[i] = temp

    for i in reversed(range(n)):
        if matrix[i][i] == 0:
            b[i] = 0.0
            continue
        temp = b[i] / matrix[i][i]
        for j in range(i + 1, n):
            temp -= b[j] * matrix[j][i]
        b[i] = temp
    return b