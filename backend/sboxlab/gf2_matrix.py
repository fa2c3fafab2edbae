import logging
from typing import Callable, List, Optional, Sequence

import numpy as np

from .config import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

# bit_source(count) -> `count` values, each 0 or 1
BitSource = Callable[[int], Sequence[int]]

Matrix = List[List[int]]
Vector = List[int]

DEFAULT_MAX_ATTEMPTS = 100

# Standard AES affine map, LSB-first: b'_i = b_i ^ b_(i+4) ^ b_(i+5) ^ b_(i+6) ^ b_(i+7) ^ c_i
AES_AFFINE_MATRIX: Matrix = [
    [1 if (col - row) % 8 in (0, 4, 5, 6, 7) else 0 for col in range(8)]
    for row in range(8)
]
AES_AFFINE_CONSTANT: Vector = [1, 1, 0, 0, 0, 1, 1, 0]  # 0x63


def numpy_bit_source(seed: Optional[int] = None) -> BitSource:
    rng = np.random.default_rng(seed)

    def draw(count: int) -> List[int]:
        return rng.integers(0, 2, size=count).tolist()

    return draw


def is_invertible(matrix: Sequence[Sequence[int]]) -> bool:
    """Check if matrix is invertible over GF(2) (forward elimination)."""
    temp = np.array(matrix, dtype=np.uint8) & 1
    n = temp.shape[0]
    if temp.ndim != 2 or temp.shape[1] != n:
        return False

    for col in range(n):
        # Find pivot
        candidates = np.nonzero(temp[col:, col])[0]
        if candidates.size == 0:
            return False
        pivot = col + int(candidates[0])

        if pivot != col:
            temp[[col, pivot]] = temp[[pivot, col]]

        # Eliminate below
        below = np.nonzero(temp[col + 1:, col])[0] + col + 1
        temp[below] ^= temp[col]

    return True


def _draw_matrix(bit_source: BitSource) -> Matrix:
    bits = list(bit_source(64))
    return [[int(b) & 1 for b in bits[row * 8:(row + 1) * 8]] for row in range(8)]


def _fallback_matrix(bit_source: BitSource) -> Matrix:
    # Unit upper triangular: ones on the diagonal, random above, zeros below.
    # Its determinant is 1, so it is full rank without any check.
    bits = iter(bit_source(28))
    matrix = [[0] * 8 for _ in range(8)]
    for row in range(8):
        matrix[row][row] = 1
        for col in range(row + 1, 8):
            matrix[row][col] = int(next(bits)) & 1
    return matrix


def random_invertible_matrix(bit_source: BitSource, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> Matrix:
    """Random 8x8 matrix invertible over GF(2).

    Draws up to `max_attempts` candidates, then falls back to a single
    unit upper triangular construction.
    """
    for attempt in range(1, max_attempts + 1):
        matrix = _draw_matrix(bit_source)
        if is_invertible(matrix):
            logger.debug(f"Invertible matrix found after {attempt} attempt(s)")
            return matrix

    logger.warning(f"No invertible matrix in {max_attempts} attempts, using triangular fallback")
    return _fallback_matrix(bit_source)


def random_vector(bit_source: BitSource) -> Vector:
    return [int(b) & 1 for b in bit_source(8)]


def affine_apply(x: int, matrix: Sequence[Sequence[int]], vector: Sequence[int]) -> int:
    """Apply A*x + b over GF(2); bit 0 is the least significant bit."""
    bits = [(x >> i) & 1 for i in range(8)]

    result = 0
    for i in range(8):
        bit = vector[i] & 1
        for j in range(8):
            bit ^= matrix[i][j] & bits[j]
        result |= bit << i
    return result
