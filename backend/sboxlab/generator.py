import logging
from typing import List, NamedTuple, Optional, Sequence

from .config import LOGGER_NAME, load_settings
from .gf256 import inverse
from .gf2_matrix import (
    BitSource,
    Matrix,
    Vector,
    affine_apply,
    numpy_bit_source,
    random_invertible_matrix,
    random_vector,
)
from .schemas import ValidSBox

logger = logging.getLogger(LOGGER_NAME)


class GeneratedSBox(NamedTuple):
    sbox: List[int]
    matrix: Matrix
    vector: Vector

    def valid_sbox(self) -> ValidSBox:
        return ValidSBox.from_table(self.sbox)


def build_sbox(matrix: Sequence[Sequence[int]], vector: Sequence[int]) -> List[int]:
    """
    Generates S-Box using S(x) = M * x^(-1) + v
    matrix: 8x8 list of 0/1
    vector: list of 8 0/1, index 0 is the LSB
    """
    # inverse(0) is 0 by convention
    return [affine_apply(inverse(x), matrix, vector) for x in range(256)]


class SBoxGenerator:
    def __init__(self, bit_source: Optional[BitSource] = None, max_attempts: Optional[int] = None):
        settings = load_settings()
        self.bit_source = bit_source or numpy_bit_source(settings.random_seed)
        self.max_attempts = settings.matrix_max_attempts if max_attempts is None else max_attempts

    def generate(self) -> GeneratedSBox:
        matrix = random_invertible_matrix(self.bit_source, self.max_attempts)
        vector = random_vector(self.bit_source)
        sbox = build_sbox(matrix, vector)
        logger.info(f"Generated affine S-Box (S(0)=0x{sbox[0]:02X}, S(1)=0x{sbox[1]:02X})")
        return GeneratedSBox(sbox, matrix, vector)


def generate_sbox(bit_source: Optional[BitSource] = None) -> GeneratedSBox:
    return SBoxGenerator(bit_source).generate()
