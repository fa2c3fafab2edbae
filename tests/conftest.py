import pytest

from sboxlab import AES_SBOX, SBoxGenerator
from sboxlab.gf2_matrix import numpy_bit_source


class ScriptedBits:
    """Bit source replaying a fixed pattern, counting how often it is called."""

    def __init__(self, pattern):
        self.pattern = list(pattern)
        self.calls = []

    def __call__(self, count):
        self.calls.append(count)
        return [self.pattern[i % len(self.pattern)] for i in range(count)]


@pytest.fixture
def aes_sbox():
    return list(AES_SBOX)


@pytest.fixture
def generated():
    return SBoxGenerator(numpy_bit_source(1337)).generate()


@pytest.fixture
def scripted_bits():
    return ScriptedBits
