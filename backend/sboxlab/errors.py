class SBoxLabError(ValueError):
    """Base class for every engine fault. Subclasses ValueError so callers
    that only know the engine raises ValueError keep working."""


class MalformedSBox(SBoxLabError):
    """Wrong length, out-of-range values, duplicates or unparsable upload."""


class InvalidKey(SBoxLabError):
    """Key is not 16 bytes in range 0-255."""


class InvalidKeyLength(InvalidKey):
    def __init__(self, length: int):
        super().__init__(f"AES-128 key must be exactly 16 bytes, got {length}")
        self.length = length


class MalformedCiphertext(SBoxLabError):
    pass


class PaddingError(SBoxLabError):
    pass


class EncodingError(SBoxLabError):
    pass
