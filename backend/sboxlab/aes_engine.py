import logging
from typing import List, Optional, Sequence, Union

from .config import LOGGER_NAME
from .errors import EncodingError, InvalidKey, InvalidKeyLength, MalformedCiphertext, MalformedSBox, PaddingError
from .gf256 import multiply, power
from .schemas import ValidSBox, sbox_table_problem

logger = logging.getLogger(LOGGER_NAME)

BLOCK_SIZE = 16

AES_SBOX = [
    0x63, 0x7c, 0x77, 0x7b, 0xf2, 0x6b, 0x6f, 0xc5, 0x30, 0x01, 0x67, 0x2b, 0xfe, 0xd7, 0xab, 0x76,
    0xca, 0x82, 0xc9, 0x7d, 0xfa, 0x59, 0x47, 0xf0, 0xad, 0xd4, 0xa2, 0xaf, 0x9c, 0xa4, 0x72, 0xc0,
    0xb7, 0xfd, 0x93, 0x26, 0x36, 0x3f, 0xf7, 0xcc, 0x34, 0xa5, 0xe5, 0xf1, 0x71, 0xd8, 0x31, 0x15,
    0x04, 0xc7, 0x23, 0xc3, 0x18, 0x96, 0x05, 0x9a, 0x07, 0x12, 0x80, 0xe2, 0xeb, 0x27, 0xb2, 0x75,
    0x09, 0x83, 0x2c, 0x1a, 0x1b, 0x6e, 0x5a, 0xa0, 0x52, 0x3b, 0xd6, 0xb3, 0x29, 0xe3, 0x2f, 0x84,
    0x53, 0xd1, 0x00, 0xed, 0x20, 0xfc, 0xb1, 0x5b, 0x6a, 0xcb, 0xbe, 0x39, 0x4a, 0x4c, 0x58, 0xcf,
    0xd0, 0xef, 0xaa, 0xfb, 0x43, 0x4d, 0x33, 0x85, 0x45, 0xf9, 0x02, 0x7f, 0x50, 0x3c, 0x9f, 0xa8,
    0x51, 0xa3, 0x40, 0x8f, 0x92, 0x9d, 0x38, 0xf5, 0xbc, 0xb6, 0xda, 0x21, 0x10, 0xff, 0xf3, 0xd2,
    0xcd, 0x0c, 0x13, 0xec, 0x5f, 0x97, 0x44, 0x17, 0xc4, 0xa7, 0x7e, 0x3d, 0x64, 0x5d, 0x19, 0x73,
    0x60, 0x81, 0x4f, 0xdc, 0x22, 0x2a, 0x90, 0x88, 0x46, 0xee, 0xb8, 0x14, 0xde, 0x5e, 0x0b, 0xdb,
    0xe0, 0x32, 0x3a, 0x0a, 0x49, 0x06, 0x24, 0x5c, 0xc2, 0xd3, 0xac, 0x62, 0x91, 0x95, 0xe4, 0x79,
    0xe7, 0xc8, 0x37, 0x6d, 0x8d, 0xd5, 0x4e, 0xa9, 0x6c, 0x56, 0xf4, 0xea, 0x65, 0x7a, 0xae, 0x08,
    0xba, 0x78, 0x25, 0x2e, 0x1c, 0xa6, 0xb4, 0xc6, 0xe8, 0xdd, 0x74, 0x1f, 0x4b, 0xbd, 0x8b, 0x8a,
    0x70, 0x3e, 0xb5, 0x66, 0x48, 0x03, 0xf6, 0x0e, 0x61, 0x35, 0x57, 0xb9, 0x86, 0xc1, 0x1d, 0x9e,
    0xe1, 0xf8, 0x98, 0x11, 0x69, 0xd9, 0x8e, 0x94, 0x9b, 0x1e, 0x87, 0xe9, 0xce, 0x55, 0x28, 0xdf,
    0x8c, 0xa1, 0x89, 0x0d, 0xbf, 0xe6, 0x42, 0x68, 0x41, 0x99, 0x2d, 0x0f, 0xb0, 0x54, 0xbb, 0x16
]

STANDARD_SBOX = ValidSBox.from_table(AES_SBOX)

KeyLike = Union[str, bytes, bytearray, Sequence[int]]

# State byte (row r, column c) sits at index r + 4*c, the FIPS-197 input order.
SHIFT_ROWS = [r + 4 * ((c + r) % 4) for c in range(4) for r in range(4)]
INV_SHIFT_ROWS = [r + 4 * ((c - r) % 4) for c in range(4) for r in range(4)]

# First row of the circulant MixColumns matrices.
MIX = (0x02, 0x03, 0x01, 0x01)
INV_MIX = (0x0e, 0x0b, 0x0d, 0x09)


def _key_bytes(key: KeyLike) -> List[int]:
    if isinstance(key, str):
        key = key.encode('utf-8')
    elif isinstance(key, int):
        raise InvalidKey(f"Key must be text or a byte sequence, got {type(key).__name__}")
    try:
        key_bytes = bytes(key)
    except (TypeError, ValueError) as e:
        raise InvalidKey(f"Key bytes must be integers in range 0-255: {e}") from e
    if len(key_bytes) != BLOCK_SIZE:
        raise InvalidKeyLength(len(key_bytes))
    return list(key_bytes)


def _mix_column(column: Sequence[int], coeffs: Sequence[int]) -> List[int]:
    out = []
    for r in range(4):
        acc = 0
        for c in range(4):
            acc ^= multiply(coeffs[(c - r) % 4], column[c])
        out.append(acc)
    return out


class AES:
    """AES-128 with a swappable SubBytes table. One instance per call; the
    key schedule and inverse S-Box are derived in the constructor."""

    def __init__(self, key: KeyLike, sbox: Optional[ValidSBox] = None):
        if sbox is None:
            sbox = STANDARD_SBOX
        if not isinstance(sbox, ValidSBox):
            raise MalformedSBox("Cipher needs a validated S-Box (ValidSBox)")
        problem = sbox_table_problem(sbox.table)
        if problem:
            raise MalformedSBox(problem)

        self.key = _key_bytes(key)

        self.sbox = list(sbox.table)
        self.inv_sbox = sbox.inverse_table()

        self.nk = 4
        self.nr = 10

        self.w = self._key_expansion(self.key)

    def _key_expansion(self, key):
        """Round keys as flat 16-byte lists in state order."""
        words = [key[4*i:4*i+4] for i in range(self.nk)]
        for i in range(self.nk, 4 * (self.nr + 1)):
            temp = words[i-1]
            if i % self.nk == 0:
                temp = [self.sbox[b] for b in temp[1:] + temp[:1]]
                # Rcon: successive powers of x (0x02) in GF(2^8)
                temp[0] ^= power(2, i // self.nk - 1)
            words.append([a ^ b for a, b in zip(words[i-self.nk], temp)])
        return [sum(words[4*r:4*r+4], []) for r in range(self.nr + 1)]

    def round_keys(self) -> List[bytes]:
        """The 11 round keys, 16 bytes each."""
        return [bytes(rk) for rk in self.w]

    def _add_round_key(self, state, round_idx):
        return [s ^ k for s, k in zip(state, self.w[round_idx])]

    @staticmethod
    def _substitute(state, table):
        return [table[b] for b in state]

    @staticmethod
    def _permute(state, order):
        return [state[i] for i in order]

    @staticmethod
    def _mix_columns(state, coeffs):
        mixed = []
        for c in range(0, BLOCK_SIZE, 4):
            mixed.extend(_mix_column(state[c:c+4], coeffs))
        return mixed

    def _load_state(self, data) -> List[int]:
        state = list(bytes(data))
        if len(state) != BLOCK_SIZE:
            raise ValueError(f"Block must be {BLOCK_SIZE} bytes, got {len(state)}")
        return state

    def encrypt_block(self, data: bytes) -> bytes:
        state = self._add_round_key(self._load_state(data), 0)
        for rnd in range(1, self.nr + 1):
            state = self._substitute(state, self.sbox)
            state = self._permute(state, SHIFT_ROWS)
            if rnd != self.nr:
                state = self._mix_columns(state, MIX)
            state = self._add_round_key(state, rnd)
        return bytes(state)

    def decrypt_block(self, data: bytes) -> bytes:
        state = self._add_round_key(self._load_state(data), self.nr)
        for rnd in range(self.nr - 1, -1, -1):
            state = self._permute(state, INV_SHIFT_ROWS)
            state = self._substitute(state, self.inv_sbox)
            state = self._add_round_key(state, rnd)
            if rnd:
                state = self._mix_columns(state, INV_MIX)
        return bytes(state)

    def _pkcs7_pad(self, data: bytes) -> bytes:
        pad_len = BLOCK_SIZE - (len(data) % BLOCK_SIZE)
        return data + bytes([pad_len] * pad_len)

    def _pkcs7_unpad(self, data: bytes) -> bytes:
        if not data or len(data) % BLOCK_SIZE:
            raise PaddingError("Padded data must be a non-empty multiple of 16 bytes")
        pad_len = data[-1]
        if pad_len > BLOCK_SIZE or pad_len == 0:
            raise PaddingError(f"Invalid PKCS7 pad byte {pad_len}")
        if data[-pad_len:] != bytes([pad_len] * pad_len):
            raise PaddingError("Inconsistent PKCS7 padding bytes")
        return data[:-pad_len]

    def encrypt_bytes(self, data: bytes) -> bytes:
        data = self._pkcs7_pad(bytes(data))
        return b"".join(
            self.encrypt_block(data[i:i+BLOCK_SIZE]) for i in range(0, len(data), BLOCK_SIZE)
        )

    def decrypt_bytes(self, ciphertext: bytes) -> bytes:
        if not ciphertext or len(ciphertext) % BLOCK_SIZE != 0:
            raise MalformedCiphertext("Ciphertext length must be a non-empty multiple of 16 bytes")
        plaintext = b"".join(
            self.decrypt_block(ciphertext[i:i+BLOCK_SIZE]) for i in range(0, len(ciphertext), BLOCK_SIZE)
        )
        return self._pkcs7_unpad(plaintext)

    def encrypt(self, plaintext: str) -> str:
        data = plaintext.encode('utf-8')
        return self.encrypt_bytes(data).hex()

    def decrypt(self, ciphertext_hex: str) -> str:
        try:
            ciphertext = bytes.fromhex(ciphertext_hex)
        except ValueError as e:
            raise MalformedCiphertext("Invalid Hex String") from e

        decrypted = self.decrypt_bytes(ciphertext)
        try:
            return decrypted.decode('utf-8')
        except UnicodeDecodeError as e:
            raise EncodingError("Decrypted bytes are not valid UTF-8 (wrong key or S-Box?)") from e


def _resolve_sbox(sbox: Union[ValidSBox, Sequence[int], None]) -> Optional[ValidSBox]:
    if sbox is None or isinstance(sbox, ValidSBox):
        return sbox
    return ValidSBox.from_table(sbox)


def aes_encrypt(plaintext: str, key: KeyLike, sbox: Union[ValidSBox, Sequence[int], None] = None) -> str:
    """Encrypt UTF-8 text; returns the ciphertext as hex."""
    aes = AES(key, _resolve_sbox(sbox))
    ciphertext = aes.encrypt(plaintext)
    logger.debug(f"Encrypted {len(plaintext)} chars into {len(ciphertext) // 32} block(s)")
    return ciphertext


def aes_decrypt(ciphertext: str, key: KeyLike, sbox: Union[ValidSBox, Sequence[int], None] = None) -> str:
    aes = AES(key, _resolve_sbox(sbox))
    try:
        return aes.decrypt(ciphertext)
    except (PaddingError, EncodingError) as e:
        logger.warning(f"Decryption failed: {e}")
        raise
