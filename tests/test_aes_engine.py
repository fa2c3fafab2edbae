import pytest

from sboxlab import (
    AES,
    AES_SBOX,
    EncodingError,
    InvalidKey,
    InvalidKeyLength,
    MalformedCiphertext,
    MalformedSBox,
    PaddingError,
    SBoxGenerator,
    SBoxLabError,
    ValidSBox,
    aes_decrypt,
    aes_encrypt,
)
from sboxlab.gf2_matrix import numpy_bit_source

KEY = "0123456789ABCDEF"


def test_fips197_known_answer():
    aes = AES(bytes(range(16)))
    plaintext = bytes.fromhex("00112233445566778899aabbccddeeff")
    ciphertext = aes.encrypt_block(plaintext)
    assert ciphertext.hex() == "69c4e0d86a7b0430d8cdb78070b4c55a"
    assert aes.decrypt_block(ciphertext) == plaintext


def test_fips197_key_expansion_last_round_key():
    aes = AES(bytes.fromhex("2b7e151628aed2a6abf7158809cf4f3c"))
    round_keys = aes.round_keys()
    assert len(round_keys) == 11
    assert round_keys[0].hex() == "2b7e151628aed2a6abf7158809cf4f3c"
    assert round_keys[10].hex() == "d014f9a8c9ee2589e13f0cc8b6630ca6"


def test_hello_round_trip_with_standard_sbox():
    ciphertext = aes_encrypt("HELLO", KEY)
    assert len(ciphertext) == 32
    assert aes_decrypt(ciphertext, KEY) == "HELLO"


@pytest.mark.parametrize("plaintext", [
    "",
    "A",
    "exactly 16 bytes",
    "The quick brown fox jumps over the lazy dog",
    "unicode: ñ, ü, 漢字, 🙂",
])
def test_round_trip_with_generated_sbox(plaintext, generated):
    ciphertext = aes_encrypt(plaintext, KEY, generated.sbox)
    assert aes_decrypt(ciphertext, KEY, generated.sbox) == plaintext


def test_full_block_plaintext_gets_extra_padding_block():
    assert len(aes_encrypt("exactly 16 bytes", KEY)) == 64


def test_custom_sbox_changes_ciphertext(generated):
    assert aes_encrypt("HELLO", KEY, generated.sbox) != aes_encrypt("HELLO", KEY)


def test_explicit_standard_sbox_matches_default():
    assert aes_encrypt("HELLO", KEY, AES_SBOX) == aes_encrypt("HELLO", KEY)


def test_ecb_blocks_are_independent():
    ciphertext = aes_encrypt("A" * 32, KEY)
    assert ciphertext[:32] == ciphertext[32:64]


def _decrypt_or_error(ciphertext, key, sbox):
    try:
        return aes_decrypt(ciphertext, key, sbox)
    except (PaddingError, EncodingError):
        return None


def test_mismatched_sboxes_do_not_round_trip(generated):
    other = SBoxGenerator(numpy_bit_source(9001)).generate()
    plaintext = "attack at dawn"
    ciphertext = aes_encrypt(plaintext, KEY, generated.sbox)
    assert _decrypt_or_error(ciphertext, KEY, other.sbox) != plaintext
    assert _decrypt_or_error(ciphertext, KEY, None) != plaintext


def test_wrong_key_does_not_round_trip():
    ciphertext = aes_encrypt("attack at dawn", KEY)
    assert _decrypt_or_error(ciphertext, "FEDCBA9876543210", None) != "attack at dawn"


@pytest.mark.parametrize("key", ["", "short", "0123456789ABCDEF0", "ñ123456789ABCDEF", b"\x00" * 15])
def test_invalid_key_length(key):
    with pytest.raises(InvalidKeyLength):
        aes_encrypt("HELLO", key)


@pytest.mark.parametrize("key", [[300] * 16, [-1] * 16, [1.5] * 16, [None] * 16, 16])
def test_key_bytes_out_of_range_are_typed_errors(key):
    with pytest.raises(InvalidKey) as excinfo:
        aes_encrypt("HELLO", key)
    assert isinstance(excinfo.value, SBoxLabError)


def test_int_sequence_key_accepted():
    key = list(KEY.encode())
    assert aes_encrypt("HELLO", key) == aes_encrypt("HELLO", KEY)


def test_bytes_key_accepted():
    ciphertext = aes_encrypt("HELLO", KEY.encode())
    assert aes_decrypt(ciphertext, KEY) == "HELLO"


def test_non_bijective_sbox_rejected_before_encryption():
    with pytest.raises(MalformedSBox):
        aes_encrypt("HELLO", KEY, [0] * 256)


def test_short_sbox_rejected():
    with pytest.raises(MalformedSBox):
        aes_decrypt("00" * 16, KEY, list(range(100)))


def test_aes_class_requires_valid_sbox():
    with pytest.raises(MalformedSBox):
        AES(KEY, list(range(256)))
    AES(KEY, ValidSBox.from_table(list(range(256))))


@pytest.mark.parametrize("ciphertext", ["", "zz" * 16, "00" * 15, "abc"])
def test_malformed_ciphertext(ciphertext):
    with pytest.raises(MalformedCiphertext):
        aes_decrypt(ciphertext, KEY)


def _encrypt_raw_block(block):
    return AES(KEY).encrypt_block(block).hex()


@pytest.mark.parametrize("block", [
    bytes(15) + b"\x00",       # pad byte 0
    bytes(15) + b"\x11",       # pad byte 17
    bytes(13) + b"\x01\x02\x03",  # trailing bytes disagree
])
def test_invalid_padding(block):
    with pytest.raises(PaddingError):
        aes_decrypt(_encrypt_raw_block(block), KEY)


def test_invalid_utf8_is_encoding_error():
    block = b"\xff\xfe\xfd" + bytes([13] * 13)
    with pytest.raises(EncodingError):
        aes_decrypt(_encrypt_raw_block(block), KEY)


def test_errors_are_value_errors():
    with pytest.raises(ValueError):
        aes_encrypt("HELLO", "short")


def test_inputs_are_not_mutated(generated):
    table = list(generated.sbox)
    aes_encrypt("HELLO", KEY, table)
    assert table == generated.sbox


def test_model_copy_cannot_smuggle_non_bijective_table():
    sbox = ValidSBox.from_table(AES_SBOX)
    with pytest.raises(MalformedSBox):
        sbox.model_copy(update={"table": (0,) * 256})


def test_aes_rechecks_sbox_table():
    # model_construct skips every validator
    forged = ValidSBox.model_construct(table=(0,) * 256)
    with pytest.raises(MalformedSBox):
        AES(KEY, forged)
    with pytest.raises(MalformedSBox):
        aes_encrypt("HELLO", KEY, forged)


def test_direct_construction_raises_malformed_sbox():
    with pytest.raises(MalformedSBox):
        ValidSBox(table=(0,) * 256)
    with pytest.raises(MalformedSBox):
        ValidSBox(table=tuple(range(255)))
    assert ValidSBox(table=tuple(AES_SBOX)).table == tuple(AES_SBOX)
