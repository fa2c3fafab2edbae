"""Arithmetic in GF(2^8) with the AES reduction polynomial.

Field elements are plain ints 0-255. Addition is XOR and needs no helper.
"""

# Irreducible polynomial: x^8 + x^4 + x^3 + x + 1 (0x11B)
AES_POLY = 0x11B


def xtime(a: int) -> int:
    """Multiply by x (0x02)."""
    a <<= 1
    if a & 0x100:
        a ^= AES_POLY
    return a & 0xFF


def multiply(a: int, b: int) -> int:
    """Galois Field multiplication in GF(2^8)"""
    p = 0
    for _ in range(8):
        if b & 1:
            p ^= a
        hi_bit_set = a & 0x80
        a = (a << 1) & 0x1FF
        if hi_bit_set:
            a ^= AES_POLY
        b >>= 1
    return p & 0xFF


def power(a: int, n: int) -> int:
    result = 1
    for _ in range(n):
        result = multiply(result, a)
    return result


def _degree(p: int) -> int:
    return p.bit_length() - 1


def _clmul(a: int, b: int) -> int:
    # Carry-less product without reduction
    p = 0
    while b:
        if b & 1:
            p ^= a
        a <<= 1
        b >>= 1
    return p


def _reduce(p: int) -> int:
    return p ^ _clmul(divide(p, AES_POLY), AES_POLY)


def divide(a: int, b: int) -> int:
    """Quotient of the GF(2) polynomial division a / b.

    Works on bit-representations of polynomials, so `a` may be the 9-bit
    modulus itself. The remainder is discarded. Returns 0 when b is 0.
    """
    if b == 0:
        return 0
    quotient = 0
    deg_b = _degree(b)
    for shift in range(_degree(a) - deg_b, -1, -1):
        # compare degrees, not integer magnitudes
        if (a >> (shift + deg_b)) & 1:
            a ^= b << shift
            quotient |= 1 << shift
    return quotient


def inverse(x: int) -> int:
    """Multiplicative inverse via the extended Euclidean algorithm.

    0 has no inverse; by convention inverse(0) == 0.
    """
    if x == 0:
        return 0
    r0, r1 = AES_POLY, x
    t0, t1 = 0, 1
    while r1 != 0:
        q = divide(r0, r1)
        r0, r1 = r1, r0 ^ _clmul(q, r1)
        t0, t1 = t1, t0 ^ multiply(_reduce(q), t1)
    # r0 is now gcd(x, AES_POLY) == 1
    return t0
