"""Modular arithmetic, primitive roots and prime generation on 64-bit words."""

from __future__ import annotations

import itertools
import random
from dataclasses import dataclass, field

_MASK64 = (1 << 64) - 1
_BARRETT_SHIFTS = (32, 52, 64)
_MILLER_RABIN_BASES = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37)
_PRIMITIVE_ROOT_TRIALS = 200


def maximum_value(bits):
    """Return the largest unsigned value that fits in ``bits`` bits."""
    if not 0 <= bits <= 64:
        raise ValueError(f"bits must be in [0, 64]; got {bits}")
    return (1 << bits) - 1


def is_power_of_two(value):
    """Return True if ``value`` is a positive power of two."""
    return value > 0 and value & (value - 1) == 0


def msb(value):
    """Return the index of the most significant set bit of ``value``."""
    if value <= 0:
        raise ValueError(f"msb is undefined for {value}")
    return value.bit_length() - 1


def log2(value):
    """Return log2 of ``value``, which must be a power of two."""
    if not is_power_of_two(value):
        raise ValueError(f"{value} is not a power of two")
    return value.bit_length() - 1


@dataclass(frozen=True)
class MultiplyFactor:
    """An operand together with its Barrett factor floor((operand << bit_shift) / modulus)."""

    operand: int
    bit_shift: int
    modulus: int
    barrett_factor: int = field(init=False)

    def __post_init__(self):
        if self.bit_shift not in _BARRETT_SHIFTS:
            raise ValueError(f"unsupported bit shift {self.bit_shift}")
        if self.modulus <= 0:
            raise ValueError("modulus must be positive")
        if self.operand > self.modulus:
            raise ValueError(
                f"operand {self.operand} is larger than modulus {self.modulus}"
            )
        factor = ((self.operand << self.bit_shift) // self.modulus) & _MASK64
        object.__setattr__(self, "barrett_factor", factor)


def inverse_mod(value, modulus):
    """Return the multiplicative inverse of ``value`` modulo ``modulus``."""
    if modulus <= 0:
        raise ValueError("modulus must be positive")
    reduced = value % modulus
    if reduced == 0:
        raise ValueError(f"{value} has no inverse modulo {modulus}")
    try:
        return pow(reduced, -1, modulus)
    except ValueError:
        raise ValueError(f"{value} has no inverse modulo {modulus}") from None


def barrett_reduce_64(value, modulus, q_barr):
    """Reduce a 64-bit ``value`` modulo ``modulus`` with a 64-bit Barrett factor."""
    if modulus == 0:
        raise ValueError("modulus == 0")
    quotient = (value * q_barr) >> 64
    remainder = (value - quotient * modulus) & _MASK64
    return remainder - modulus if remainder >= modulus else remainder


def _check_reduced(x, y, modulus):
    if modulus == 0:
        raise ValueError("modulus == 0")
    if x >= modulus:
        raise ValueError(f"x {x} >= modulus {modulus}")
    if y >= modulus:
        raise ValueError(f"y {y} >= modulus {modulus}")


def multiply_mod(x, y, modulus):
    """Return x * y mod modulus for x, y < modulus."""
    _check_reduced(x, y, modulus)
    return (x * y) % modulus


def multiply_mod_precon(x, y, y_precon, modulus):
    """Return x * y mod modulus using the 64-bit Barrett factor ``y_precon`` of y."""
    quotient = (x * y_precon) >> 64
    result = (x * y - quotient * modulus) & _MASK64
    return result - modulus if result >= modulus else result


def multiply_mod_lazy(x, y, y_precon, modulus, bit_shift=64):
    """Return a value in [0, 2 * modulus) congruent to x * y.

    ``y_precon`` is the Barrett factor of ``y`` for ``bit_shift``; pass None to
    have it computed.
    """
    if y_precon is None:
        y_precon = MultiplyFactor(y, bit_shift, modulus).barrett_factor
    quotient = ((x * y_precon) >> bit_shift) & _MASK64
    return (y * x - quotient * modulus) & _MASK64


def add_uint_mod(x, y, modulus):
    """Return (x + y) mod modulus for x, y < modulus."""
    _check_reduced(x, y, modulus)
    total = x + y
    return total - modulus if total >= modulus else total


def sub_uint_mod(x, y, modulus):
    """Return (x - y) mod modulus for x, y < modulus."""
    _check_reduced(x, y, modulus)
    diff = x + modulus - y
    return diff - modulus if diff >= modulus else diff


def pow_mod(base, exp, modulus):
    """Return base ** exp mod modulus."""
    if modulus == 0:
        raise ValueError("modulus == 0")
    return pow(base % modulus, exp, modulus)


def is_primitive_root(root, degree, modulus):
    """Return True if ``root`` is a primitive ``degree``-th root of unity mod ``modulus``."""
    if root == 0:
        return False
    if not is_power_of_two(degree):
        raise ValueError(f"{degree} is not a power of 2")
    return pow_mod(root, degree // 2, modulus) == modulus - 1


def generate_primitive_root(degree, modulus):
    """Return some primitive ``degree``-th root of unity modulo ``modulus``."""
    rng = random.Random(0)
    size_quotient_group = (modulus - 1) // degree
    for _ in range(_PRIMITIVE_ROOT_TRIALS):
        root = pow_mod(rng.randrange(modulus), size_quotient_group, modulus)
        if is_primitive_root(root, degree, modulus):
            return root
    raise ValueError(
        f"no primitive root found for degree {degree} modulus {modulus}"
    )


def _odd_powers(root, count, modulus):
    step = multiply_mod(root, root, modulus)
    current = root
    for _ in range(count):
        yield current
        current = multiply_mod(current, step, modulus)


def minimal_primitive_root(degree, modulus):
    """Return the smallest primitive ``degree``-th root of unity modulo ``modulus``."""
    if not is_power_of_two(degree):
        raise ValueError(f"degree {degree} is not a power of 2")
    root = generate_primitive_root(degree, modulus)
    return min(_odd_powers(root, degree, modulus))


def reverse_bits(value, bit_width):
    """Return the lowest ``bit_width`` bits of ``value`` in reverse order."""
    if value != 0 and msb(value) > bit_width:
        raise ValueError(
            f"msb({value}) = {msb(value)} exceeds bit width {bit_width}"
        )
    if bit_width == 0:
        return 0
    bits = format(value & ((1 << bit_width) - 1), f"0{bit_width}b")
    return int(bits[::-1], 2)


def is_prime(n):
    """Deterministic Miller-Rabin primality test for 64-bit integers."""
    if n < 2:
        return False
    for base in _MILLER_RABIN_BASES:
        if n == base:
            return True
        if n % base == 0:
            return False

    r = ((n - 1) & -(n - 1)).bit_length() - 1
    d = (n - 1) >> r

    for base in _MILLER_RABIN_BASES:
        x = pow_mod(base, d, n)
        if x in (1, n - 1):
            continue
        for _ in range(1, r):
            x = pow_mod(x, 2, n)
            if x == n - 1:
                break
        else:
            return False
    return True


def generate_primes(num_primes, bit_size, ntt_size):
    """Return ``num_primes`` primes p with bit_size + 1 bits and p == 1 mod 2 * ntt_size."""
    if num_primes <= 0:
        raise ValueError("num_primes == 0")
    if not is_power_of_two(ntt_size):
        raise ValueError(f"ntt_size {ntt_size} is not a power of two")
    if log2(ntt_size) >= bit_size:
        raise ValueError(
            f"log2(ntt_size) {log2(ntt_size)} should be less than bit_size {bit_size}"
        )
    candidates = range((1 << bit_size) + 1, 1 << (bit_size + 1), 2 * ntt_size)
    primes = list(itertools.islice(filter(is_prime, candidates), num_primes))
    if len(primes) < num_primes:
        raise ValueError("failed to find enough primes")
    return primes