"""Negacyclic number-theoretic transform over a prime field."""

from __future__ import annotations

from enum import Enum

from .fwd_vector import forward_transform_vectorized, vector_root_of_unity_powers
from .inv_vector import inverse_transform_vectorized
from .number_theory import (
    MultiplyFactor,
    inverse_mod,
    is_primitive_root,
    log2,
    maximum_value,
    minimal_primitive_root,
    multiply_mod,
    reverse_bits,
)
from .transforms import (
    FORWARD_INPUT_MOD_FACTORS,
    FORWARD_OUTPUT_MOD_FACTORS,
    INVERSE_INPUT_MOD_FACTORS,
    INVERSE_OUTPUT_MOD_FACTORS,
    check_ntt_arguments,
    forward_transform_to_bit_reverse,
    inverse_transform_from_bit_reverse,
)

_MIN_VECTOR_DEGREE = 16


class Backend(Enum):
    """Which transform kernels an :class:`NTT` uses.

    SCALAR runs the plain 64-bit butterflies. DQ runs the 8-lane kernels with
    32-bit Barrett factors when the modulus is small enough, else 64-bit ones.
    IFMA prefers 52-bit factors and otherwise behaves like DQ. Degrees below
    16 always use the scalar kernels.
    """

    SCALAR = "scalar"
    DQ = "dq"
    IFMA = "ifma"


def _check_factor(name, value, allowed):
    if value not in allowed:
        choices = ", ".join(str(a) for a in allowed)
        raise ValueError(f"{name} must be one of {choices}; got {value}")


def _halvings(n):
    m = n >> 1
    while m > 0:
        yield m
        m >>= 1


class NTT:
    """Forward and inverse negacyclic NTT of a fixed degree and modulus."""

    def __init__(self, degree, modulus, root_of_unity=None, backend=Backend.SCALAR):
        check_ntt_arguments(degree, modulus)
        if root_of_unity is None:
            root_of_unity = minimal_primitive_root(2 * degree, modulus)
        if not 0 < root_of_unity < modulus:
            raise ValueError(
                f"root of unity {root_of_unity} must lie in (0, {modulus})"
            )
        if not is_primitive_root(root_of_unity, 2 * degree, modulus):
            raise ValueError(
                f"{root_of_unity} is not a primitive 2*{degree}'th root of unity"
            )
        self.degree = degree
        self.modulus = modulus
        self.root_of_unity = root_of_unity
        self.inv_root_of_unity = inverse_mod(root_of_unity, modulus)
        self.degree_bits = log2(degree)
        self.backend = Backend(backend)
        self._precon_cache = {}
        self._compute_root_of_unity_powers()

    def _compute_root_of_unity_powers(self):
        n, q, w = self.degree, self.modulus, self.root_of_unity
        roots = [0] * n
        inv_roots = [0] * n
        roots[0] = 1
        inv_roots[0] = inverse_mod(1, q)
        prev = 0
        for i in range(1, n):
            idx = reverse_bits(i, self.degree_bits)
            roots[idx] = multiply_mod(roots[prev], w, q)
            inv_roots[idx] = inverse_mod(roots[idx], q)
            prev = idx

        order = [0] + [m + i for m in _halvings(n) for i in range(m)]
        self._roots = tuple(roots)
        self._inv_roots = tuple(inv_roots[k] for k in order)
        self._vector_roots = tuple(vector_root_of_unity_powers(roots))

    def _precon(self, table, bit_shift):
        key = (table, bit_shift)
        if key not in self._precon_cache:
            values = {
                "roots": self._roots,
                "inv_roots": self._inv_roots,
                "vector_roots": self._vector_roots,
            }[table]
            self._precon_cache[key] = tuple(
                MultiplyFactor(v, bit_shift, self.modulus).barrett_factor
                for v in values
            )
        return self._precon_cache[key]

    @property
    def root_of_unity_powers(self):
        """Powers of the root of unity in bit-reversed order."""
        return self._roots

    @property
    def inv_root_of_unity_powers(self):
        """Inverse root powers in the order the inverse transform consumes them."""
        return self._inv_roots

    @property
    def vector_root_of_unity_powers(self):
        """Root powers laid out for the 8-lane forward kernels."""
        return self._vector_roots

    @property
    def precon64_root_of_unity_powers(self):
        """64-bit Barrett factors of :attr:`root_of_unity_powers`."""
        return self._precon("roots", 64)

    @property
    def precon64_inv_root_of_unity_powers(self):
        """64-bit Barrett factors of :attr:`inv_root_of_unity_powers`."""
        return self._precon("inv_roots", 64)

    def root_of_unity_power(self, index):
        """Return the root power at ``index`` of the bit-reversed table."""
        return self._roots[index]

    def inv_root_of_unity_power(self, index):
        """Return the inverse root power at ``index``."""
        return self._inv_roots[index]

    def _vector_shift(self, divisor):
        if self.backend is Backend.SCALAR or self.degree < _MIN_VECTOR_DEGREE:
            return None
        if self.backend is Backend.IFMA and self.modulus < maximum_value(52) // divisor:
            return 52
        if self.modulus < maximum_value(32) // divisor:
            return 32
        return 64

    def _prepare(self, operand, input_mod_factor, output_mod_factor, inputs, outputs):
        _check_factor("input_mod_factor", input_mod_factor, inputs)
        _check_factor("output_mod_factor", output_mod_factor, outputs)
        values = list(operand)
        if len(values) != self.degree:
            raise ValueError(
                f"operand must have {self.degree} values, got {len(values)}"
            )
        bound = self.modulus * input_mod_factor
        for value in values:
            if not 0 <= value < bound:
                raise ValueError(f"value in operand {value} exceeds bound {bound}")
        return values

    def compute_forward(self, operand, input_mod_factor=1, output_mod_factor=1):
        """Return the forward NTT of ``operand`` in bit-reversed order.

        Inputs must lie in [0, input_mod_factor * modulus) with input_mod_factor
        1, 2 or 4; outputs lie in [0, output_mod_factor * modulus) with
        output_mod_factor 1 or 4.
        """
        values = self._prepare(
            operand, input_mod_factor, output_mod_factor,
            FORWARD_INPUT_MOD_FACTORS, FORWARD_OUTPUT_MOD_FACTORS,
        )
        bit_shift = self._vector_shift(4)
        if bit_shift is None:
            return forward_transform_to_bit_reverse(
                values, self.modulus, self._roots,
                self.precon64_root_of_unity_powers,
                input_mod_factor, output_mod_factor,
            )
        return forward_transform_vectorized(
            values, self.modulus, self._vector_roots,
            self._precon("vector_roots", bit_shift),
            input_mod_factor, output_mod_factor, bit_shift,
        )

    def compute_inverse(self, operand, input_mod_factor=1, output_mod_factor=1):
        """Return the inverse NTT of bit-reversed ``operand``.

        Inputs must lie in [0, input_mod_factor * modulus) and outputs lie in
        [0, output_mod_factor * modulus); both factors must be 1 or 2.
        """
        values = self._prepare(
            operand, input_mod_factor, output_mod_factor,
            INVERSE_INPUT_MOD_FACTORS, INVERSE_OUTPUT_MOD_FACTORS,
        )
        bit_shift = self._vector_shift(2)
        if bit_shift is None:
            return inverse_transform_from_bit_reverse(
                values, self.modulus, self._inv_roots,
                self.precon64_inv_root_of_unity_powers,
                input_mod_factor, output_mod_factor,
            )
        return inverse_transform_vectorized(
            values, self.modulus, self._inv_roots,
            self._precon("inv_roots", bit_shift),
            input_mod_factor, output_mod_factor, bit_shift,
        )