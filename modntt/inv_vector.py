"""Inverse negacyclic NTT organised around 8-lane butterfly stages.

The transform works on blocks of eight coefficients at a time. The first three
stages (butterfly distances 1, 2 and 4) shuffle sixteen coefficients into two
vectors. The final stage is merged with the scaling by 1/n. Small transforms
run breadth-first. Larger ones are split depth-first until the pieces reach
the base size.
"""

from __future__ import annotations

from .lanes import (
    load_inv_interleaved_t1,
    load_inv_interleaved_t2,
    load_inv_interleaved_t4,
    load_w_op_t2,
    load_w_op_t4,
    write_inv_interleaved_t4,
)
from .number_theory import MultiplyFactor, inverse_mod, maximum_value, multiply_mod
from .transforms import (
    INVERSE_INPUT_MOD_FACTORS,
    INVERSE_OUTPUT_MOD_FACTORS,
    check_ntt_arguments,
)

_MASK64 = (1 << 64) - 1
_MASK52 = (1 << 52) - 1
_LANES = 8
_BLOCK = 2 * _LANES
_BIT_SHIFTS = (32, 52, 64)
_BASE_NTT_SIZE = 1024
_MIN_DEGREE = 16


def _check_bit_shift(bit_shift):
    if bit_shift not in _BIT_SHIFTS:
        raise ValueError(f"bit_shift must be one of 32, 52, 64; got {bit_shift}")


def _lazy_product(w_op, w_precon, value, modulus, bit_shift):
    """Return a value in [0, 2 * modulus) congruent to w_op * value."""
    if bit_shift == 32:
        quotient = ((w_precon * value) & _MASK64) >> 32
        return (w_op * value - quotient * modulus) & _MASK64
    if bit_shift == 52:
        quotient = ((w_precon & _MASK52) * (value & _MASK52)) >> 52
        return (w_op * value - quotient * modulus) & _MASK52
    quotient = (w_precon * value) >> 64
    return (w_op * value - quotient * modulus) & _MASK64


def inv_butterfly(
    x, y, w_op, w_precon, modulus, bit_shift=64, input_less_than_mod=False
):
    """Apply the Harvey inverse butterfly lane by lane.

    With inputs in [0, 2q) (or [0, q) when ``input_less_than_mod``), return
    new lanes (x + y, w * (x - y)) modulo q, each in [0, 2q).
    """
    _check_bit_shift(bit_shift)
    xs, ys, ws, ps = list(x), list(y), list(w_op), list(w_precon)
    if not len(xs) == len(ys) == len(ws) == len(ps):
        raise ValueError("butterfly lanes must have equal lengths")
    twice_mod = modulus << 1
    out_x, out_y = [], []
    for xv, yv, wv, pv in zip(xs, ys, ws, ps):
        diff = xv + twice_mod - yv
        total = xv + yv
        if not input_less_than_mod and total >= twice_mod:
            total -= twice_mod
        out_x.append(total & _MASK64)
        out_y.append(_lazy_product(wv, pv, diff & _MASK64, modulus, bit_shift))
    return out_x, out_y


class _InverseKernel:
    """Runs the staged inverse transform on a list of coefficients in place."""

    def __init__(self, values, modulus, roots, precon, bit_shift, input_mod_factor,
                 output_mod_factor):
        self.values = values
        self.modulus = modulus
        self.roots = roots
        self.precon = precon
        self.bit_shift = bit_shift
        self.input_mod_factor = input_mod_factor
        self.output_mod_factor = output_mod_factor

    def _butterfly(self, x, y, w_op, w_precon, input_less_than_mod=False):
        return inv_butterfly(
            x, y, w_op, w_precon, self.modulus, self.bit_shift, input_less_than_mod
        )

    def _blocks(self, base, count, w_idx, step):
        for i in range(count):
            block = slice(base + _BLOCK * i, base + _BLOCK * (i + 1))
            roots = slice(w_idx + step * i, w_idx + step * (i + 1))
            yield block, self.roots[roots], self.precon[roots]

    def stage_t1(self, base, m, w_idx, input_less_than_mod):
        values = self.values
        for block, w_op, w_precon in self._blocks(base, m // 8, w_idx, _LANES):
            x, y = load_inv_interleaved_t1(values[block])
            x, y = self._butterfly(x, y, w_op, w_precon, input_less_than_mod)
            values[block] = x + y

    def stage_t2(self, base, m, w_idx):
        values = self.values
        for block, w_op, w_precon in self._blocks(base, m // 4, w_idx, 4):
            x, y = load_inv_interleaved_t2(values[block])
            x, y = self._butterfly(
                x, y, load_w_op_t2(w_op), load_w_op_t2(w_precon)
            )
            values[block] = x + y

    def stage_t4(self, base, m, w_idx):
        values = self.values
        for block, w_op, w_precon in self._blocks(base, m // 2, w_idx, 2):
            x, y = load_inv_interleaved_t4(values[block])
            x, y = self._butterfly(
                x, y, load_w_op_t4(w_op), load_w_op_t4(w_precon)
            )
            values[block] = write_inv_interleaved_t4(x, y)

    def stage_t8(self, base, t, m, w_idx):
        values = self.values
        for i in range(m):
            w_op = [self.roots[w_idx + i]] * _LANES
            w_precon = [self.precon[w_idx + i]] * _LANES
            x_start = base + 2 * i * t
            y_start = x_start + t
            for j in range(0, t, _LANES):
                xs = slice(x_start + j, x_start + j + _LANES)
                ys = slice(y_start + j, y_start + j + _LANES)
                values[xs], values[ys] = self._butterfly(
                    values[xs], values[ys], w_op, w_precon
                )

    def run(self, base, n, depth, half):
        t = 1
        m = n >> 1
        w_idx = 1 + m * half

        if n <= _BASE_NTT_SIZE:
            self.stage_t1(base, m, w_idx, self.input_mod_factor == 1)
            t <<= 1
            m >>= 1
            delta = m * ((1 << (depth + 1)) - half)
            w_idx += delta

            self.stage_t2(base, m, w_idx)
            t <<= 1
            m >>= 1
            delta >>= 1
            w_idx += delta

            self.stage_t4(base, m, w_idx)
            t <<= 1
            m >>= 1
            delta >>= 1
            w_idx += delta

            while m > 1:
                self.stage_t8(base, t, m, w_idx)
                t <<= 1
                m >>= 1
                delta >>= 1
                w_idx += delta
        else:
            self.run(base, n // 2, depth + 1, 2 * half)
            self.run(base + n // 2, n // 2, depth + 1, 2 * half + 1)

            delta = m * ((1 << (depth + 1)) - half)
            while m > 2:
                t <<= 1
                delta >>= 1
                w_idx += delta
                m >>= 1
            if m == 2:
                self.stage_t8(base, t, m, w_idx)
                t <<= 1
                m >>= 1
                delta >>= 1
                w_idx += delta

        if depth == 0:
            self._finish(n, w_idx)

    def _finish(self, n, w_idx):
        """Merge the last butterfly stage with multiplication by 1/n."""
        q = self.modulus
        twice_mod = q << 1
        bit_shift = self.bit_shift
        w_op = self.roots[w_idx]
        inv_n = inverse_mod(n, q)
        inv_n_prime = MultiplyFactor(inv_n, bit_shift, q).barrett_factor
        inv_n_w = multiply_mod(inv_n, w_op, q)
        inv_n_w_prime = MultiplyFactor(inv_n_w, bit_shift, q).barrett_factor

        values = self.values
        half = n >> 1
        for j in range(half):
            x, y = values[j], values[j + half]
            total = x + y
            if total >= twice_mod:
                total -= twice_mod
            diff = (x + twice_mod - y) & _MASK64
            new_x = _lazy_product(inv_n, inv_n_prime, total, q, bit_shift)
            new_y = _lazy_product(inv_n_w, inv_n_w_prime, diff, q, bit_shift)
            if self.output_mod_factor == 1:
                if new_x >= q:
                    new_x -= q
                if new_y >= q:
                    new_y -= q
            values[j], values[j + half] = new_x, new_y


def inverse_transform_vectorized(
    operand,
    modulus,
    inv_root_of_unity_powers,
    precon_inv_root_of_unity_powers,
    input_mod_factor=1,
    output_mod_factor=1,
    bit_shift=64,
):
    """Return the inverse NTT of bit-reversed ``operand``, scaled by 1/n.

    ``inv_root_of_unity_powers`` holds the inverse roots in the order the
    stages consume them, and ``precon_inv_root_of_unity_powers`` their
    Barrett factors for ``bit_shift``. The degree must be at least 16. Inputs
    lie in [0, input_mod_factor * modulus); outputs lie in
    [0, output_mod_factor * modulus).
    """
    _check_bit_shift(bit_shift)
    values = list(operand)
    n = len(values)
    check_ntt_arguments(n, modulus)
    if n < _MIN_DEGREE:
        raise ValueError(f"transforms need n >= {_MIN_DEGREE}, got n = {n}")
    limit = maximum_value(bit_shift)
    if modulus >= limit // 2:
        raise ValueError(
            f"modulus {modulus} too large for bit shift {bit_shift} "
            f"=> maximum value {limit // 2}"
        )
    if input_mod_factor not in INVERSE_INPUT_MOD_FACTORS:
        raise ValueError(f"input_mod_factor must be 1 or 2; got {input_mod_factor}")
    if output_mod_factor not in INVERSE_OUTPUT_MOD_FACTORS:
        raise ValueError(f"output_mod_factor must be 1 or 2; got {output_mod_factor}")

    roots = list(inv_root_of_unity_powers)
    precon = list(precon_inv_root_of_unity_powers)
    for name, table in (("inv_root_of_unity_powers", roots),
                        ("precon_inv_root_of_unity_powers", precon)):
        if len(table) < n:
            raise ValueError(f"{name} needs at least {n} entries, got {len(table)}")
    if any(not 0 <= p <= limit for p in precon):
        raise ValueError("precon_inv_root_of_unity_powers too large")
    bound = input_mod_factor * modulus
    for value in values:
        if not 0 <= value < bound:
            raise ValueError(
                f"operand larger than input_mod_factor * modulus "
                f"({input_mod_factor} * {modulus})"
            )

    kernel = _InverseKernel(
        values, modulus, roots, precon, bit_shift, input_mod_factor, output_mod_factor
    )
    kernel.run(0, n, 0, 0)
    return kernel.values