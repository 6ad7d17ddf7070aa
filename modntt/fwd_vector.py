"""Forward negacyclic NTT organised around 8-lane butterfly stages.

The transform works on blocks of eight coefficients at a time. The last three
stages (butterfly distances 4, 2 and 1) shuffle sixteen coefficients into two
vectors, so their roots of unity are stored repeated to match the lanes. Small
transforms run breadth-first. Larger ones are split depth-first until the
pieces reach the base size.
"""

from __future__ import annotations

from .lanes import (
    load_fwd_interleaved_t1,
    load_fwd_interleaved_t2,
    load_fwd_interleaved_t4,
    write_fwd_interleaved_t1,
)
from .number_theory import maximum_value
from .transforms import (
    FORWARD_INPUT_MOD_FACTORS,
    FORWARD_OUTPUT_MOD_FACTORS,
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


def _lazy_product(w_op, w_precon, y, modulus, bit_shift):
    """Return a value in [0, 2 * modulus) congruent to w_op * y."""
    if bit_shift == 32:
        quotient = ((w_precon * y) & _MASK64) >> 32
        return (w_op * y - quotient * modulus) & _MASK64
    if bit_shift == 52:
        quotient = ((w_precon & _MASK52) * (y & _MASK52)) >> 52
        return (w_op * y - quotient * modulus) & _MASK52
    quotient = ((w_precon * y) & ((1 << 128) - 1)) >> 64
    return (w_op * y - quotient * modulus) & _MASK64


def fwd_butterfly(
    x, y, w_op, w_precon, modulus, bit_shift=64, input_less_than_mod=False
):
    """Apply the Harvey forward butterfly lane by lane.

    With inputs in [0, 4q) (or x in [0, 2q) when ``input_less_than_mod``),
    return new lanes (x + w*y, x - w*y) modulo q, each in [0, 4q).
    """
    _check_bit_shift(bit_shift)
    xs, ys, ws, ps = list(x), list(y), list(w_op), list(w_precon)
    if not len(xs) == len(ys) == len(ws) == len(ps):
        raise ValueError("butterfly lanes must have equal lengths")
    twice_mod = modulus << 1
    out_x, out_y = [], []
    for xv, yv, wv, pv in zip(xs, ys, ws, ps):
        if not input_less_than_mod and xv >= twice_mod:
            xv -= twice_mod
        product = _lazy_product(wv, pv, yv, modulus, bit_shift)
        out_x.append((xv + product) & _MASK64)
        out_y.append((xv + twice_mod - product) & _MASK64)
    return out_x, out_y


def vector_root_of_unity_powers(root_of_unity_powers):
    """Return the root table laid out for the lane-shuffled last stages.

    The roots for distance-2 butterflies, at [n/4, n/2), are each repeated
    twice. The roots for distance-4 butterflies, at [n/8, n/4), are each
    repeated four times. The result has 13n/8 entries.
    """
    roots = list(root_of_unity_powers)
    n = len(roots)
    w4 = [w for w in roots[n // 8 : n // 4] for _ in range(4)]
    w2 = [w for w in roots[n // 4 : n // 2] for _ in range(2)]
    return roots[: n // 8] + w4 + w2 + roots[n // 2 :]


class _ForwardKernel:
    """Runs the staged forward transform on a list of coefficients in place."""

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
        return fwd_butterfly(
            x, y, w_op, w_precon, self.modulus, self.bit_shift, input_less_than_mod
        )

    def stage_t8(self, base, t, m, w_idx, input_less_than_mod):
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
                    values[xs], values[ys], w_op, w_precon, input_less_than_mod
                )

    def _blocks(self, base, count, w_idx):
        for i in range(count):
            block = slice(base + _BLOCK * i, base + _BLOCK * (i + 1))
            lanes = slice(w_idx + _LANES * i, w_idx + _LANES * (i + 1))
            yield block, self.roots[lanes], self.precon[lanes]

    def stage_t4(self, base, m, w_idx):
        values = self.values
        for block, w_op, w_precon in self._blocks(base, m // 2, w_idx):
            x, y = load_fwd_interleaved_t4(values[block])
            values[block] = sum(self._butterfly(x, y, w_op, w_precon), [])

    def stage_t2(self, base, m, w_idx):
        values = self.values
        for block, w_op, w_precon in self._blocks(base, m // 4, w_idx):
            x, y = load_fwd_interleaved_t2(values[block])
            values[block] = sum(self._butterfly(x, y, w_op, w_precon), [])

    def stage_t1(self, base, m, w_idx):
        values = self.values
        for block, w_op, w_precon in self._blocks(base, m // 8, w_idx):
            x, y = load_fwd_interleaved_t1(values[block])
            x, y = self._butterfly(x, y, w_op, w_precon)
            values[block] = write_fwd_interleaved_t1(x, y)

    def run(self, base, n, depth, half):
        if n <= _BASE_NTT_SIZE:
            self._breadth_first(base, n, depth, half)
            return
        w_idx = (1 << depth) + half
        self.stage_t8(base, n >> 1, 1, w_idx, False)
        self.run(base, n // 2, depth + 1, half * 2)
        self.run(base + n // 2, n // 2, depth + 1, half * 2 + 1)

    def _breadth_first(self, base, n, depth, half):
        t = n >> 1
        m = 1
        w_idx = (m << depth) + half * m
        # Only the very first stage can rely on inputs below 2q; recursive
        # pieces receive data already lifted to [0, 4q).
        input_less = self.input_mod_factor <= 2 and depth == 0
        self.stage_t8(base, t, m, w_idx, input_less)
        t >>= 1
        m <<= 1
        w_idx <<= 1
        while m < (n >> 3):
            self.stage_t8(base, t, m, w_idx, False)
            t >>= 1
            m <<= 1
            w_idx <<= 1

        full = n << depth

        def vector_index(idx):
            if idx <= full // 8:
                return idx
            if idx <= full // 4:
                return (idx - full // 8) * 4 + full // 8
            if idx <= full // 2:
                return (idx - full // 4) * 2 + 5 * full // 8
            return idx + 5 * full // 8

        self.stage_t4(base, m, vector_index(w_idx))
        m <<= 1
        w_idx <<= 1
        self.stage_t2(base, m, vector_index(w_idx))
        m <<= 1
        w_idx <<= 1
        self.stage_t1(base, m, vector_index(w_idx))

        if self.output_mod_factor == 1:
            q = self.modulus
            twice_mod = q << 1
            block = slice(base, base + n)
            reduced = []
            for v in self.values[block]:
                if v >= twice_mod:
                    v -= twice_mod
                if v >= q:
                    v -= q
                reduced.append(v)
            self.values[block] = reduced


def forward_transform_vectorized(
    operand,
    modulus,
    root_of_unity_powers,
    precon_root_of_unity_powers,
    input_mod_factor=1,
    output_mod_factor=1,
    bit_shift=64,
):
    """Return the forward NTT of ``operand`` in bit-reversed order.

    ``root_of_unity_powers`` must be in the layout returned by
    :func:`vector_root_of_unity_powers`, and ``precon_root_of_unity_powers``
    holds their Barrett factors for ``bit_shift``. The degree must be at least
    16. Inputs lie in [0, input_mod_factor * modulus); outputs lie in
    [0, output_mod_factor * modulus).
    """
    _check_bit_shift(bit_shift)
    values = list(operand)
    n = len(values)
    check_ntt_arguments(n, modulus)
    limit = maximum_value(bit_shift)
    if modulus >= limit // 4:
        raise ValueError(
            f"modulus {modulus} too large for bit shift {bit_shift} "
            f"=> maximum value {limit // 4}"
        )
    if n < _MIN_DEGREE:
        raise ValueError(f"transforms need n >= {_MIN_DEGREE}, got n = {n}")
    if input_mod_factor not in FORWARD_INPUT_MOD_FACTORS:
        raise ValueError(
            f"input_mod_factor must be 1, 2, or 4; got {input_mod_factor}"
        )
    if output_mod_factor not in FORWARD_OUTPUT_MOD_FACTORS:
        raise ValueError(f"output_mod_factor must be 1 or 4; got {output_mod_factor}")

    roots = list(root_of_unity_powers)
    precon = list(precon_root_of_unity_powers)
    needed = 13 * n // 8
    for name, table in (("root_of_unity_powers", roots),
                        ("precon_root_of_unity_powers", precon)):
        if len(table) < needed:
            raise ValueError(f"{name} needs at least {needed} entries, got {len(table)}")
    if any(not 0 <= p <= limit for p in precon):
        raise ValueError("precon_root_of_unity_powers too large")
    bound = input_mod_factor * modulus
    for value in values:
        if not 0 <= value < bound:
            raise ValueError(
                f"operand larger than input_mod_factor * modulus "
                f"({input_mod_factor} * {modulus})"
            )

    kernel = _ForwardKernel(
        values, modulus, roots, precon, bit_shift, input_mod_factor, output_mod_factor
    )
    kernel.run(0, n, 0, 0)
    return kernel.values