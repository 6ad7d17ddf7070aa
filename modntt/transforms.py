"""Scalar negacyclic number-theoretic transforms in bit-reversed order."""

from __future__ import annotations

from .number_theory import (
    inverse_mod,
    is_power_of_two,
    multiply_mod,
    multiply_mod_lazy,
)

MAX_DEGREE_BITS = 20
FORWARD_INPUT_MOD_FACTORS = (1, 2, 4)
FORWARD_OUTPUT_MOD_FACTORS = (1, 4)
INVERSE_INPUT_MOD_FACTORS = (1, 2)
INVERSE_OUTPUT_MOD_FACTORS = (1, 2)


def check_ntt_arguments(degree, modulus):
    """Return True if ``degree`` and ``modulus`` suit a negacyclic NTT; raise otherwise."""
    if not is_power_of_two(degree):
        raise ValueError(f"degree {degree} is not a power of 2")
    if degree > (1 << MAX_DEGREE_BITS):
        raise ValueError(
            f"degree should be at most 2^{MAX_DEGREE_BITS}, got {degree}"
        )
    if modulus % (2 * degree) != 1:
        raise ValueError("modulus mod 2n != 1")
    return True


def _check_factor(name, value, allowed):
    if value not in allowed:
        choices = ", ".join(str(a) for a in allowed)
        raise ValueError(f"{name} must be one of {choices}; got {value}")


def _check_bound(values, bound):
    for value in values:
        if not 0 <= value < bound:
            raise ValueError(f"value in operand {value} exceeds bound {bound}")


def _check_table(name, table, n):
    if len(table) < n:
        raise ValueError(f"{name} needs at least {n} entries, got {len(table)}")


def _stages_forward(n):
    """Yield (m, t) pairs for each forward stage."""
    t = n >> 1
    m = 1
    while m < n:
        yield m, t
        m <<= 1
        t >>= 1


def forward_transform_to_bit_reverse(
    operand,
    modulus,
    root_of_unity_powers,
    precon_root_of_unity_powers,
    input_mod_factor=1,
    output_mod_factor=1,
):
    """Return the forward NTT of ``operand`` in bit-reversed order.

    Inputs must lie in [0, input_mod_factor * modulus); outputs lie in
    [0, output_mod_factor * modulus).
    """
    values = list(operand)
    n = len(values)
    check_ntt_arguments(n, modulus)
    _check_factor("input_mod_factor", input_mod_factor, FORWARD_INPUT_MOD_FACTORS)
    _check_factor(
        "output_mod_factor", output_mod_factor, FORWARD_OUTPUT_MOD_FACTORS
    )
    _check_bound(values, modulus * input_mod_factor)
    _check_table("root_of_unity_powers", root_of_unity_powers, n)
    _check_table("precon_root_of_unity_powers", precon_root_of_unity_powers, n)

    twice_mod = modulus << 1
    for m, t in _stages_forward(n):
        for i in range(m):
            w_op = root_of_unity_powers[m + i]
            w_precon = precon_root_of_unity_powers[m + i]
            start = 2 * i * t
            for j in range(start, start + t):
                x, y = values[j], values[j + t]
                tx = x - twice_mod if x >= twice_mod else x
                product = multiply_mod_lazy(y, w_op, w_precon, modulus, 64)
                values[j] = tx + product
                values[j + t] = tx + twice_mod - product

    if output_mod_factor == 1:
        values = [_reduce_from_4q(v, modulus, twice_mod) for v in values]
    return values


def _reduce_from_4q(value, modulus, twice_mod):
    if value >= twice_mod:
        value -= twice_mod
    if value >= modulus:
        value -= modulus
    return value


def reference_forward_transform_to_bit_reverse(
    operand, modulus, root_of_unity_powers
):
    """Return the forward NTT of ``operand`` computed with full reductions."""
    values = list(operand)
    n = len(values)
    check_ntt_arguments(n, modulus)
    _check_table("root_of_unity_powers", root_of_unity_powers, n)

    for m, t in _stages_forward(n):
        for i in range(m):
            w_op = root_of_unity_powers[m + i]
            start = 2 * i * t
            for j in range(start, start + t):
                x = values[j]
                w_y = (values[j + t] * w_op) % modulus
                values[j] = (x + w_y) % modulus
                values[j + t] = (x - w_y) % modulus
    return values


def inverse_transform_from_bit_reverse(
    operand,
    modulus,
    inv_root_of_unity_powers,
    precon_inv_root_of_unity_powers,
    input_mod_factor=1,
    output_mod_factor=1,
):
    """Return the inverse NTT of bit-reversed ``operand``, scaled by 1/n.

    Inputs must lie in [0, input_mod_factor * modulus); outputs lie in
    [0, output_mod_factor * modulus).
    """
    values = list(operand)
    n = len(values)
    check_ntt_arguments(n, modulus)
    _check_factor("input_mod_factor", input_mod_factor, INVERSE_INPUT_MOD_FACTORS)
    _check_factor(
        "output_mod_factor", output_mod_factor, INVERSE_OUTPUT_MOD_FACTORS
    )
    _check_bound(values, modulus * input_mod_factor)
    _check_table("inv_root_of_unity_powers", inv_root_of_unity_powers, n)
    _check_table(
        "precon_inv_root_of_unity_powers", precon_inv_root_of_unity_powers, n
    )

    twice_mod = modulus << 1
    t = 1
    root_index = 1
    m = n >> 1
    while m > 1:
        for i in range(m):
            w_op = inv_root_of_unity_powers[root_index]
            w_precon = precon_inv_root_of_unity_powers[root_index]
            start = 2 * i * t
            for j in range(start, start + t):
                x, y = values[j], values[j + t]
                tx = x + y
                ty = x + twice_mod - y
                values[j] = tx - twice_mod if tx >= twice_mod else tx
                values[j + t] = multiply_mod_lazy(ty, w_op, w_precon, modulus, 64)
            root_index += 1
        t <<= 1
        m >>= 1

    half = n >> 1
    if half:
        w_op = inv_root_of_unity_powers[root_index]
        inv_n = inverse_mod(n, modulus)
        inv_n_w = multiply_mod(inv_n, w_op, modulus)
        for j in range(half):
            x, y = values[j], values[j + half]
            tx = x + y
            if tx >= twice_mod:
                tx -= twice_mod
            ty = x + twice_mod - y
            values[j] = multiply_mod_lazy(tx, inv_n, None, modulus, 64)
            values[j + half] = multiply_mod_lazy(ty, inv_n_w, None, modulus, 64)

    if output_mod_factor == 1:
        values = [v - modulus if v >= modulus else v for v in values]
    return values