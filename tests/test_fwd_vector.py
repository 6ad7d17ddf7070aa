import random

import pytest

from modntt.fwd_vector import (
    forward_transform_vectorized,
    fwd_butterfly,
    vector_root_of_unity_powers,
)
from modntt.number_theory import (
    MultiplyFactor,
    generate_primes,
    log2,
    minimal_primitive_root,
    reverse_bits,
)
from modntt.transforms import (
    forward_transform_to_bit_reverse,
    reference_forward_transform_to_bit_reverse,
)

MODULUS_BITS = {32: 25, 52: 45, 64: 60}


def _roots(n, modulus):
    w = minimal_primitive_root(2 * n, modulus)
    bits = log2(n)
    by_index = {reverse_bits(i, bits): pow(w, i, modulus) for i in range(n)}
    return [by_index[k] for k in range(n)]


def _vector_tables(n, modulus, bit_shift):
    roots = _roots(n, modulus)
    vroots = vector_root_of_unity_powers(roots)
    precon = [MultiplyFactor(r, bit_shift, modulus).barrett_factor for r in vroots]
    return roots, vroots, precon


def _random_input(n, bound, seed):
    rng = random.Random(seed)
    return [rng.randrange(bound) for _ in range(n)]


def test_vector_root_table_layout():
    table = vector_root_of_unity_powers(list(range(16)))
    assert table == [0, 1, 2, 2, 2, 2, 3, 3, 3, 3, 4, 4, 5, 5, 6, 6, 7, 7,
                     8, 9, 10, 11, 12, 13, 14, 15]


def test_vector_root_table_length_and_tail():
    roots = list(range(100, 164))
    table = vector_root_of_unity_powers(roots)
    assert len(table) == 13 * 64 // 8
    assert table[:8] == roots[:8]
    assert table[-32:] == roots[32:]


def test_source_example_degree_32():
    modulus = 769
    operand = [401, 203, 221, 352, 487, 151, 405, 356,
               343, 424, 635, 757, 457, 280, 624, 353,
               496, 353, 624, 280, 457, 757, 635, 424,
               343, 356, 405, 151, 487, 352, 221, 203]
    _, vroots, precon = _vector_tables(32, modulus, 32)
    result = forward_transform_vectorized(operand, modulus, vroots, precon, 1, 1, 32)
    assert result == list(range(1, 33))


@pytest.mark.parametrize("bit_shift", [32, 52, 64])
@pytest.mark.parametrize("n", [16, 32, 64, 256])
def test_matches_scalar_transform(bit_shift, n):
    modulus = generate_primes(1, MODULUS_BITS[bit_shift], n)[0]
    roots, vroots, precon = _vector_tables(n, modulus, bit_shift)
    operand = _random_input(n, modulus, n + bit_shift)
    expected = reference_forward_transform_to_bit_reverse(operand, modulus, roots)
    result = forward_transform_vectorized(
        operand, modulus, vroots, precon, 1, 1, bit_shift
    )
    assert result == expected


@pytest.mark.parametrize("bit_shift", [32, 64])
def test_depth_first_matches_scalar(bit_shift):
    n = 2048
    modulus = generate_primes(1, MODULUS_BITS[bit_shift], n)[0]
    roots, vroots, precon = _vector_tables(n, modulus, bit_shift)
    scalar_precon = [MultiplyFactor(r, 64, modulus).barrett_factor for r in roots]
    operand = _random_input(n, 2 * modulus, 7)
    expected = forward_transform_to_bit_reverse(
        operand, modulus, roots, scalar_precon, 2, 1
    )
    result = forward_transform_vectorized(
        operand, modulus, vroots, precon, 2, 1, bit_shift
    )
    assert result == expected


@pytest.mark.parametrize("input_mod_factor", [1, 2, 4])
def test_lazy_output_is_congruent_and_bounded(input_mod_factor):
    n = 64
    modulus = generate_primes(1, 60, n)[0]
    roots, vroots, precon = _vector_tables(n, modulus, 64)
    operand = _random_input(n, input_mod_factor * modulus, input_mod_factor)
    reduced = [v % modulus for v in operand]
    expected = reference_forward_transform_to_bit_reverse(reduced, modulus, roots)
    result = forward_transform_vectorized(
        operand, modulus, vroots, precon, input_mod_factor, 4, 64
    )
    assert all(0 <= v < 4 * modulus for v in result)
    assert [v % modulus for v in result] == expected


def test_zero_input_gives_zero():
    n = 16
    modulus = generate_primes(1, 45, n)[0]
    _, vroots, precon = _vector_tables(n, modulus, 52)
    result = forward_transform_vectorized([0] * n, modulus, vroots, precon, 1, 1, 52)
    assert result == [0] * n


def test_input_is_not_modified():
    n = 16
    modulus = 769
    _, vroots, precon = _vector_tables(n, modulus, 64)
    operand = list(range(n))
    forward_transform_vectorized(operand, modulus, vroots, precon, 1, 1, 64)
    assert operand == list(range(n))


@pytest.mark.parametrize("bit_shift", [32, 52, 64])
@pytest.mark.parametrize("less_than_mod", [True, False])
def test_butterfly_congruence(bit_shift, less_than_mod):
    modulus = generate_primes(1, MODULUS_BITS[bit_shift], 16)[0]
    rng = random.Random(bit_shift)
    x_bound = 2 * modulus if less_than_mod else 4 * modulus
    x = [rng.randrange(x_bound) for _ in range(8)]
    y = [rng.randrange(4 * modulus) for _ in range(8)]
    w = [rng.randrange(modulus) for _ in range(8)]
    p = [MultiplyFactor(v, bit_shift, modulus).barrett_factor for v in w]
    new_x, new_y = fwd_butterfly(x, y, w, p, modulus, bit_shift, less_than_mod)
    for xi, yi, wi, nx, ny in zip(x, y, w, new_x, new_y):
        assert 0 <= nx < 4 * modulus
        assert 0 <= ny < 4 * modulus
        assert nx % modulus == (xi + wi * yi) % modulus
        assert ny % modulus == (xi - wi * yi) % modulus


def test_butterfly_rejects_mismatched_lanes():
    with pytest.raises(ValueError):
        fwd_butterfly([1, 2], [1], [1, 1], [0, 0], 769, 64, False)


def test_butterfly_rejects_bad_bit_shift():
    with pytest.raises(ValueError):
        fwd_butterfly([1], [1], [1], [0], 769, 48, False)


def _small_setup():
    n = 16
    modulus = 769
    _, vroots, precon = _vector_tables(n, modulus, 64)
    return n, modulus, vroots, precon


def test_rejects_small_degree():
    modulus = 769
    roots = _roots(8, modulus)
    vroots = vector_root_of_unity_powers(roots)
    precon = [MultiplyFactor(r, 64, modulus).barrett_factor for r in vroots]
    with pytest.raises(ValueError):
        forward_transform_vectorized([1] * 8, modulus, vroots, precon, 1, 1, 64)


@pytest.mark.parametrize("factors", [(3, 1), (1, 2), (123, 1), (2, 123)])
def test_rejects_bad_mod_factors(factors):
    n, modulus, vroots, precon = _small_setup()
    with pytest.raises(ValueError):
        forward_transform_vectorized([1] * n, modulus, vroots, precon, *factors, 64)


def test_rejects_operand_out_of_bounds():
    n, modulus, vroots, precon = _small_setup()
    with pytest.raises(ValueError):
        forward_transform_vectorized(
            [2 * modulus] * n, modulus, vroots, precon, 2, 1, 64
        )


def test_rejects_modulus_too_large_for_shift():
    n = 16
    modulus = generate_primes(1, 40, n)[0]
    _, vroots, precon = _vector_tables(n, modulus, 64)
    with pytest.raises(ValueError):
        forward_transform_vectorized([0] * n, modulus, vroots, precon, 1, 1, 32)


def test_rejects_short_root_table():
    n, modulus, vroots, precon = _small_setup()
    with pytest.raises(ValueError):
        forward_transform_vectorized(
            [0] * n, modulus, vroots[:n], precon[:n], 1, 1, 64
        )


def test_rejects_bad_modulus():
    n, _, vroots, precon = _small_setup()
    with pytest.raises(ValueError):
        forward_transform_vectorized([0] * n, 770, vroots, precon, 1, 1, 64)