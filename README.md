# modntt

Negacyclic number-theoretic transforms (NTT) over primes below 2^64, together
with the modular arithmetic they rest on. Pure Python, no dependencies.

## Install

```
pip install .
```

## Quick start

```python
from modntt.ntt import NTT

ntt = NTT(8, 769)
values = [1, 2, 3, 4, 5, 6, 7, 8]

freq = ntt.compute_forward(values, 1, 1)   # bit-reversed output in [0, q)
back = ntt.compute_inverse(freq, 1, 1)
assert back == values
```

Both methods take a sequence of `degree` integers and return a new list; the
input is not changed.

`NTT(degree, modulus, root_of_unity=None, backend=Backend.SCALAR)` requires the
degree to be a power of two (at most 2^20) and `modulus % (2 * degree) == 1`.
When no root of unity is given, the smallest primitive `2 * degree`-th root is
used; a given root that is not primitive raises `ValueError`.

An `NTT` exposes its tables as read-only tuples: `root_of_unity_powers`
(bit-reversed order), `inv_root_of_unity_powers`,
`vector_root_of_unity_powers`, `precon64_root_of_unity_powers` and
`precon64_inv_root_of_unity_powers`, plus `root_of_unity_power(index)` and
`inv_root_of_unity_power(index)`.

### Lazy reduction

The transforms accept inputs that are only partly reduced and can return
outputs in a wider range:

* forward: `input_mod_factor` of 1, 2 or 4; `output_mod_factor` of 1 or 4
* inverse: `input_mod_factor` of 1 or 2; `output_mod_factor` of 1 or 2

Inputs must lie in `[0, input_mod_factor * q)` and outputs lie in
`[0, output_mod_factor * q)`. Any value outside that range, an operand of the
wrong length, or any other factor raises `ValueError`.

### Backends

`modntt.ntt.Backend` chooses the kernels:

* `Backend.SCALAR` – plain butterfly loops with 64-bit Barrett factors.
* `Backend.DQ` – kernels that work on eight coefficients per step, with a
  recursive, depth-first split for degrees above 1024. They use 32-bit Barrett
  factors when the modulus is small enough and 64-bit ones otherwise.
* `Backend.IFMA` – like `DQ`, but prefers 52-bit Barrett factors when the
  modulus allows.

Degrees below 16 always use the scalar kernels. Fully reduced outputs
(`output_mod_factor=1`) agree across backends. The eight-lane forward kernel
needs `q < (2^64 - 1) // 4`, and the inverse kernel needs `q < (2^64 - 1) // 2`.
Larger moduli raise `ValueError` there, so use `Backend.SCALAR` for them.

## Modules

* `modntt.number_theory` – `generate_primes`, `is_prime` (deterministic
  Miller–Rabin), `pow_mod`, `inverse_mod`, `multiply_mod`,
  `multiply_mod_precon`, `multiply_mod_lazy`, `add_uint_mod`, `sub_uint_mod`,
  `barrett_reduce_64`, `is_primitive_root`, `generate_primitive_root`,
  `minimal_primitive_root`, `reverse_bits`, `is_power_of_two`, `log2`, `msb`,
  `maximum_value` and `MultiplyFactor`, an operand with its Barrett factor for
  a 32-, 52- or 64-bit shift.
* `modntt.transforms` – the scalar kernels as free functions:
  `forward_transform_to_bit_reverse`,
  `reference_forward_transform_to_bit_reverse` (fully reduced at every step)
  and `inverse_transform_from_bit_reverse`, plus `check_ntt_arguments`.
* `modntt.fwd_vector` / `modntt.inv_vector` – the eight-lane kernels
  (`forward_transform_vectorized`, `inverse_transform_vectorized`), their
  butterflies (`fwd_butterfly`, `inv_butterfly`) and
  `vector_root_of_unity_powers`, which builds the root table layout the forward
  kernel expects.
* `modntt.lanes` – the shuffles that split sixteen coefficients into two
  eight-lane vectors and write them back.

```python
from modntt.number_theory import generate_primes, minimal_primitive_root

q = generate_primes(1, 60, 1024)[0]
root = minimal_primitive_root(2 * 1024, q)
```

## What it does not do

The package covers the transforms and the modular helpers only. It has no
element-wise vector operations (modular add, multiply, reduce), no polynomial
multiplication routine and no command-line tool.

## Tests

```
pip install .[test]
pytest
```