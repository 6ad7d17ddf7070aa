"""Lane shuffles that arrange sixteen coefficients into two 8-lane vectors.

Each load takes sixteen consecutive coefficients and returns the pair of
8-lane vectors fed to a butterfly stage; each write takes the two result
vectors and returns the sixteen coefficients to store.
"""

from __future__ import annotations

_LANES = 8
_BLOCK = 2 * _LANES

_FWD_T1 = ((0, 8, 2, 10, 4, 12, 6, 14), (1, 9, 3, 11, 5, 13, 7, 15))
_INV_T1 = ((0, 2, 4, 6, 8, 10, 12, 14), (1, 3, 5, 7, 9, 11, 13, 15))
_FWD_T2 = ((0, 1, 8, 9, 4, 5, 12, 13), (2, 3, 10, 11, 6, 7, 14, 15))
_FWD_T4 = ((0, 1, 2, 3, 8, 9, 10, 11), (4, 5, 6, 7, 12, 13, 14, 15))


def _take(values, count):
    taken = list(values)[:count]
    if len(taken) < count:
        raise ValueError(f"expected at least {count} values, got {len(taken)}")
    return taken


def _split(values, layout):
    block = _take(values, _BLOCK)
    first, second = layout
    return [block[i] for i in first], [block[i] for i in second]


def load_fwd_interleaved_t1(values):
    """Split sixteen values for the forward stage with butterfly distance 1."""
    return _split(values, _FWD_T1)


def load_inv_interleaved_t1(values):
    """Split sixteen values into even- and odd-indexed lanes."""
    return _split(values, _INV_T1)


def load_fwd_interleaved_t2(values):
    """Split sixteen values for the forward stage with butterfly distance 2."""
    return _split(values, _FWD_T2)


def load_inv_interleaved_t2(values):
    """Split sixteen values for the inverse stage with butterfly distance 2."""
    return _split(values, _FWD_T1)


def load_fwd_interleaved_t4(values):
    """Split sixteen values for the forward stage with butterfly distance 4."""
    return _split(values, _FWD_T4)


def load_inv_interleaved_t4(values):
    """Split sixteen values for the inverse stage with butterfly distance 4."""
    return _split(values, _FWD_T2)


def write_fwd_interleaved_t1(x, y):
    """Interleave two 8-lane vectors lane by lane into sixteen values."""
    xs, ys = _take(x, _LANES), _take(y, _LANES)
    return [value for pair in zip(xs, ys) for value in pair]


def write_inv_interleaved_t4(x, y):
    """Store the halves of two 8-lane vectors in the order x-low, y-low, x-high, y-high."""
    xs, ys = _take(x, _LANES), _take(y, _LANES)
    half = _LANES // 2
    return xs[:half] + ys[:half] + xs[half:] + ys[half:]


def load_w_op_t2(values):
    """Repeat each of four roots twice across eight lanes."""
    return [w for w in _take(values, 4) for _ in range(2)]


def load_w_op_t4(values):
    """Repeat each of two roots four times across eight lanes."""
    return [w for w in _take(values, 2) for _ in range(4)]