"""Per-row pseudorandom number generation for Taichi kernels.

Each unit of parallel work (one image row) owns a 32-bit generator state.
The state is passed by value into every sampling function and the advanced
state is returned alongside the drawn value:

    >>> value, state = next_float(state)

Because a row's stream depends only on its row index and the global seed,
rendered pixels are independent of the number of worker threads and of the
order in which rows are scheduled.

The mixing function is the PCG RXS-M-XS output permutation applied to an
LCG step (Jarzynski and Olano, "Hash Functions for GPU Rendering", JCGT 2020).
"""

import taichi as ti

# LCG step and RXS-M-XS permutation constants. All fit in a signed 32-bit
# literal so Taichi never has to widen them.
_LCG_MULTIPLIER = 747796405
_LCG_INCREMENT = 1013904223
_PERMUTE_MULTIPLIER = 277803737

# Odd multiplier used to spread the global seed across the row index
_SEED_MIX = 668265261

# 2^-24: maps the top 24 bits of a draw onto [0, 1)
_INV_2_24 = 1.0 / 16777216.0


@ti.func
def pcg_hash(value: ti.u32) -> ti.u32:
    """Advance and permute a 32-bit value.

    Args:
        value: The current generator state.

    Returns:
        The next generator state.
    """
    state = value * ti.u32(_LCG_MULTIPLIER) + ti.u32(_LCG_INCREMENT)
    word = ((state >> ((state >> ti.u32(28)) + ti.u32(4))) ^ state) * ti.u32(_PERMUTE_MULTIPLIER)
    return (word >> ti.u32(22)) ^ word


@ti.func
def seed_row(row: ti.i32, seed: ti.i32) -> ti.u32:
    """Derive the initial generator state for an image row.

    Args:
        row: The row index (0 = top of the image).
        seed: Global seed shared by all rows of a render.

    Returns:
        The initial generator state for this row.
    """
    mixed = ti.cast(row, ti.u32) ^ (ti.cast(seed, ti.u32) * ti.u32(_SEED_MIX))
    return pcg_hash(pcg_hash(mixed))


@ti.func
def next_u32(state: ti.u32):
    """Draw a raw 32-bit value.

    Returns:
        A tuple of (value, next_state). The value is the new state itself.
    """
    new_state = pcg_hash(state)
    return new_state, new_state


@ti.func
def next_float(state: ti.u32):
    """Draw a float uniformly distributed in [0, 1).

    Uses the top 24 bits of the draw, which are exactly representable in f32,
    so the result never rounds up to 1.0.

    Args:
        state: The current generator state.

    Returns:
        A tuple of (value, next_state).
    """
    bits, new_state = next_u32(state)
    value = ti.cast(bits >> ti.u32(8), ti.f32) * _INV_2_24
    return value, new_state


@ti.func
def next_range(state: ti.u32, lo: ti.f32, hi: ti.f32):
    """Draw a float uniformly distributed in [lo, hi).

    Returns:
        A tuple of (value, next_state).
    """
    u, new_state = next_float(state)
    return lo + (hi - lo) * u, new_state
