"""Per-row random number streams for Monte Carlo sampling.

Each unit of parallel work (one image row) owns one stream: a 32-bit
xorshift state stored in its own slot of a Taichi field. A stream is only
ever advanced by the row that owns it, so rows never share mutable state
and no synchronization is needed.

Stream states are derived host-side from a NumPy ``SeedSequence``. With a
fixed seed every stream, and therefore every rendered pixel, is
reproducible; with ``seed=None`` fresh entropy is used for each render.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.core.sampler import draw_uniforms, seed_streams
    >>> seed_streams(4, seed=7)
    >>> draw_uniforms(stream=2, count=3)  # three values in [0, 1)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# One stream per image row; matches the render target's maximum height
MAX_STREAMS = 2048

# 2^-24: maps the top 24 bits of a state onto [0, 1) exactly in f32
_UNIT_SCALE = 1.0 / 16777216.0

_stream_state = ti.field(dtype=ti.u32, shape=MAX_STREAMS)
_num_streams = ti.field(dtype=ti.i32, shape=())

# Scratch buffer for draw_uniforms()
_MAX_DRAWS = 4096
_draws = ti.field(dtype=ti.f32, shape=_MAX_DRAWS)


def seed_streams(count: int, seed: int | None = None) -> None:
    """Derive and upload ``count`` independent stream states.

    Args:
        count: Number of streams to initialize (one per image row).
        seed: Root seed. None draws fresh OS entropy.

    Raises:
        ValueError: If count is not positive.
        RuntimeError: If count exceeds MAX_STREAMS.
    """
    if count <= 0:
        raise ValueError(f"Stream count must be positive, got {count}")
    if count > MAX_STREAMS:
        raise RuntimeError(f"Maximum number of streams ({MAX_STREAMS}) exceeded")

    states = np.random.SeedSequence(seed).generate_state(count, dtype=np.uint32)
    # xorshift has a fixed point at zero
    states[states == 0] = 1

    full = np.ones(MAX_STREAMS, dtype=np.uint32)
    full[:count] = states
    _stream_state.from_numpy(full)
    _num_streams[None] = count


def get_stream_count() -> int:
    """Get the number of streams seeded by the last seed_streams() call."""
    return int(_num_streams[None])


def get_stream_states() -> npt.NDArray[np.uint32]:
    """Get a copy of the current stream states (active slots only)."""
    return _stream_state.to_numpy()[: get_stream_count()].copy()


@ti.func
def next_uniform(stream: ti.i32) -> ti.f32:
    """Advance a stream and return a uniform sample in [0, 1)."""
    s = _stream_state[stream]
    s ^= s << 13
    s ^= ti.bit_shr(s, 17)
    s ^= s << 5
    _stream_state[stream] = s
    return ti.cast(ti.bit_shr(s, 8), ti.f32) * _UNIT_SCALE


@ti.func
def next_signed(stream: ti.i32) -> ti.f32:
    """Return a uniform sample in [-1, 1)."""
    return next_uniform(stream) * 2.0 - 1.0


@ti.func
def random_in_unit_sphere(stream: ti.i32) -> vec3:
    """Rejection-sample a point inside the closed unit ball.

    Draws cube points until one satisfies |p|^2 <= 1. Each trial succeeds
    with probability pi/6, so there is no retry cap.
    """
    p = vec3(0.0, 0.0, 0.0)
    while True:
        p = vec3(next_signed(stream), next_signed(stream), next_signed(stream))
        if tm.dot(p, p) <= 1.0:
            break
    return p


@ti.kernel
def _draw_uniforms(stream: ti.i32, count: ti.i32):
    # Wrapping loop keeps the draws serial
    for _ in range(1):
        for i in range(count):
            _draws[i] = next_uniform(stream)


def draw_uniforms(stream: int, count: int) -> npt.NDArray[np.float32]:
    """Draw ``count`` uniform samples from one stream (host-side helper).

    Advances the stream exactly as ``count`` kernel-side draws would.

    Raises:
        ValueError: If the stream index or count is out of range.
    """
    if not 0 <= stream < MAX_STREAMS:
        raise ValueError(f"Stream index {stream} out of range [0, {MAX_STREAMS})")
    if not 0 < count <= _MAX_DRAWS:
        raise ValueError(f"Draw count must be in (0, {_MAX_DRAWS}], got {count}")
    _draw_uniforms(stream, count)
    return _draws.to_numpy()[:count].copy()
