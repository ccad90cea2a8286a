"""Stochastic path tracer for small sphere and half-plane scenes.

The package renders a still image by casting many jittered, lens-sampled
rays per pixel, bouncing them diffusely off surfaces and averaging the
radiance that escapes into a procedural sky. Rows of the image are
independent units of work, each with its own random stream.

Subpackages:
    core: Rays, per-row random streams, the path tracer and frame renderer
    geometry: Sphere and half-plane intersection, convex support functions
    camera: Thin-lens camera model and primary ray generation
    scene: World description and nearest-hit queries
    preview: PNG export utilities

The kernel-side modules declare Taichi fields at import time, so call
``ti.init()`` before importing them.
"""

__version__ = "0.1.0"
