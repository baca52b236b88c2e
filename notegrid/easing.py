"""Easing functions for automation curves.

Easing functions map a normalised progress value *t* in [0, 1] to an eased
output in [0, 1]. Every automation segment is shaped by one of them, chosen
by the curve type of the segment's first point:

    value = v1 + (v2 - v1) * get_easing("smooth")(t)

Available shapes:

    "linear"      Constant rate.
    "exponential" Fast start that settles into the target (cubic ease-out).
    "smooth"      Hermite smoothstep S-curve, the default for new points.
    "step"        Holds the start value until the segment ends.

Bezier segments use :func:`cubic_bezier` with the points' handles and fall
back to ``"smooth"`` when a handle is missing.

All shapes satisfy f(0) = 0 and f(1) = 1 and are monotonically non-decreasing.
Input outside [0, 1] is not defined.
"""

from __future__ import annotations

import typing


# ─── Easing functions ─────────────────────────────────────────────────────────


def linear (t: float) -> float:
    """No transformation, constant rate of change."""
    return t


def exponential (t: float) -> float:
    """Cubic ease-out: rapid initial change that settles gently on the target.

    Matches the way filter and volume moves are usually drawn by hand, where
    most of the audible change happens early in the segment.
    """
    return 1.0 - (1.0 - t) * (1.0 - t) * (1.0 - t)


def smooth (t: float) -> float:
    """Hermite smoothstep S-curve: smooth start and end, faster in the middle."""
    return t * t * (3.0 - 2.0 * t)


def step (t: float) -> float:
    """Hold at 0 for the whole segment and jump to 1 only at its end."""
    return 1.0 if t >= 1.0 else 0.0


def cubic_bezier (p0: float, p1: float, p2: float, p3: float, t: float) -> float:
    """Evaluate a one-dimensional cubic Bezier with control values p0..p3 at *t*."""
    u = 1.0 - t
    return u * u * u * p0 + 3.0 * u * u * t * p1 + 3.0 * u * t * t * p2 + t * t * t * p3


# ─── Registry and lookup ──────────────────────────────────────────────────────

EasingFn = typing.Callable[[float], float]

EASING_FUNCTIONS: typing.Dict[str, EasingFn] = {
    "linear":      linear,
    "exponential": exponential,
    "smooth":      smooth,
    "step":        step,
}


def get_easing (shape: typing.Union[str, EasingFn]) -> EasingFn:
    """Return the easing function for *shape*.

    *shape* may be a name string (see :data:`EASING_FUNCTIONS`) or any
    callable that maps a float in [0, 1] to a float in [0, 1].

    Raises :class:`ValueError` for unknown string names.
    """
    if callable(shape):
        return shape
    if shape not in EASING_FUNCTIONS:
        available = ", ".join(f'"{k}"' for k in sorted(EASING_FUNCTIONS))
        raise ValueError(
            f"Unknown easing shape {shape!r}. Available shapes: {available}"
        )
    return EASING_FUNCTIONS[shape]


def interpolate (
    v1: float,
    v2: float,
    t: float,
    shape: typing.Union[str, EasingFn] = "linear",
) -> float:
    """Move from *v1* to *v2* by progress *t*, shaped by *shape*.

    Parameters:
        v1: Value at t = 0.
        v2: Value at t = 1.
        t: Progress through the segment, in [0, 1].
        shape: Easing name or callable, see :func:`get_easing`.

    Returns:
        The interpolated value.
    """
    return v1 + (v2 - v1) * get_easing(shape)(t)
