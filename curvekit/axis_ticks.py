"""Axis tick spacing and label formatting for renderers.

Tick spacing follows the "nice numbers" scheme: steps are 1, 2 or 5 times a
power of ten, chosen so an axis shows roughly ``max_ticks`` labels.

>>> grid_spacing(-10, 10)
2.0
>>> tick_values(-1, 1)[:3]
[-1.0, -0.8, -0.6]
>>> format_axis_label(2.5e-7)
'2.5e-07'
"""

from __future__ import annotations

import math

import numpy as np

__all__ = ["format_axis_label", "grid_spacing", "nice_num", "tick_values"]


def nice_num(value_range: float, round_result: bool) -> float:
    """Return a 1/2/5 x 10^n number close to ``value_range``.

    With ``round_result`` the closest such number is chosen; otherwise the
    smallest one not below ``value_range``. Non-positive ranges give 1.
    """
    if value_range <= 0:
        return 1.0
    exponent = math.floor(math.log10(value_range))
    fraction = value_range / 10.0**exponent

    if round_result:
        if fraction < 1.5:
            nice = 1.0
        elif fraction < 3:
            nice = 2.0
        elif fraction < 7:
            nice = 5.0
        else:
            nice = 10.0
    else:
        if fraction <= 1:
            nice = 1.0
        elif fraction <= 2:
            nice = 2.0
        elif fraction <= 5:
            nice = 5.0
        else:
            nice = 10.0

    return nice * 10.0**exponent


def grid_spacing(lo: float, hi: float, max_ticks: int = 10) -> float:
    """Distance between grid lines for the axis range ``[lo, hi]``."""
    value_range = nice_num(hi - lo, False)
    return nice_num(value_range / (max_ticks - 1), True)


def tick_values(lo: float, hi: float, max_ticks: int = 10) -> list[float]:
    """Multiples of :func:`grid_spacing` that fall inside ``[lo, hi]``."""
    step = grid_spacing(lo, hi, max_ticks)
    first = math.ceil(lo / step)
    last = math.floor(hi / step)
    # rounding to the step's precision removes drift such as 0.30000000000000004
    digits = max(0, -math.floor(math.log10(step)) + 1)
    return [round(float(v), digits) for v in np.arange(first, last + 1) * step]


def format_axis_label(value: float) -> str:
    """Short label: ``"0"`` near zero, exponent form for very large or small values."""
    magnitude = abs(value)
    if magnitude < 1e-10:
        return "0"
    if magnitude >= 1e6 or magnitude < 1e-3:
        return f"{value:.1e}"
    return f"{float(f'{value:.6g}'):g}"
