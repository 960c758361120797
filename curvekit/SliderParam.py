"""Slider records for an expression's free variables.

A slider is created for every free variable of a parsed expression. When the
expression text changes, :func:`create_sliders` rebuilds the list by *name*,
so a slider the user already tuned keeps its value, range and animation
state as long as its variable is still used.

Examples
--------
>>> sliders = create_sliders(("a", "b"), ())
>>> [s.value for s in sliders]
[1.0, 1.0]
>>> tuned = (sliders[1].with_value_text("pi/2"),)
>>> [s.name for s in create_sliders(("b", "c"), tuned)]
['b', 'c']
>>> round(create_sliders(("b", "c"), tuned)[0].value, 4)
1.5708
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Sequence

from .InputConvert import InputConvert
from .config import (
    SLIDER_DEFAULT_MAX,
    SLIDER_DEFAULT_MIN,
    SLIDER_DEFAULT_SPEED,
    SLIDER_DEFAULT_STEP,
    SLIDER_DEFAULT_VALUE,
)

__all__ = ["SliderParam", "create_sliders", "scope_from_sliders"]


@dataclass(frozen=True)
class SliderParam:
    """Value and presentation state of one free variable."""

    name: str
    value: float = SLIDER_DEFAULT_VALUE
    min: float = SLIDER_DEFAULT_MIN
    max: float = SLIDER_DEFAULT_MAX
    step: float = SLIDER_DEFAULT_STEP
    animating: bool = False
    animation_speed: float = SLIDER_DEFAULT_SPEED

    def advance(self, dt: float) -> "SliderParam":
        """Step an animating slider by ``animation_speed * dt``.

        Passing ``max`` wraps the value back to ``min``. A slider that is not
        animating is returned unchanged.
        """
        if not self.animating:
            return self
        nxt = self.value + self.animation_speed * dt
        if nxt > self.max:
            nxt = self.min
        return replace(self, value=nxt)

    def with_value(self, value: float) -> "SliderParam":
        return replace(self, value=float(value))

    def with_value_text(self, text: str) -> "SliderParam":
        """Set the value from typed text such as ``"2.5"`` or ``"pi/2"``.

        Text that does not evaluate to a real number keeps the current value.
        """
        try:
            value = InputConvert(text, float, truncate=False)
        except ValueError:
            return self
        return replace(self, value=value)

    def toggled(self) -> "SliderParam":
        """Start or stop animation."""
        return replace(self, animating=not self.animating)


def create_sliders(names: Iterable[str], existing: Sequence[SliderParam]) -> list[SliderParam]:
    """Reconcile sliders with the free variables ``names``.

    Output follows ``names``. Each name reuses the existing slider with that
    exact name, otherwise gets a fresh slider with default settings.
    """
    by_name: dict[str, SliderParam] = {}
    for slider in existing:
        by_name.setdefault(slider.name, slider)
    return [by_name.get(name) or SliderParam(name=name) for name in names]


def scope_from_sliders(sliders: Iterable[SliderParam]) -> dict[str, float]:
    """Build the name -> value scope the sampler evaluates against."""
    return {slider.name: slider.value for slider in sliders}
