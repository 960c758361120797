from __future__ import annotations

import pytest

from curvekit.SliderParam import SliderParam, create_sliders, scope_from_sliders


def test_defaults() -> None:
    slider = SliderParam("a")
    assert (slider.value, slider.min, slider.max, slider.step) == (1.0, -10.0, 10.0, 0.1)
    assert not slider.animating
    assert slider.animation_speed == 1.0


def test_reconciliation_keeps_matching_names() -> None:
    tuned = SliderParam("b", value=4.0, min=0.0, max=5.0, animating=True)
    sliders = create_sliders(("b", "c"), (SliderParam("a", value=7.0), tuned))
    assert [s.name for s in sliders] == ["b", "c"]
    assert sliders[0] is tuned
    assert sliders[1] == SliderParam("c")


def test_reconciliation_follows_name_order() -> None:
    existing = (SliderParam("a", value=2.0), SliderParam("b", value=3.0))
    assert [s.value for s in create_sliders(("b", "a"), existing)] == [3.0, 2.0]
    assert create_sliders((), existing) == []


def test_advance_steps_and_wraps() -> None:
    slider = SliderParam("a", value=9.5, animating=True, animation_speed=2.0)
    stepped = slider.advance(0.1)
    assert stepped.value == pytest.approx(9.7)
    assert stepped.advance(0.5).value == -10.0


def test_advance_ignores_paused_slider() -> None:
    slider = SliderParam("a", value=3.0)
    assert slider.advance(1.0) is slider


def test_toggled_flips_animation() -> None:
    slider = SliderParam("a")
    assert slider.toggled().animating
    assert not slider.toggled().toggled().animating


def test_value_text() -> None:
    slider = SliderParam("a", value=1.25)
    assert slider.with_value_text("pi/2").value == pytest.approx(1.5707963267948966)
    assert slider.with_value_text("not a number").value == 1.25
    assert slider.with_value_text("sqrt(-1)").value == 1.25
    assert slider.with_value(3).value == 3.0


def test_scope_from_sliders() -> None:
    assert scope_from_sliders([SliderParam("a", value=2.0), SliderParam("b")]) == {"a": 2.0, "b": 1.0}
