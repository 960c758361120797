from __future__ import annotations

import pytest

from curvekit.axis_ticks import format_axis_label, grid_spacing, nice_num, tick_values


@pytest.mark.parametrize(
    ("value_range", "round_result", "expected"),
    [
        (20.0, False, 20.0),
        (2.22, True, 2.0),
        (0.6, True, 0.5),
        (8.0, True, 10.0),
        (3.0, False, 5.0),
        (0.0, True, 1.0),
        (-5.0, False, 1.0),
    ],
)
def test_nice_num(value_range: float, round_result: bool, expected: float) -> None:
    assert nice_num(value_range, round_result) == pytest.approx(expected)


def test_grid_spacing_scales_with_range() -> None:
    assert grid_spacing(-10.0, 10.0) == 2.0
    assert grid_spacing(-1.0, 1.0) == pytest.approx(0.2)
    assert grid_spacing(0.0, 1000.0) == 100.0


def test_tick_values_are_clean_multiples() -> None:
    ticks = tick_values(-1.0, 1.0)
    assert ticks == [-1.0, -0.8, -0.6, -0.4, -0.2, 0.0, 0.2, 0.4, 0.6, 0.8, 1.0]
    assert tick_values(-10.0, 10.0)[:3] == [-10.0, -8.0, -6.0]
    assert tick_values(0.05, 0.95) == [0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9]


@pytest.mark.parametrize(
    ("value", "label"),
    [
        (0.0, "0"),
        (1e-11, "0"),
        (3.0, "3"),
        (-2.0, "-2"),
        (0.5, "0.5"),
        (0.1 + 0.2, "0.3"),
        (2.5e-7, "2.5e-07"),
        (1234567.0, "1.2e+06"),
    ],
)
def test_format_axis_label(value: float, label: str) -> None:
    assert format_axis_label(value) == label
