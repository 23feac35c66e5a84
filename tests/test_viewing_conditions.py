"""
Tests for CIECAM02 viewing-condition derivation.
"""

from __future__ import annotations

import numpy as np
import pytest

from contrastcam import D65_WHITE, XYZ, ComputationError, Surround, make_viewing_conditions
from contrastcam.appearance.viewing import degree_of_adaptation, luminance_adaptation

LA = 64.0


def test_white_background_conditions() -> None:
    conditions = make_viewing_conditions(LA, 100.0, D65_WHITE)

    assert conditions.n == pytest.approx(1.0)
    assert conditions.z == pytest.approx(2.48)
    assert conditions.N_bb == pytest.approx(0.725)
    assert conditions.N_cb == conditions.N_bb
    assert conditions.F_L == pytest.approx(0.684, abs=1e-3)
    assert conditions.A_w > 0.0
    assert 0.0 <= conditions.D <= 1.0


@pytest.mark.parametrize("L_A", [1.0, 64.0, 1000.0])
def test_luminance_adaptation_matches_conditions(L_A: float) -> None:
    conditions = make_viewing_conditions(L_A, 20.0, D65_WHITE)
    k, F_L = luminance_adaptation(L_A)

    assert k == pytest.approx(1.0 / (5.0 * L_A + 1.0))
    assert conditions.k == k
    assert conditions.F_L == F_L


def test_dim_adapting_field_factor() -> None:
    _, F_L = luminance_adaptation(1.0)
    assert F_L == pytest.approx(0.1712, abs=1e-3)


def test_dark_background_conditions() -> None:
    conditions = make_viewing_conditions(LA, 10.0, D65_WHITE)

    assert conditions.n == pytest.approx(0.1)
    assert conditions.z == pytest.approx(1.48 + np.sqrt(0.1))
    assert conditions.A_w > 0.0


def test_background_changes_white_response() -> None:
    white_bg = make_viewing_conditions(LA, 100.0, D65_WHITE)
    dark_bg = make_viewing_conditions(LA, 10.0, D65_WHITE)

    assert abs(white_bg.A_w - dark_bg.A_w) > 0.1


def test_degree_of_adaptation_matches_reference() -> None:
    luminances = np.array([0.01, 1.0, 42.0, 64.0, 200.0])
    for surround in Surround:
        F = surround.parameters[0]
        expected = F * (1.0 - (1.0 / 3.6) * np.exp((-luminances - 42.0) / 92.0))

        for luminance, expected_value in zip(luminances, expected):
            conditions = make_viewing_conditions(float(luminance), 20.0, D65_WHITE, surround)
            assert np.isclose(conditions.D, expected_value, rtol=1e-9)


def test_degree_of_adaptation_is_clamped() -> None:
    assert degree_of_adaptation(1e6, 1.0) <= 1.0
    assert degree_of_adaptation(1e-6, 0.8) >= 0.0


def test_surround_presets() -> None:
    assert Surround.AVERAGE.parameters == (1.0, 0.69, 1.0)
    assert Surround.DIM.parameters == (0.9, 0.59, 0.95)
    assert Surround.DARK.parameters == (0.8, 0.525, 0.8)


def test_surround_accepts_labels() -> None:
    conditions = make_viewing_conditions(LA, 20.0, D65_WHITE, "dim")
    assert conditions.surround is Surround.DIM
    assert (conditions.F, conditions.c, conditions.N_c) == Surround.DIM.parameters


def test_unknown_surround_raises() -> None:
    with pytest.raises(ComputationError):
        make_viewing_conditions(LA, 20.0, D65_WHITE, "bright")


def test_accepts_xyz_white_point() -> None:
    white = XYZ(95.047, 100.0, 108.883)
    from_value = make_viewing_conditions(LA, 20.0, white)
    from_array = make_viewing_conditions(LA, 20.0, D65_WHITE)

    assert from_value == from_array
    assert np.allclose(from_value.adapted_white_rgb, from_array.adapted_white_rgb)


@pytest.mark.parametrize(
    "L_A, Y_b, white",
    [
        (0.0, 20.0, D65_WHITE),
        (-10.0, 20.0, D65_WHITE),
        (LA, 0.0, D65_WHITE),
        (LA, -5.0, D65_WHITE),
        (LA, 20.0, np.array([95.047, 0.0, 108.883])),
        (float("nan"), 20.0, D65_WHITE),
    ],
)
def test_degenerate_inputs_raise(L_A, Y_b, white) -> None:
    with pytest.raises(ComputationError):
        make_viewing_conditions(L_A, Y_b, white)


def test_computation_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        make_viewing_conditions(LA, 0.0, D65_WHITE)


def test_conditions_are_immutable() -> None:
    conditions = make_viewing_conditions(LA, 20.0, D65_WHITE)

    with pytest.raises(AttributeError):
        conditions.D = 0.5  # type: ignore[misc]
    with pytest.raises(ValueError):
        conditions.adapted_white_rgb[0] = 0.0
