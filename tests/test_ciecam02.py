"""
Tests for the CIECAM02 forward and inverse transforms.
"""

from __future__ import annotations

import numpy as np
import pytest

from contrastcam import (
    D65_WHITE,
    XYZ,
    AppearanceCorrelates,
    CIECAM02Error,
    Surround,
    forward,
    inverse,
    make_viewing_conditions,
)
from contrastcam.appearance import eccentricity_factor, hue_quadrature
from contrastcam.utils.color import ColorTransform

LA = 64.0
TEST_COLOR = XYZ(19.31, 23.93, 10.14)


def _roundtrip(xyz, Y_b: float):
    conditions = make_viewing_conditions(LA, Y_b, D65_WHITE)
    appearance = forward(xyz, D65_WHITE, conditions)
    return inverse(appearance, D65_WHITE, conditions)


def test_reference_vector() -> None:
    # Worked example for the CIE 159:2004 model, average surround
    conditions = make_viewing_conditions(318.31, 20.0, [95.05, 100.0, 108.88])
    appearance = forward(XYZ(19.01, 20.00, 21.78), [95.05, 100.0, 108.88], conditions)

    assert appearance.J == pytest.approx(41.7311, abs=1e-3)
    assert appearance.C == pytest.approx(0.1047, abs=5e-4)
    assert appearance.h == pytest.approx(219.0484, abs=1e-2)
    assert appearance.Q == pytest.approx(195.3713, abs=1e-2)
    assert appearance.M == pytest.approx(0.1088, abs=5e-4)
    assert appearance.s == pytest.approx(2.3603, abs=5e-3)
    assert appearance.H == pytest.approx(278.0607, abs=1e-2)


def test_typical_color_correlates() -> None:
    conditions = make_viewing_conditions(LA, 20.0, D65_WHITE)
    appearance = forward(TEST_COLOR, D65_WHITE, conditions)

    assert isinstance(appearance, AppearanceCorrelates)
    assert 0.0 < appearance.J < 100.0
    assert appearance.C > 0.0
    assert 0.0 <= appearance.h < 360.0
    assert appearance.M == pytest.approx(appearance.C * conditions.F_L**0.25)
    assert appearance.s == pytest.approx(100.0 * np.sqrt(appearance.M / appearance.Q))
    assert 0.0 <= appearance.H < 400.0


@pytest.mark.parametrize("L_A", [64.0, 200.0, 1000.0])
@pytest.mark.parametrize("Y_b", [10.0, 20.0, 50.0, 100.0])
def test_white_point_is_lightest_neutral(L_A: float, Y_b: float) -> None:
    conditions = make_viewing_conditions(L_A, Y_b, D65_WHITE)
    appearance = forward(D65_WHITE, D65_WHITE, conditions)

    assert appearance.J == pytest.approx(100.0, abs=1.0)
    assert appearance.C < 3.0


# Incomplete adaptation (D < 1) leaves the white with residual chroma
WHITE_CHROMA_BOUND = {Surround.AVERAGE: 4.0, Surround.DIM: 5.0, Surround.DARK: 6.0}


@pytest.mark.parametrize("surround", list(Surround))
@pytest.mark.parametrize("L_A", [1.0, 64.0, 1000.0])
@pytest.mark.parametrize("Y_b", [10.0, 20.0, 100.0])
def test_white_point_under_every_surround(surround: Surround, L_A: float, Y_b: float) -> None:
    conditions = make_viewing_conditions(L_A, Y_b, D65_WHITE, surround)
    appearance = forward(D65_WHITE, D65_WHITE, conditions)

    assert appearance.J == pytest.approx(100.0, abs=1.0)
    assert 0.0 <= appearance.C < WHITE_CHROMA_BOUND[surround]


def test_white_chroma_grows_as_adaptation_drops() -> None:
    chroma = [
        forward(D65_WHITE, D65_WHITE, make_viewing_conditions(64.0, 20.0, D65_WHITE, surround)).C
        for surround in (Surround.AVERAGE, Surround.DIM, Surround.DARK)
    ]

    assert chroma[0] < 3.0 < chroma[1] < chroma[2]


@pytest.mark.parametrize("Y_b", [10.0, 20.0, 100.0])
def test_black_has_zero_lightness(Y_b: float) -> None:
    conditions = make_viewing_conditions(LA, Y_b, D65_WHITE)
    appearance = forward(XYZ(0.0, 0.0, 0.0), D65_WHITE, conditions)

    assert appearance.J == pytest.approx(0.0, abs=1.0)
    assert appearance.s == 0.0
    assert 0.0 <= appearance.h < 360.0


def test_background_changes_lightness() -> None:
    white_bg = make_viewing_conditions(LA, 100.0, D65_WHITE)
    dark_bg = make_viewing_conditions(LA, 10.0, D65_WHITE)

    J_white = forward(TEST_COLOR, D65_WHITE, white_bg).J
    J_dark = forward(TEST_COLOR, D65_WHITE, dark_bg).J

    assert abs(J_white - J_dark) > 0.1


@pytest.mark.parametrize("Y_b", [10.0, 20.0, 50.0, 100.0])
@pytest.mark.parametrize(
    "xyz",
    [
        TEST_COLOR,
        XYZ(47.5235, 50.0, 54.4415),
        XYZ(17.7, 17.3, 63.8),
        XYZ(50.0, 50.0, 50.0),
        XYZ(30.0, 20.0, 10.0),
        XYZ(10.0, 60.0, 30.0),
        XYZ(5.0, 5.0, 40.0),
        XYZ(80.0, 90.0, 70.0),
        XYZ(95.047, 100.0, 108.883),
        XYZ(0.0, 0.0, 0.0),
    ],
)
def test_forward_inverse_roundtrip(xyz: XYZ, Y_b: float) -> None:
    recovered = _roundtrip(xyz, Y_b)

    assert isinstance(recovered, XYZ)
    assert recovered.X == pytest.approx(xyz.X, abs=0.1)
    assert recovered.Y == pytest.approx(xyz.Y, abs=0.1)
    assert recovered.Z == pytest.approx(xyz.Z, abs=0.1)


def test_batch_roundtrip_over_srgb_gamut() -> None:
    rng = np.random.default_rng(7)
    xyz = ColorTransform().srgb_to_xyz(rng.random((256, 3)))

    recovered = _roundtrip(xyz, 20.0)

    assert recovered.shape == xyz.shape
    assert np.allclose(recovered, xyz, atol=1e-4)


def test_batch_matches_single_evaluation() -> None:
    conditions = make_viewing_conditions(LA, 20.0, D65_WHITE)
    colors = np.array([[19.31, 23.93, 10.14], [17.7, 17.3, 63.8], [80.0, 90.0, 70.0]])

    batch = forward(colors, D65_WHITE, conditions)

    for index, row in enumerate(colors):
        single = forward(XYZ.from_array(row), D65_WHITE, conditions)
        assert batch.J[index] == pytest.approx(single.J)
        assert batch.C[index] == pytest.approx(single.C)
        assert batch.h[index] == pytest.approx(single.h)


def test_cross_condition_inverse_changes_color() -> None:
    source = make_viewing_conditions(LA, 100.0, D65_WHITE)
    target = make_viewing_conditions(LA, 10.0, D65_WHITE)

    appearance = forward(TEST_COLOR, D65_WHITE, source)
    adapted = inverse(appearance, D65_WHITE, target)

    delta = np.abs(adapted.to_array() - TEST_COLOR.to_array()).sum()
    assert delta > 0.1


def test_inverse_accepts_mapping() -> None:
    conditions = make_viewing_conditions(LA, 20.0, D65_WHITE)
    appearance = forward(TEST_COLOR, D65_WHITE, conditions)

    recovered = inverse({"J": appearance.J, "C": appearance.C, "h": appearance.h}, D65_WHITE, conditions)

    assert recovered.Y == pytest.approx(TEST_COLOR.Y, abs=1e-6)


def test_inverse_requires_jch() -> None:
    conditions = make_viewing_conditions(LA, 20.0, D65_WHITE)
    with pytest.raises(CIECAM02Error):
        inverse({"J": 50.0, "C": 10.0}, D65_WHITE, conditions)


def test_forward_rejects_negative_tristimulus() -> None:
    conditions = make_viewing_conditions(LA, 20.0, D65_WHITE)
    with pytest.raises(CIECAM02Error):
        forward(XYZ(-50.0, -50.0, -50.0), D65_WHITE, conditions)


def test_forward_rejects_nan() -> None:
    conditions = make_viewing_conditions(LA, 20.0, D65_WHITE)
    with pytest.raises(CIECAM02Error):
        forward(XYZ(float("nan"), 20.0, 20.0), D65_WHITE, conditions)


def test_forward_reports_failing_batch_index() -> None:
    conditions = make_viewing_conditions(LA, 20.0, D65_WHITE)
    colors = np.array([[19.31, 23.93, 10.14], [-50.0, -50.0, -50.0], [50.0, 50.0, 50.0]])

    with pytest.raises(CIECAM02Error, match="index 1"):
        forward(colors, D65_WHITE, conditions)


def test_inverse_rejects_negative_lightness() -> None:
    conditions = make_viewing_conditions(LA, 20.0, D65_WHITE)
    with pytest.raises(CIECAM02Error):
        inverse({"J": -10.0, "C": 5.0, "h": 120.0}, D65_WHITE, conditions)


def test_inverse_rejects_chroma_without_real_solution() -> None:
    # Large chroma toward blue drives the gamma denominator negative
    conditions = make_viewing_conditions(LA, 20.0, D65_WHITE)
    with pytest.raises(CIECAM02Error, match="non-finite"):
        inverse({"J": 50.0, "C": 1000.0, "h": 270.0}, D65_WHITE, conditions)


def test_forward_rejects_bad_shape() -> None:
    conditions = make_viewing_conditions(LA, 20.0, D65_WHITE)
    with pytest.raises(ValueError):
        forward(np.zeros((4, 2)), D65_WHITE, conditions)


def test_eccentricity_factor_range() -> None:
    hues = np.linspace(0.0, 359.9, 721)
    e_t = eccentricity_factor(hues)

    assert np.all(e_t >= 0.7 - 1e-12)
    assert np.all(e_t <= 1.2 + 1e-12)


def test_hue_quadrature_unique_hues() -> None:
    assert np.allclose(hue_quadrature(np.array([20.14, 90.0, 164.25, 237.53])), [0.0, 100.0, 200.0, 300.0])


def test_hue_quadrature_wraps_below_unique_red() -> None:
    H = hue_quadrature(np.array([0.0, 10.0, 20.0]))

    assert np.all(H > 300.0)
    assert np.all(H < 400.0)
    assert np.all(np.diff(H) > 0.0)


def test_hue_quadrature_is_monotonic() -> None:
    hues = np.linspace(20.14, 380.0, 500) % 360.0
    H = hue_quadrature(hues)

    assert np.all(np.diff(H) > 0.0)
