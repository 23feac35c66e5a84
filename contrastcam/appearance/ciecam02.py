"""
CIECAM02: CIE 2002 color appearance model.

Forward transform from XYZ tristimulus values to appearance correlates and
its exact algebraic inverse under explicit viewing conditions.

Reference: CIE 159:2004, "A colour appearance model for colour management
systems: CIECAM02".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Union

import numpy as np

from contrastcam.appearance.constants import (
    ECCENTRICITY_TABLE,
    M_CAT02,
    M_CAT02_INV,
    M_CAT02_TO_HPE,
    M_HPE_TO_CAT02,
)
from contrastcam.appearance.response import (
    achromatic_signal,
    inverse_post_adaptation,
    mat_vec,
    post_adaptation,
    von_kries_gains,
)
from contrastcam.appearance.viewing import ViewingConditions
from contrastcam.core.errors import CIECAM02Error
from contrastcam.utils.color import XYZ, XYZLike, as_xyz_array, normalize_hue

# Achromatic responses below this magnitude are rounding noise around zero
ACHROMATIC_EPSILON = 1e-12

Scalar = Union[float, np.ndarray]


@dataclass(frozen=True)
class AppearanceCorrelates:
    """
    CIECAM02 appearance correlates.

    Only J, C and h are needed to invert the model; the remaining correlates
    are informational. Fields are floats for a single color and arrays for a
    batch.
    """

    J: Scalar  # lightness
    C: Scalar  # chroma
    h: Scalar  # hue angle (degrees)
    M: Scalar  # colorfulness
    s: Scalar  # saturation
    Q: Scalar  # brightness
    H: Scalar  # hue quadrature (0-400)

    def jch(self) -> Dict[str, Scalar]:
        return {"J": self.J, "C": self.C, "h": self.h}


# ----------------------------------------------------------------------
# Hue helpers
# ----------------------------------------------------------------------


def eccentricity_factor(h: Scalar) -> np.ndarray:
    """Eccentricity factor e_t for hue angles in degrees."""

    return 0.25 * (np.cos(np.radians(h) + 2.0) + 3.8)


def hue_quadrature(h: Scalar) -> np.ndarray:
    """
    Hue quadrature H (0-400) interpolated from the unique hue table.

    Hues below unique red (20.14 degrees) are shifted by 360 degrees so that
    they fall into the blue-to-red segment.
    """

    h = np.asarray(h, dtype=float)
    hue_angles = ECCENTRICITY_TABLE[:, 0]
    h_p = np.where(h < hue_angles[0], h + 360.0, h)

    i = np.clip(np.searchsorted(hue_angles, h_p, side="right") - 1, 0, len(hue_angles) - 2)
    h_i, e_i, H_i = ECCENTRICITY_TABLE[i, 0], ECCENTRICITY_TABLE[i, 1], ECCENTRICITY_TABLE[i, 2]
    h_next, e_next = ECCENTRICITY_TABLE[i + 1, 0], ECCENTRICITY_TABLE[i + 1, 1]

    lower = (h_p - h_i) / e_i
    upper = (h_next - h_p) / e_next
    return H_i + 100.0 * lower / (lower + upper)


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------


def forward(
    xyz: XYZLike,
    white_xyz: XYZLike,
    conditions: ViewingConditions,
) -> AppearanceCorrelates:
    """
    Forward CIECAM02: XYZ to appearance correlates.

    Parameters
    ----------
    xyz : XYZ or array-like
        Tristimulus values (0-100), a single color or shape (..., 3)
    white_xyz : XYZ or array-like
        Reference white
    conditions : ViewingConditions
        Viewing conditions built for the same white

    Raises
    ------
    CIECAM02Error
        If any correlate is non-finite.
    """

    xyz_arr = as_xyz_array(xyz)
    white = as_xyz_array(white_xyz).reshape(3)
    vc = conditions

    with np.errstate(invalid="ignore", divide="ignore", over="ignore"):
        # Chromatic adaptation (CAT02)
        rgb = mat_vec(M_CAT02, xyz_arr)
        white_rgb = mat_vec(M_CAT02, white)
        rgb_c = von_kries_gains(white_rgb, white[1], vc.D) * rgb

        # Hunt-Pointer-Estevez cone responses and compression
        rgb_a = post_adaptation(mat_vec(M_CAT02_TO_HPE, rgb_c), vc.F_L)
        R_a, G_a, B_a = rgb_a[..., 0], rgb_a[..., 1], rgb_a[..., 2]

        # Opponent dimensions and hue
        a = R_a - 12.0 * G_a / 11.0 + B_a / 11.0
        b = (R_a + G_a - 2.0 * B_a) / 9.0
        h = normalize_hue(np.degrees(np.arctan2(b, a)))
        e_t = eccentricity_factor(h)

        A = achromatic_signal(rgb_a) * vc.N_bb
        A = np.where(np.abs(A) < ACHROMATIC_EPSILON, 0.0, A)

        J = 100.0 * (A / vc.A_w) ** vc.achromatic_exponent
        Q = (4.0 / vc.c) * np.sqrt(J / 100.0) * (vc.A_w + 4.0) * vc.F_L**0.25

        t = (
            (50000.0 / 13.0) * vc.N_c * vc.N_cb * e_t * np.hypot(a, b)
            / (R_a + G_a + 21.0 * B_a / 20.0)
        )
        C = t**0.9 * np.sqrt(J / 100.0) * vc.chroma_scale
        M = C * vc.F_L**0.25
        s = np.where(Q > 0.0, 100.0 * np.sqrt(M / Q), 0.0)

    correlates = {"J": J, "C": C, "h": h, "M": M, "s": s, "Q": Q}
    _check_finite("Forward CIECAM02 transform", correlates)
    correlates["H"] = hue_quadrature(h)

    if xyz_arr.ndim == 1:
        return AppearanceCorrelates(**{key: float(value) for key, value in correlates.items()})
    return AppearanceCorrelates(**correlates)


def inverse(
    correlates: Union[AppearanceCorrelates, Mapping[str, Scalar]],
    white_xyz: XYZLike,
    conditions: ViewingConditions,
) -> Union[XYZ, np.ndarray]:
    """
    Inverse CIECAM02: lightness, chroma and hue to XYZ.

    Accepts :class:`AppearanceCorrelates` or any mapping with ``J``, ``C``
    and ``h``. Returns :class:`XYZ` for scalar correlates and an array of
    shape (..., 3) otherwise.

    Raises
    ------
    CIECAM02Error
        If the correlates cannot be inverted to finite tristimulus values.
    """

    if isinstance(correlates, AppearanceCorrelates):
        correlates = correlates.jch()
    try:
        J, C, h = np.broadcast_arrays(
            *(np.asarray(correlates[key], dtype=float) for key in ("J", "C", "h"))
        )
    except KeyError as exc:
        raise CIECAM02Error("Inverse CIECAM02 needs J, C and h correlates", exc) from exc

    white = as_xyz_array(white_xyz).reshape(3)
    vc = conditions

    with np.errstate(invalid="ignore", divide="ignore", over="ignore"):
        A = vc.A_w * (J / 100.0) ** (1.0 / vc.achromatic_exponent)
        t = np.where(
            J > 0.0,
            (C / (np.sqrt(J / 100.0) * vc.chroma_scale)) ** (1.0 / 0.9),
            0.0,
        )
        e_t = eccentricity_factor(h)

        h_rad = np.radians(h)
        cos_h = np.cos(h_rad)
        sin_h = np.sin(h_rad)

        p1 = (50000.0 / 13.0) * vc.N_c * vc.N_cb * e_t
        p2 = A / vc.N_bb + 0.305

        gamma = 23.0 * p2 * t / (23.0 * p1 + 11.0 * t * cos_h + 108.0 * t * sin_h)
        gamma = np.where(gamma < 0.0, np.nan, gamma)
        a = gamma * cos_h
        b = gamma * sin_h

        rgb_a = np.stack(
            [
                (460.0 * p2 + 451.0 * a + 288.0 * b) / 1403.0,
                (460.0 * p2 - 891.0 * a - 261.0 * b) / 1403.0,
                (460.0 * p2 - 220.0 * a - 6300.0 * b) / 1403.0,
            ],
            axis=-1,
        )

        rgb_c = mat_vec(M_HPE_TO_CAT02, inverse_post_adaptation(rgb_a, vc.F_L))
        white_rgb = mat_vec(M_CAT02, white)
        rgb = rgb_c / von_kries_gains(white_rgb, white[1], vc.D)
        xyz = mat_vec(M_CAT02_INV, rgb)

    _check_finite(
        "Inverse CIECAM02 transform",
        {"X": xyz[..., 0], "Y": xyz[..., 1], "Z": xyz[..., 2]},
    )

    if xyz.ndim == 1:
        return XYZ.from_array(xyz)
    return xyz


# ----------------------------------------------------------------------
# Internal helpers
# ----------------------------------------------------------------------


def _check_finite(stage: str, values: Mapping[str, np.ndarray]) -> None:
    masks = {name: ~np.isfinite(value) for name, value in values.items()}
    invalid = [name for name, mask in masks.items() if mask.any()]
    if not invalid:
        return

    mask = np.logical_or.reduce([masks[name] for name in invalid])
    location = ""
    if np.ndim(mask) > 0:
        index = tuple(int(i) for i in np.argwhere(mask)[0])
        location = f" at index {index[0] if len(index) == 1 else index}"
    raise CIECAM02Error(f"{stage} produced non-finite {', '.join(invalid)}{location}")
