"""
CIECAM02 viewing conditions.

A :class:`ViewingConditions` value collects every quantity of the model that
depends only on the adapting field, the background and the surround, so it is
derived once per background and shared by the forward and inverse transforms.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple, Union

import numpy as np

from contrastcam.appearance.constants import M_CAT02, M_CAT02_TO_HPE, Surround
from contrastcam.appearance.response import (
    achromatic_signal,
    mat_vec,
    post_adaptation,
    von_kries_gains,
)
from contrastcam.core.errors import ComputationError
from contrastcam.utils.color import XYZLike, as_xyz_array


@dataclass(frozen=True)
class ViewingConditions:
    """Viewing conditions used by CIECAM02."""

    L_A: float  # adapting luminance (cd/m^2)
    Y_b: float  # relative background luminance
    surround: Surround
    F: float
    c: float
    N_c: float
    k: float
    F_L: float
    n: float
    N_bb: float
    N_cb: float
    z: float
    D: float
    A_w: float
    adapted_white_rgb: np.ndarray = field(compare=False, repr=False)

    @property
    def achromatic_exponent(self) -> float:
        """c * z, the exponent linking A / A_w to lightness."""

        return self.c * self.z

    @property
    def chroma_scale(self) -> float:
        """(1.64 - 0.29^n)^0.73 factor of the chroma correlate."""

        return (1.64 - 0.29**self.n) ** 0.73


def resolve_surround(surround: Union[Surround, str]) -> Surround:
    """Convert a surround label to :class:`Surround`."""

    if isinstance(surround, Surround):
        return surround
    try:
        return Surround(surround)
    except ValueError as exc:
        raise ComputationError(
            f"Unknown surround '{surround}', expected one of "
            f"{[member.value for member in Surround]}",
            exc,
        ) from exc


def degree_of_adaptation(L_A: float, F: float) -> float:
    """Degree of adaptation D, clamped to [0, 1]."""

    D = F * (1.0 - (1.0 / 3.6) * np.exp((-L_A - 42.0) / 92.0))
    return float(np.clip(D, 0.0, 1.0))


def luminance_adaptation(L_A: float) -> Tuple[float, float]:
    """Return k and the luminance-level adaptation factor F_L."""

    k = 1.0 / (5.0 * L_A + 1.0)
    k4 = k**4
    F_L = 0.2 * k4 * (5.0 * L_A) + 0.1 * ((1.0 - k4) ** 2) * ((5.0 * L_A) ** (1.0 / 3.0))
    return k, F_L


def make_viewing_conditions(
    L_A: float,
    Y_b: float,
    white_xyz: XYZLike,
    surround: Union[Surround, str] = Surround.AVERAGE,
) -> ViewingConditions:
    """
    Derive viewing conditions from the adapting field and background.

    Parameters
    ----------
    L_A : float
        Adapting field luminance in cd/m^2 (typically Lw/5 for screens)
    Y_b : float
        Relative background luminance (0-100, where 100 = white)
    white_xyz : XYZ or array-like
        Reference white on the same scale as ``Y_b``
    surround : Surround or str
        Surround condition, "average" for screen viewing

    Raises
    ------
    ComputationError
        If a luminance is non-positive or non-finite, or the surround is unknown.
    """

    surround = resolve_surround(surround)
    white = as_xyz_array(white_xyz).reshape(3)

    if not (np.isfinite(L_A) and L_A > 0):
        raise ComputationError(f"Adapting luminance must be positive, got {L_A}")
    if not (np.isfinite(Y_b) and Y_b > 0):
        raise ComputationError(f"Background luminance must be positive, got {Y_b}")
    if not (np.isfinite(white).all() and white[1] > 0):
        raise ComputationError(f"White point luminance must be positive, got {white[1]}")

    F, c, N_c = surround.parameters

    k, F_L = luminance_adaptation(L_A)
    n = Y_b / white[1]
    N_bb = 0.725 * (1.0 / n) ** 0.2
    N_cb = N_bb
    z = 1.48 + np.sqrt(n)
    D = degree_of_adaptation(L_A, F)

    white_rgb = mat_vec(M_CAT02, white)
    adapted_white_rgb = von_kries_gains(white_rgb, white[1], D) * white_rgb

    white_rgb_a = post_adaptation(mat_vec(M_CAT02_TO_HPE, adapted_white_rgb), F_L)
    A_w = float(achromatic_signal(white_rgb_a) * N_bb)

    derived = np.array([k, F_L, n, N_bb, z, A_w])
    if not np.isfinite(derived).all() or A_w <= 0:
        raise ComputationError(
            f"Viewing conditions are degenerate for L_A={L_A}, Y_b={Y_b}, white={white.tolist()}"
        )

    adapted_white_rgb.setflags(write=False)

    return ViewingConditions(
        L_A=float(L_A),
        Y_b=float(Y_b),
        surround=surround,
        F=F,
        c=c,
        N_c=N_c,
        k=float(k),
        F_L=float(F_L),
        n=float(n),
        N_bb=float(N_bb),
        N_cb=float(N_cb),
        z=float(z),
        D=D,
        A_w=A_w,
        adapted_white_rgb=adapted_white_rgb,
    )
