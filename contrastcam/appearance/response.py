"""Cone-space helpers shared by the CIECAM02 transforms."""

from __future__ import annotations

import numpy as np

from contrastcam.appearance.constants import (
    CONE_RESPONSE_EXPONENT,
    CONE_RESPONSE_OFFSET,
    CONE_RESPONSE_SCALE,
    POST_ADAPTATION_OFFSET,
)


def mat_vec(matrix: np.ndarray, vectors: np.ndarray) -> np.ndarray:
    """Apply a 3x3 matrix to one vector or a stack of vectors of shape (..., 3)."""

    return np.dot(vectors, matrix.T)


def von_kries_gains(white_rgb: np.ndarray, white_Y: float, D: float) -> np.ndarray:
    """
    Per-channel gains of the D-weighted von Kries adaptation.

    Parameters
    ----------
    white_rgb : np.ndarray
        CAT02 response of the reference white, shape (3,)
    white_Y : float
        Luminance of the reference white
    D : float
        Degree of adaptation (0-1)
    """

    return D * white_Y / white_rgb + (1.0 - D)


def post_adaptation(rgb: np.ndarray, F_L: float) -> np.ndarray:
    """Sign-preserving nonlinear compression of HPE cone responses."""

    F_L_rgb = (F_L * np.abs(rgb) / 100.0) ** CONE_RESPONSE_EXPONENT
    sign = np.where(rgb < 0.0, -1.0, 1.0)
    return sign * CONE_RESPONSE_SCALE * F_L_rgb / (F_L_rgb + CONE_RESPONSE_OFFSET) + POST_ADAPTATION_OFFSET


def inverse_post_adaptation(rgb_a: np.ndarray, F_L: float) -> np.ndarray:
    """Undo :func:`post_adaptation`, recovering HPE cone responses."""

    shifted = rgb_a - POST_ADAPTATION_OFFSET
    magnitude = np.abs(shifted)
    sign = np.where(shifted < 0.0, -1.0, 1.0)
    base = CONE_RESPONSE_OFFSET * magnitude / (CONE_RESPONSE_SCALE - magnitude)
    return sign * (100.0 / F_L) * base ** (1.0 / CONE_RESPONSE_EXPONENT)


def achromatic_signal(rgb_a: np.ndarray) -> np.ndarray:
    """2R + G + B/20 - 0.305, before the N_bb scaling."""

    return 2.0 * rgb_a[..., 0] + rgb_a[..., 1] + rgb_a[..., 2] / 20.0 - 0.305
