"""
Color space transformations and sRGB gamut clamping.

The appearance model works on CIE XYZ (D65) on a 0-100 scale; colors are
authored in OKLCH. This module bridges the two through linear sRGB and OKLab.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np
from scipy.optimize import brentq

from contrastcam.core.errors import ContrastCompensationError

# Out-of-gamut tolerance on linear sRGB components
GAMUT_EPSILON = 1e-6


@dataclass(frozen=True)
class XYZ:
    """CIE XYZ tristimulus value, Y = 100 for the reference white."""

    X: float
    Y: float
    Z: float

    def to_array(self) -> np.ndarray:
        return np.array([self.X, self.Y, self.Z], dtype=float)

    @classmethod
    def from_array(cls, values: np.ndarray) -> "XYZ":
        values = np.asarray(values, dtype=float).reshape(3)
        return cls(float(values[0]), float(values[1]), float(values[2]))


@dataclass(frozen=True)
class OKLCHColor:
    """Perceptual color: lightness (0-1), chroma, hue (degrees), alpha."""

    l: float
    c: float
    h: float
    alpha: float = 1.0

    def __post_init__(self) -> None:
        if not np.isfinite([self.l, self.c, self.h, self.alpha]).all():
            raise ValueError(f"OKLCH components must be finite, got {self!r}")

    def to_array(self) -> np.ndarray:
        return np.array([self.l, self.c, self.h], dtype=float)


XYZLike = Union[XYZ, Sequence[float], np.ndarray]


def as_xyz_array(xyz: XYZLike) -> np.ndarray:
    """Coerce an XYZ value or array-like of shape (..., 3) to a float array."""

    if isinstance(xyz, XYZ):
        return xyz.to_array()

    values = np.asarray(xyz, dtype=float)
    if values.shape[-1:] != (3,):
        raise ValueError(f"Expected tristimulus values of shape (..., 3), got {values.shape}")
    return values


def normalize_hue(h):
    """Wrap hue angles in degrees into [0, 360)."""

    h = np.mod(h, 360.0)
    # np.mod can round tiny negative angles up to exactly 360
    return np.where(h >= 360.0, 0.0, h)


class ColorTransform:
    """Color space transformation utilities."""

    def __init__(self) -> None:
        """Initialize color transform matrices."""

        # Linear sRGB to XYZ (D65)
        self.srgb_to_xyz_matrix = np.array(
            [
                [0.4124564, 0.3575761, 0.1804375],
                [0.2126729, 0.7151522, 0.0721750],
                [0.0193339, 0.1191920, 0.9503041],
            ]
        )

        # XYZ to linear sRGB
        self.xyz_to_srgb_matrix = np.linalg.inv(self.srgb_to_xyz_matrix)

        # Linear sRGB to OKLab cone space (Ottosson)
        self.srgb_to_lms_matrix = np.array(
            [
                [0.4122214708, 0.5363325363, 0.0514459929],
                [0.2119034982, 0.6806995451, 0.1073969566],
                [0.0883024619, 0.2817188376, 0.6299787005],
            ]
        )
        self.lms_to_srgb_matrix = np.linalg.inv(self.srgb_to_lms_matrix)

        # Nonlinear cone responses to OKLab
        self.lms_to_oklab_matrix = np.array(
            [
                [0.2104542553, 0.7936177850, -0.0040720468],
                [1.9779984951, -2.4285922050, 0.4505937099],
                [0.0259040371, 0.7827717662, -0.8086757660],
            ]
        )
        self.oklab_to_lms_matrix = np.linalg.inv(self.lms_to_oklab_matrix)

    def srgb_to_xyz(self, rgb: np.ndarray) -> np.ndarray:
        """
        Convert linear sRGB to XYZ.

        Parameters
        ----------
        rgb : np.ndarray
            Linear sRGB (0-1), shape (..., 3)

        Returns
        -------
        np.ndarray
            XYZ on the 0-100 scale
        """

        return 100.0 * np.dot(rgb, self.srgb_to_xyz_matrix.T)

    def xyz_to_srgb(self, xyz: np.ndarray) -> np.ndarray:
        """Convert XYZ (0-100) to linear sRGB."""

        return np.dot(np.asarray(xyz, dtype=float) / 100.0, self.xyz_to_srgb_matrix.T)

    def srgb_to_oklab(self, rgb: np.ndarray) -> np.ndarray:
        """Convert linear sRGB to OKLab."""

        lms = np.dot(rgb, self.srgb_to_lms_matrix.T)
        return np.dot(np.cbrt(lms), self.lms_to_oklab_matrix.T)

    def oklab_to_srgb(self, lab: np.ndarray) -> np.ndarray:
        """Convert OKLab to linear sRGB."""

        lms = np.dot(lab, self.oklab_to_lms_matrix.T) ** 3
        return np.dot(lms, self.lms_to_srgb_matrix.T)

    def oklab_to_oklch(self, lab: np.ndarray) -> np.ndarray:
        L = lab[..., 0]
        C = np.hypot(lab[..., 1], lab[..., 2])
        H = normalize_hue(np.degrees(np.arctan2(lab[..., 2], lab[..., 1])))
        return np.stack([L, C, H], axis=-1)

    def oklch_to_oklab(self, lch: np.ndarray) -> np.ndarray:
        h_rad = np.radians(lch[..., 2])
        return np.stack(
            [lch[..., 0], lch[..., 1] * np.cos(h_rad), lch[..., 1] * np.sin(h_rad)],
            axis=-1,
        )

    def oklch_to_xyz(self, lch: np.ndarray) -> np.ndarray:
        """Convert OKLCH of shape (..., 3) to XYZ (0-100)."""

        lch = np.asarray(lch, dtype=float)
        return self.srgb_to_xyz(self.oklab_to_srgb(self.oklch_to_oklab(lch)))

    def xyz_to_oklch(self, xyz: np.ndarray) -> np.ndarray:
        """Convert XYZ (0-100) of shape (..., 3) to OKLCH."""

        return self.oklab_to_oklch(self.srgb_to_oklab(self.xyz_to_srgb(xyz)))

    def gamut_excess(self, lch: np.ndarray) -> float:
        """Largest distance of the linear sRGB components outside [0, 1]."""

        rgb = self.oklab_to_srgb(self.oklch_to_oklab(np.asarray(lch, dtype=float)))
        return float(max(-np.min(rgb), np.max(rgb) - 1.0))


_TRANSFORM = ColorTransform()


def oklch_to_xyz(color: OKLCHColor) -> XYZ:
    """Convert an OKLCH color to CIE XYZ (D65, 0-100 scale)."""

    return XYZ.from_array(_TRANSFORM.oklch_to_xyz(color.to_array()))


def xyz_to_oklch(xyz: XYZLike) -> OKLCHColor:
    """
    Convert CIE XYZ (D65, 0-100 scale) back to OKLCH.

    Lightness is clamped to [0, 1] and chroma to >= 0; alpha is 1.
    """

    l, c, h = _TRANSFORM.xyz_to_oklch(as_xyz_array(xyz))
    return OKLCHColor(
        l=float(np.clip(l, 0.0, 1.0)),
        c=float(max(c, 0.0)),
        h=float(normalize_hue(h)),
    )


def in_srgb_gamut(color: OKLCHColor, tolerance: float = GAMUT_EPSILON) -> bool:
    """Whether ``color`` is displayable in sRGB."""

    return _TRANSFORM.gamut_excess(color.to_array()) <= tolerance


def clamp_to_gamut(color: OKLCHColor) -> OKLCHColor:
    """
    Map a color into the sRGB gamut.

    Lightness is clamped to [0, 1], chroma to >= 0 and hue wrapped into
    [0, 360); alpha is reset to 1. Out-of-gamut colors keep lightness and hue
    and have their chroma reduced to the gamut boundary.

    Raises
    ------
    ContrastCompensationError
        If no finite in-gamut color can be produced.
    """

    l = float(np.clip(color.l, 0.0, 1.0))
    c = max(float(color.c), 0.0)
    h = float(normalize_hue(color.h))

    def excess(chroma: float) -> float:
        return _TRANSFORM.gamut_excess(np.array([l, chroma, h])) - GAMUT_EPSILON / 2.0

    if excess(c) <= 0.0:
        return OKLCHColor(l, c, h, 1.0)

    if excess(0.0) > 0.0:
        raise ContrastCompensationError(f"No in-gamut chroma exists for lightness {l}")

    try:
        boundary = brentq(excess, 0.0, c, xtol=1e-12)
    except (ValueError, RuntimeError) as exc:
        raise ContrastCompensationError("Failed to locate sRGB gamut boundary", exc) from exc

    if not np.isfinite(boundary):
        raise ContrastCompensationError(f"Gamut boundary search returned {boundary}")

    return OKLCHColor(l, float(boundary), h, 1.0)
