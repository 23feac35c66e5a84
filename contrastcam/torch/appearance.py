"""
Torch CIECAM02 mirroring the numpy implementation.
"""

from __future__ import annotations

from typing import Dict, Optional

import torch

from contrastcam.appearance.constants import (
    CONE_RESPONSE_EXPONENT,
    CONE_RESPONSE_OFFSET,
    CONE_RESPONSE_SCALE,
    ECCENTRICITY_TABLE,
    M_CAT02,
    M_CAT02_INV,
    M_CAT02_TO_HPE,
    M_HPE_TO_CAT02,
    POST_ADAPTATION_OFFSET,
)
from contrastcam.appearance.ciecam02 import ACHROMATIC_EPSILON
from contrastcam.appearance.viewing import ViewingConditions
from contrastcam.core.errors import CIECAM02Error
from contrastcam.torch.common import ensure_tensor, ensure_xyz_tensor, first_invalid_index


class TorchCIECAM02:
    """Vectorised CIECAM02 forward and inverse transforms on tensors of shape (..., 3)."""

    def __init__(
        self,
        device: Optional[torch.device] = None,
        dtype: torch.dtype = torch.float64,
    ) -> None:
        self.device = device or torch.device("cpu")
        self.dtype = dtype

        self.M_CAT02 = self.to_tensor(M_CAT02)
        self.M_CAT02_INV = self.to_tensor(M_CAT02_INV)
        self.M_CAT02_TO_HPE = self.to_tensor(M_CAT02_TO_HPE)
        self.M_HPE_TO_CAT02 = self.to_tensor(M_HPE_TO_CAT02)
        self.hue_table = self.to_tensor(ECCENTRICITY_TABLE)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def forward(
        self,
        xyz: torch.Tensor,
        white_xyz: torch.Tensor,
        conditions: ViewingConditions,
    ) -> Dict[str, torch.Tensor]:
        """Map XYZ tensors to appearance correlates (J, C, h, M, s, Q, H)."""

        vc = conditions
        xyz = ensure_xyz_tensor(xyz, device=self.device, dtype=self.dtype)
        white = self.to_tensor(white_xyz).reshape(3)

        white_rgb = self._mat_vec(self.M_CAT02, white)
        rgb_c = self._gains(white_rgb, white[1], vc.D) * self._mat_vec(self.M_CAT02, xyz)
        rgb_a = self._post_adaptation(self._mat_vec(self.M_CAT02_TO_HPE, rgb_c), vc.F_L)
        R_a, G_a, B_a = rgb_a.unbind(-1)

        a = R_a - 12.0 * G_a / 11.0 + B_a / 11.0
        b = (R_a + G_a - 2.0 * B_a) / 9.0
        h = self._normalize_hue(torch.rad2deg(torch.atan2(b, a)))
        e_t = self.eccentricity_factor(h)

        A = (2.0 * R_a + G_a + B_a / 20.0 - 0.305) * vc.N_bb
        A = torch.where(A.abs() < ACHROMATIC_EPSILON, torch.zeros_like(A), A)

        J = 100.0 * (A / vc.A_w) ** vc.achromatic_exponent
        Q = (4.0 / vc.c) * torch.sqrt(J / 100.0) * (vc.A_w + 4.0) * vc.F_L**0.25

        t = (
            (50000.0 / 13.0) * vc.N_c * vc.N_cb * e_t * torch.hypot(a, b)
            / (R_a + G_a + 21.0 * B_a / 20.0)
        )
        C = t**0.9 * torch.sqrt(J / 100.0) * vc.chroma_scale
        M = C * vc.F_L**0.25
        s = torch.where(Q > 0.0, 100.0 * torch.sqrt(M / Q), torch.zeros_like(Q))

        correlates = {"J": J, "C": C, "h": h, "M": M, "s": s, "Q": Q}
        self._check_finite("Forward CIECAM02 transform", correlates)
        correlates["H"] = self.hue_quadrature(h)
        return correlates

    def inverse(
        self,
        J: torch.Tensor,
        C: torch.Tensor,
        h: torch.Tensor,
        white_xyz: torch.Tensor,
        conditions: ViewingConditions,
    ) -> torch.Tensor:
        """Recover XYZ tensors of shape (..., 3) from lightness, chroma and hue."""

        vc = conditions
        J, C, h = torch.broadcast_tensors(
            *(ensure_tensor(value, device=self.device, dtype=self.dtype) for value in (J, C, h))
        )
        white = self.to_tensor(white_xyz).reshape(3)

        A = vc.A_w * (J / 100.0) ** (1.0 / vc.achromatic_exponent)
        t = torch.where(
            J > 0.0,
            (C / (torch.sqrt(J / 100.0) * vc.chroma_scale)) ** (1.0 / 0.9),
            torch.zeros_like(J),
        )
        e_t = self.eccentricity_factor(h)

        h_rad = torch.deg2rad(h)
        cos_h = torch.cos(h_rad)
        sin_h = torch.sin(h_rad)

        p1 = (50000.0 / 13.0) * vc.N_c * vc.N_cb * e_t
        p2 = A / vc.N_bb + 0.305

        gamma = 23.0 * p2 * t / (23.0 * p1 + 11.0 * t * cos_h + 108.0 * t * sin_h)
        gamma = torch.where(gamma < 0.0, torch.full_like(gamma, float("nan")), gamma)
        a = gamma * cos_h
        b = gamma * sin_h

        rgb_a = torch.stack(
            [
                (460.0 * p2 + 451.0 * a + 288.0 * b) / 1403.0,
                (460.0 * p2 - 891.0 * a - 261.0 * b) / 1403.0,
                (460.0 * p2 - 220.0 * a - 6300.0 * b) / 1403.0,
            ],
            dim=-1,
        )

        rgb_c = self._mat_vec(self.M_HPE_TO_CAT02, self._inverse_post_adaptation(rgb_a, vc.F_L))
        white_rgb = self._mat_vec(self.M_CAT02, white)
        rgb = rgb_c / self._gains(white_rgb, white[1], vc.D)
        xyz = self._mat_vec(self.M_CAT02_INV, rgb)

        X, Y, Z = xyz.unbind(-1)
        self._check_finite("Inverse CIECAM02 transform", {"X": X, "Y": Y, "Z": Z})
        return xyz

    def eccentricity_factor(self, h: torch.Tensor) -> torch.Tensor:
        return 0.25 * (torch.cos(torch.deg2rad(h) + 2.0) + 3.8)

    def hue_quadrature(self, h: torch.Tensor) -> torch.Tensor:
        hue_angles = self.hue_table[:, 0].contiguous()
        h_p = torch.where(h < hue_angles[0], h + 360.0, h)

        i = torch.searchsorted(hue_angles, h_p.reshape(-1), right=True).reshape(h_p.shape) - 1
        i = i.clamp(0, hue_angles.numel() - 2)
        h_i, e_i, H_i = self.hue_table[i, 0], self.hue_table[i, 1], self.hue_table[i, 2]
        h_next, e_next = self.hue_table[i + 1, 0], self.hue_table[i + 1, 1]

        lower = (h_p - h_i) / e_i
        upper = (h_next - h_p) / e_next
        return H_i + 100.0 * lower / (lower + upper)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def to_tensor(self, value) -> torch.Tensor:
        return ensure_tensor(value, device=self.device, dtype=self.dtype)

    @staticmethod
    def _mat_vec(matrix: torch.Tensor, vectors: torch.Tensor) -> torch.Tensor:
        return vectors @ matrix.T

    @staticmethod
    def _gains(white_rgb: torch.Tensor, white_Y: torch.Tensor, D: float) -> torch.Tensor:
        return D * white_Y / white_rgb + (1.0 - D)

    @staticmethod
    def _normalize_hue(h: torch.Tensor) -> torch.Tensor:
        h = torch.remainder(h, 360.0)
        return torch.where(h >= 360.0, torch.zeros_like(h), h)

    @staticmethod
    def _post_adaptation(rgb: torch.Tensor, F_L: float) -> torch.Tensor:
        F_L_rgb = (F_L * rgb.abs() / 100.0) ** CONE_RESPONSE_EXPONENT
        sign = torch.where(rgb < 0.0, -torch.ones_like(rgb), torch.ones_like(rgb))
        return sign * CONE_RESPONSE_SCALE * F_L_rgb / (F_L_rgb + CONE_RESPONSE_OFFSET) + POST_ADAPTATION_OFFSET

    @staticmethod
    def _inverse_post_adaptation(rgb_a: torch.Tensor, F_L: float) -> torch.Tensor:
        shifted = rgb_a - POST_ADAPTATION_OFFSET
        magnitude = shifted.abs()
        sign = torch.where(shifted < 0.0, -torch.ones_like(shifted), torch.ones_like(shifted))
        base = CONE_RESPONSE_OFFSET * magnitude / (CONE_RESPONSE_SCALE - magnitude)
        return sign * (100.0 / F_L) * base ** (1.0 / CONE_RESPONSE_EXPONENT)

    @staticmethod
    def _check_finite(stage: str, values: Dict[str, torch.Tensor]) -> None:
        masks = {name: ~torch.isfinite(value) for name, value in values.items()}
        invalid = [name for name, mask in masks.items() if bool(mask.any())]
        if not invalid:
            return

        mask = masks[invalid[0]]
        for name in invalid[1:]:
            mask = mask | masks[name]
        raise CIECAM02Error(
            f"{stage} produced non-finite {', '.join(invalid)}{first_invalid_index(mask)}"
        )
