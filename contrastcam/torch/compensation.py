"""
Torch-powered batch contrast compensation on tristimulus tensors.
"""

from __future__ import annotations

import logging
from typing import Optional

import torch

from contrastcam.appearance.viewing import ViewingConditions, make_viewing_conditions
from contrastcam.core.config import CompensationConfig
from contrastcam.torch.appearance import TorchCIECAM02
from contrastcam.torch.common import ensure_xyz_tensor

logger = logging.getLogger(__name__)


class TorchContrastCompensator:
    """
    GPU-accelerated XYZ compensation for large batches.

    Viewing conditions are scalars and are derived on the CPU; the per-color
    transforms run on ``device``.
    """

    def __init__(
        self,
        config: Optional[CompensationConfig] = None,
        device: Optional[torch.device] = None,
        dtype: torch.dtype = torch.float64,
    ) -> None:
        self.config = config or CompensationConfig()
        self.config.validate()

        if device is None:
            device = torch.device("cuda" if torch.cuda.is_available() else "cpu")

        self.device = device
        self.dtype = dtype
        self.cam = TorchCIECAM02(device=device, dtype=dtype)
        self.white_point = self.cam.to_tensor(self.config.white_point)

        logger.info("Initializing TorchContrastCompensator (%s)", self.device)
        logger.info("  Adapting luminance: %.2f cd/m^2", self.config.adapting_luminance)
        logger.info("  Surround: %s", self.config.surround.value)

    def viewing_conditions(self, Y_b: float) -> ViewingConditions:
        return make_viewing_conditions(
            self.config.adapting_luminance,
            Y_b,
            self.config.white_point,
            self.config.surround,
        )

    def compensate_xyz(
        self,
        xyz,
        source_Y_b: float,
        target_Y_b: float,
    ) -> torch.Tensor:
        """
        Compensate XYZ values of shape (..., 3) between two background luminances.

        The whole batch fails with :class:`CIECAM02Error` if any element does.
        """

        xyz = ensure_xyz_tensor(xyz, device=self.device, dtype=self.dtype)
        if xyz.numel() == 0:
            return xyz

        logger.debug("Torch stage: viewing conditions (Y_b %.3f -> %.3f)", source_Y_b, target_Y_b)
        source_conditions = self.viewing_conditions(source_Y_b)
        target_conditions = self.viewing_conditions(target_Y_b)

        logger.debug("Torch stage: CIECAM02 forward on %d colors", xyz.numel() // 3)
        appearance = self.cam.forward(xyz, self.white_point, source_conditions)

        logger.debug("Torch stage: CIECAM02 inverse")
        return self.cam.inverse(
            appearance["J"],
            appearance["C"],
            appearance["h"],
            self.white_point,
            target_conditions,
        )


def compensate_xyz_torch(
    xyz,
    source_Y_b: float,
    target_Y_b: float,
    device: Optional[torch.device] = None,
    dtype: torch.dtype = torch.float64,
) -> torch.Tensor:
    """
    Convenience wrapper mirroring :meth:`ContrastCompensator.compensate_xyz`.
    """

    compensator = TorchContrastCompensator(device=device, dtype=dtype)
    return compensator.compensate_xyz(xyz, source_Y_b, target_Y_b)
