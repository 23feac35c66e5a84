"""Simultaneous contrast compensation (contrastcam).

CIECAM02 color appearance modelling used to recompute a color so that it
appears the same on a new background as it did on its original one.
"""

from contrastcam.appearance import (
    AppearanceCorrelates,
    D65_WHITE,
    Surround,
    ViewingConditions,
    forward,
    inverse,
    make_viewing_conditions,
)
from contrastcam.core.compensation import (
    CompensationOutcome,
    ContrastCompensator,
    compensate_batch,
    compensate_for_background,
)
from contrastcam.core.config import CompensationConfig
from contrastcam.core.errors import (
    CIECAM02Error,
    ComputationError,
    ContrastCAMError,
    ContrastCompensationError,
)
from contrastcam.utils.color import XYZ, OKLCHColor, clamp_to_gamut, oklch_to_xyz, xyz_to_oklch

__all__ = [
    "ContrastCompensator",
    "CompensationConfig",
    "CompensationOutcome",
    "Surround",
    "ViewingConditions",
    "AppearanceCorrelates",
    "XYZ",
    "OKLCHColor",
    "D65_WHITE",
    "make_viewing_conditions",
    "forward",
    "inverse",
    "compensate_for_background",
    "compensate_batch",
    "oklch_to_xyz",
    "xyz_to_oklch",
    "clamp_to_gamut",
    "ContrastCAMError",
    "ComputationError",
    "CIECAM02Error",
    "ContrastCompensationError",
]

try:  # Optional PyTorch acceleration
    from contrastcam.torch import TorchContrastCompensator, compensate_xyz_torch  # type: ignore

    __all__.extend(["TorchContrastCompensator", "compensate_xyz_torch"])
except ImportError:  # pragma: no cover - torch not installed
    TorchContrastCompensator = None  # type: ignore
    compensate_xyz_torch = None  # type: ignore

__version__ = "1.0.0"
