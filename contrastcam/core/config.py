"""
Configuration primitives for contrast compensation.

Re-exports the surround enum and defines a dataclass collecting the viewing
parameters shared by every compensation call.
"""

from dataclasses import dataclass, field

import numpy as np

from contrastcam.appearance.constants import D65_WHITE, Surround
from contrastcam.appearance.viewing import resolve_surround

# Lw/5 for a display with a peak white of about 320 cd/m^2
SCREEN_ADAPTING_LUMINANCE = 64.0


@dataclass
class CompensationConfig:
    """
    Complete configuration for contrast compensation.

    All parameters default to typical screen viewing.
    """

    adapting_luminance: float = SCREEN_ADAPTING_LUMINANCE  # cd/m^2
    white_point: np.ndarray = field(default_factory=lambda: D65_WHITE.copy())
    surround: Surround = Surround.AVERAGE

    def validate(self) -> None:
        """Validate configuration parameters."""

        if not (np.isfinite(self.adapting_luminance) and self.adapting_luminance > 0):
            raise ValueError(
                f"Adapting luminance {self.adapting_luminance} must be positive and finite"
            )

        white = np.asarray(self.white_point, dtype=float)
        if white.shape != (3,) or not np.isfinite(white).all():
            raise ValueError(f"White point must be three finite values, got {self.white_point!r}")

        if white[1] <= 0:
            raise ValueError(f"White point luminance {white[1]} must be positive")

        self.surround = resolve_surround(self.surround)
