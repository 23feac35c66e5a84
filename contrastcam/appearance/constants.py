"""Process-wide CIECAM02 constants."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple

import numpy as np

# CAT02 sharpened cone space (CIE 159:2004).
M_CAT02 = np.array(
    [
        [0.7328, 0.4296, -0.1624],
        [-0.7036, 1.6975, 0.0061],
        [0.0030, 0.0136, 0.9834],
    ]
)
M_CAT02_INV = np.linalg.inv(M_CAT02)

# Hunt-Pointer-Estevez physiological cone space.
M_HPE = np.array(
    [
        [0.38971, 0.68898, -0.07868],
        [-0.22981, 1.18340, 0.04641],
        [0.00000, 0.00000, 1.00000],
    ]
)
M_HPE_INV = np.linalg.inv(M_HPE)

# Composite maps between adapted CAT02 responses and HPE responses.
M_CAT02_TO_HPE = M_HPE @ M_CAT02_INV
M_HPE_TO_CAT02 = M_CAT02 @ M_HPE_INV

# Surround presets (F, c, N_c).
SURROUND_PARAMETERS: Dict[str, Tuple[float, float, float]] = {
    "average": (1.0, 0.69, 1.0),
    "dim": (0.9, 0.59, 0.95),
    "dark": (0.8, 0.525, 0.8),
}


class Surround(Enum):
    """Viewing environment surround conditions."""

    AVERAGE = "average"  # Office, screen in lit room
    DIM = "dim"          # Home TV, cinema-like
    DARK = "dark"        # Projector in dark room

    @property
    def parameters(self) -> Tuple[float, float, float]:
        """(F, c, N_c) preset for this surround."""

        return SURROUND_PARAMETERS[self.value]


# D65 reference white on the 0-100 scale.
D65_WHITE = np.array([95.047, 100.0, 108.883])

# Post-adaptation cone response compression.
CONE_RESPONSE_EXPONENT = 0.42
CONE_RESPONSE_SCALE = 400.0
CONE_RESPONSE_OFFSET = 27.13
POST_ADAPTATION_OFFSET = 0.1

# Unique hue table: hue angle h_i, eccentricity e_i and cumulative quadrature H_i.
# The last row repeats unique red shifted by 360 degrees so that hues below
# 20.14 wrap into the final segment.
ECCENTRICITY_TABLE = np.array(
    [
        [20.14, 0.8, 0.0],
        [90.00, 0.7, 100.0],
        [164.25, 1.0, 200.0],
        [237.53, 1.2, 300.0],
        [380.14, 0.8, 400.0],
    ]
)

for _constant in (M_CAT02, M_CAT02_INV, M_HPE, M_HPE_INV, M_CAT02_TO_HPE, M_HPE_TO_CAT02, D65_WHITE, ECCENTRICITY_TABLE):
    _constant.setflags(write=False)
del _constant
