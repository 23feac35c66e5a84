"""Color appearance model."""

from contrastcam.appearance.ciecam02 import (
    AppearanceCorrelates,
    eccentricity_factor,
    forward,
    hue_quadrature,
    inverse,
)
from contrastcam.appearance.constants import D65_WHITE, SURROUND_PARAMETERS, Surround
from contrastcam.appearance.viewing import ViewingConditions, make_viewing_conditions

__all__ = [
    "AppearanceCorrelates",
    "ViewingConditions",
    "Surround",
    "SURROUND_PARAMETERS",
    "D65_WHITE",
    "make_viewing_conditions",
    "forward",
    "inverse",
    "eccentricity_factor",
    "hue_quadrature",
]
