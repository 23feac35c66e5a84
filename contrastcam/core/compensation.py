"""
Simultaneous contrast compensation.

A color placed on a different background appears different. The compensator
forward-transforms the color under the source background's viewing
conditions and inverse-transforms the resulting lightness, chroma and hue
under the target background's conditions, yielding a color that appears the
same on the target as the original did on the source.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import numpy as np

from contrastcam.appearance.ciecam02 import forward, inverse
from contrastcam.appearance.viewing import ViewingConditions, make_viewing_conditions
from contrastcam.core.config import CompensationConfig
from contrastcam.core.errors import CIECAM02Error, ContrastCAMError
from contrastcam.utils.color import (
    XYZ,
    OKLCHColor,
    XYZLike,
    clamp_to_gamut,
    oklch_to_xyz,
    xyz_to_oklch,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompensationOutcome:
    """Per-color result of a partial-success batch."""

    color: Optional[OKLCHColor] = None
    error: Optional[ContrastCAMError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ContrastCompensator:
    """
    Background-dependent color compensation built on CIECAM02.

    Pipeline stages:
        1. Color conversion (OKLCH -> XYZ)
        2. Background luminance (Y_b) extraction
        3. Viewing conditions for source and target backgrounds
        4. Forward CIECAM02 under source conditions
        5. Inverse CIECAM02 under target conditions
        6. Color conversion (XYZ -> OKLCH) and sRGB gamut clamp
    """

    def __init__(self, config: Optional[CompensationConfig] = None) -> None:
        self.config = config or CompensationConfig()
        self.config.validate()
        self.white_point = np.asarray(self.config.white_point, dtype=float)

        logger.info("Initializing ContrastCompensator")
        logger.info("  Adapting luminance: %.2f cd/m^2", self.config.adapting_luminance)
        logger.info("  Surround: %s", self.config.surround.value)

    def viewing_conditions(self, Y_b: float) -> ViewingConditions:
        """Viewing conditions for a background of relative luminance ``Y_b``."""

        return make_viewing_conditions(
            self.config.adapting_luminance,
            Y_b,
            self.white_point,
            self.config.surround,
        )

    def compensate_xyz(
        self,
        xyz: XYZLike,
        source_Y_b: float,
        target_Y_b: float,
    ) -> Union[XYZ, np.ndarray]:
        """
        Compensate tristimulus values between two background luminances.

        ``xyz`` may be a single color or an array of shape (..., 3); the
        result has the same form.
        """

        logger.debug("Stage 3: viewing conditions (Y_b %.3f -> %.3f)", source_Y_b, target_Y_b)
        source_conditions = self.viewing_conditions(source_Y_b)
        target_conditions = self.viewing_conditions(target_Y_b)

        logger.debug("Stage 4: CIECAM02 forward")
        appearance = forward(xyz, self.white_point, source_conditions)

        logger.debug("Stage 5: CIECAM02 inverse")
        return inverse(appearance.jch(), self.white_point, target_conditions)

    def compensate(
        self,
        color: OKLCHColor,
        source_bg: OKLCHColor,
        target_bg: OKLCHColor,
    ) -> OKLCHColor:
        """
        Compensate a color for simultaneous contrast when moving between backgrounds.

        Parameters
        ----------
        color : OKLCHColor
            Foreground color designed for ``source_bg``
        source_bg : OKLCHColor
            Background the color was designed for
        target_bg : OKLCHColor
            Background the color will be displayed on

        Returns
        -------
        OKLCHColor
            Compensated color, gamut-clamped to sRGB (alpha reset to 1)

        Raises
        ------
        ComputationError
            If a background has zero luminance.
        CIECAM02Error
            If the appearance has no real solution under the target
            conditions. Saturated colors moved off a near-black background
            can land here even though they are valid OKLCH colors.
        ContrastCompensationError
            If the result cannot be mapped into the sRGB gamut.
        """

        logger.debug("Stage 1-2: color conversion and background luminance")
        color_xyz = oklch_to_xyz(color)
        compensated = self.compensate_xyz(
            color_xyz,
            oklch_to_xyz(source_bg).Y,
            oklch_to_xyz(target_bg).Y,
        )

        logger.debug("Stage 6: gamut clamp")
        return clamp_to_gamut(xyz_to_oklch(compensated))

    def compensate_batch(
        self,
        colors: Sequence[OKLCHColor],
        source_bg: OKLCHColor,
        target_bg: OKLCHColor,
    ) -> List[OKLCHColor]:
        """
        Compensate several colors between the same pair of backgrounds.

        Output order matches input order. The first failing color, in input
        order, aborts the whole batch; use :meth:`compensate_batch_partial` to
        keep going.
        """

        if not colors:
            return []

        logger.debug("Compensating batch of %d colors", len(colors))
        colors_xyz = np.stack([oklch_to_xyz(color).to_array() for color in colors])
        try:
            compensated = self.compensate_xyz(
                colors_xyz,
                oklch_to_xyz(source_bg).Y,
                oklch_to_xyz(target_bg).Y,
            )
        except CIECAM02Error:
            # An earlier color may still fail at the gamut clamp first
            logger.debug("Vectorised transform failed, compensating colors in order")
            return [self.compensate(color, source_bg, target_bg) for color in colors]
        return [clamp_to_gamut(xyz_to_oklch(xyz)) for xyz in compensated]

    def compensate_batch_partial(
        self,
        colors: Sequence[OKLCHColor],
        source_bg: OKLCHColor,
        target_bg: OKLCHColor,
    ) -> List[CompensationOutcome]:
        """Compensate each color independently, keeping one outcome per input."""

        outcomes: List[CompensationOutcome] = []
        for index, color in enumerate(colors):
            try:
                outcomes.append(CompensationOutcome(color=self.compensate(color, source_bg, target_bg)))
            except ContrastCAMError as exc:
                logger.warning("Color %d could not be compensated: %s", index, exc)
                outcomes.append(CompensationOutcome(error=exc))
        return outcomes


def compensate_for_background(
    color: OKLCHColor,
    source_bg: OKLCHColor,
    target_bg: OKLCHColor,
    config: Optional[CompensationConfig] = None,
) -> OKLCHColor:
    """Convenience function for single-color compensation."""

    return ContrastCompensator(config).compensate(color, source_bg, target_bg)


def compensate_batch(
    colors: Sequence[OKLCHColor],
    source_bg: OKLCHColor,
    target_bg: OKLCHColor,
    config: Optional[CompensationConfig] = None,
) -> List[OKLCHColor]:
    """Convenience function for batch compensation."""

    return ContrastCompensator(config).compensate_batch(colors, source_bg, target_bg)
