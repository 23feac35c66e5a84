"""
Basic usage examples for contrastcam.
"""

from __future__ import annotations

import numpy as np

from contrastcam import (
    D65_WHITE,
    XYZ,
    CompensationConfig,
    ContrastCompensator,
    OKLCHColor,
    Surround,
    compensate_batch,
    compensate_for_background,
    forward,
    inverse,
    make_viewing_conditions,
)

WHITE_BG = OKLCHColor(1.0, 0.0, 0.0)
DARK_BG = OKLCHColor(0.17, 0.0, 0.0)


def example_simple() -> OKLCHColor:
    """Move a blue designed for a white page onto a dark background."""

    blue = OKLCHColor(0.57, 0.154, 258.7)
    result = compensate_for_background(blue, WHITE_BG, DARK_BG)
    print(f"Simple example: L {blue.l:0.3f} -> {result.l:0.3f}, C {blue.c:0.3f} -> {result.c:0.3f}")
    return result


def example_batch() -> list:
    """Compensate a small palette in one call."""

    palette = [
        OKLCHColor(0.57, 0.154, 258.7),
        OKLCHColor(0.7, 0.2, 140.0),
        OKLCHColor(0.45, 0.18, 30.0),
    ]
    results = compensate_batch(palette, WHITE_BG, DARK_BG)
    for original, compensated in zip(palette, results):
        print(f"Batch example: dL {compensated.l - original.l:+0.4f}")
    return results


def example_dim_surround() -> OKLCHColor:
    """Use a dim viewing surround and brighter adapting field."""

    config = CompensationConfig(adapting_luminance=100.0, surround=Surround.DIM)
    compensator = ContrastCompensator(config)
    result = compensator.compensate(OKLCHColor(0.45, 0.18, 30.0), WHITE_BG, DARK_BG)
    print(f"Dim surround example: {result}")
    return result


def example_appearance_model() -> np.ndarray:
    """Drive the CIECAM02 primitives directly."""

    conditions = make_viewing_conditions(64.0, 20.0, D65_WHITE)
    appearance = forward(XYZ(19.31, 23.93, 10.14), D65_WHITE, conditions)
    print(f"Appearance: J={appearance.J:0.2f} C={appearance.C:0.2f} h={appearance.h:0.2f} H={appearance.H:0.2f}")

    recovered = inverse(appearance, D65_WHITE, conditions)
    print(f"Recovered XYZ: {recovered}")
    return recovered.to_array()


if __name__ == "__main__":
    print("Running contrastcam basic examples...")
    example_simple()
    example_batch()
    example_dim_surround()
    example_appearance_model()
