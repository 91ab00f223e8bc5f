"""CHIP-8 rendering utilities for visualization."""

import numpy as np
from typing import Tuple


def display_to_rgb(
    display,
    scale: int = 8,
    on_color: Tuple[int, int, int] = (0, 255, 0),
    off_color: Tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """Convert a boolean screen to an RGB array with optional upscaling.

    Args:
        display: Boolean array of shape (width, height), as returned by
            ``chipax.screen`` (64x32 in standard mode, 128x64 in extended mode)
        scale: Upscaling factor for better visibility (default: 8x)
        on_color: RGB color for "on" pixels (default: green)
        off_color: RGB color for "off" pixels (default: black)

    Returns:
        RGB array of shape (height*scale, width*scale, 3) with uint8 values
    """
    pixels = np.array(display, dtype=np.bool_)

    # (width, height) -> image rows first: (height, width)
    pixels = pixels.T
    height, width = pixels.shape

    rgb_frame = np.zeros((height, width, 3), dtype=np.uint8)

    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    # Apply upscaling using nearest neighbor interpolation
    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


def create_color_scheme(
    scheme: str = "classic",
) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """Get predefined color schemes for CHIP-8 rendering.

    Args:
        scheme: Color scheme name ("classic", "yellow", "amber", "white", "blue", "retro")

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    schemes = {
        "classic": ((0, 255, 0), (0, 0, 0)),  # Green on black
        "yellow": ((255, 255, 0), (0, 0, 0)),  # Yellow on black
        "amber": ((255, 176, 0), (0, 0, 0)),  # Amber on black
        "white": ((255, 255, 255), (0, 0, 0)),  # White on black
        "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
        "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
    }

    if scheme not in schemes:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(schemes.keys())}"
        )

    return schemes[scheme]
