"""
Visualization utilities for tile debugging.
"""

from typing import Optional

import cv2
import numpy as np

from .models import Rect, TileGrid


# Color palette for tiles
TILE_COLORS = [
    (255, 0, 0),    # Blue
    (0, 255, 0),    # Green
    (0, 0, 255),    # Red
    (255, 255, 0),  # Cyan
    (255, 0, 255),  # Magenta
    (0, 255, 255),  # Yellow
    (128, 0, 255),  # Purple
    (255, 128, 0),  # Orange-ish
]


def _draw_rects(vis: np.ndarray, rects, show_labels: bool, thickness: int = 1) -> None:
    for i, rect in enumerate(rects):
        color = TILE_COLORS[i % len(TILE_COLORS)]
        cv2.rectangle(vis, (rect.x, rect.y), (rect.x2 - 1, rect.y2 - 1), color, thickness)

        if show_labels:
            cx = rect.x + rect.width // 2
            cy = rect.y + rect.height // 2
            cv2.putText(vis, str(i), (cx - 5, cy + 5),
                       cv2.FONT_HERSHEY_SIMPLEX, 0.4, color, 1)


def visualize_tiles(
    image: np.ndarray,
    grid: TileGrid,
    output_path: str,
    show_labels: bool = True,
    show_sampling: bool = False,
    alpha: float = 0.2,
) -> str:
    """
    Draw a tile grid over the image it was planned for.

    Output rectangles are mapped back to input coordinates so they line up
    with the image; sampling rectangles (which may extend past the image)
    can be drawn as well.

    Args:
        image: Original BGR uint8 image
        grid: Planned tile grid
        output_path: Path to save visualization
        show_labels: Whether to show tile indices
        show_sampling: Whether to also draw the padded sampling rectangles
        alpha: Transparency for the overlap shading

    Returns:
        Path to saved visualization
    """
    vis = image.copy()
    height, width = vis.shape[:2]

    sx = grid.input_rect.width / grid.output_rect.width
    sy = grid.input_rect.height / grid.output_rect.height
    mapped = [
        Rect(int(r.x * sx), int(r.y * sy), max(1, int(r.width * sx)), max(1, int(r.height * sy)))
        for r in grid.output_rects
    ]

    # Shade pixels covered by more than one tile
    coverage = np.zeros((height, width), dtype=np.uint8)
    for rect in mapped:
        rows, cols = rect.to_slices()
        coverage[rows, cols] += 1
    overlay = vis.copy()
    overlay[coverage > 1] = (128, 128, 128)
    cv2.addWeighted(overlay, alpha, vis, 1 - alpha, 0, vis)

    _draw_rects(vis, mapped, show_labels)
    if show_sampling:
        _draw_rects(vis, grid.input_rects, show_labels=False)

    cv2.putText(vis, f"Tiles: {grid.tile_count}", (10, max(15, height - 25)),
               cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1)
    cv2.putText(vis, f"Image: {width}x{height}", (10, max(30, height - 8)),
               cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1)

    cv2.imwrite(output_path, vis)
    return output_path


def visualize_tile_grid(
    grid: TileGrid,
    output_path: str,
    background: Optional[int] = 255,
) -> str:
    """
    Visualize output tile rectangles on a blank canvas.

    Useful for debugging geometry without an actual image.

    Args:
        grid: Planned tile grid
        output_path: Path to save visualization
        background: Gray level of the blank canvas

    Returns:
        Path to saved visualization
    """
    canvas = grid.output_rect
    vis = np.full((canvas.height, canvas.width, 3), background, dtype=np.uint8)
    _draw_rects(vis, grid.output_rects, show_labels=True, thickness=2)

    cv2.imwrite(output_path, vis)
    return output_path
