"""
Collision & placement for the flying bubble.

Per tick the flying bubble is advanced, reflected off the side walls and
then tested for a settle against the reflected position. Reflection always
runs first, so a bubble that bounces and touches the grid in the same tick
settles from inside the canvas and never straddles a wall.
"""

import math
from typing import List, Optional, Tuple

from bubble_entity import Bubble
from bubble_geometry import CANVAS_HEIGHT, SHOOT_SPEED, HexCell, reflect_off_walls
from bubble_grid import BubbleGrid


def advance_with_walls(bubble: Bubble) -> bool:
    """Advance one tick and bounce off the side walls. Returns did_bounce."""
    bubble.advance()
    bubble.x, bubble.velocity_x, did_bounce = reflect_off_walls(
        bubble.x, bubble.velocity_x, bubble.radius
    )
    return did_bounce


def collides_with_grid(bubble: Bubble, grid: BubbleGrid) -> bool:
    for grid_bubble in grid:
        if bubble.is_colliding_with(grid_bubble):
            return True
    return False


def has_settled(bubble: Bubble, grid: BubbleGrid) -> bool:
    """Ceiling contact or contact with any grid bubble."""
    return bubble.y - bubble.radius < 0 or collides_with_grid(bubble, grid)


def step_flying_bubble(bubble: Bubble, grid: BubbleGrid) -> bool:
    """
    Run one simulation tick for the flying bubble.

    Returns:
        True when the bubble should settle this tick
    """
    advance_with_walls(bubble)
    return has_settled(bubble, grid)


def settle_bubble(bubble: Bubble, grid: BubbleGrid) -> HexCell:
    """
    Snap a flying bubble onto the nearest free cell and insert it.

    Raises:
        ValueError: if the grid has no free cell left
    """
    cell = grid.nearest_free_cell(bubble.x, bubble.y)
    if cell is None:
        raise ValueError("No free cell left in the grid")
    grid.add(bubble, cell.row, cell.col)
    return cell


def predict_landing(grid: BubbleGrid, shooter_x: float, shooter_y: float, angle: float,
                    max_steps: int = 1000) -> Tuple[Optional[HexCell], List[Tuple[float, float]], List[Tuple[float, float]]]:
    """
    Simulate a shot with the real tick rules without touching the grid.

    Args:
        grid: Current grid (read only)
        shooter_x, shooter_y: Where the bubble leaves the cannon
        angle: Shot angle in radians
        max_steps: Maximum simulation ticks

    Returns:
        Tuple of (landing_cell, path_points, bounce_points)
        landing_cell is None if the shot never settles
    """
    probe = Bubble(shooter_x, shooter_y, None)
    probe.velocity_x = math.cos(angle) * SHOOT_SPEED
    probe.velocity_y = math.sin(angle) * SHOOT_SPEED
    path_points = [(probe.x, probe.y)]
    bounce_points = []

    for _ in range(max_steps):
        if advance_with_walls(probe):
            bounce_points.append((probe.x, probe.y))
        path_points.append((probe.x, probe.y))
        if has_settled(probe, grid):
            return grid.nearest_free_cell(probe.x, probe.y), path_points, bounce_points
        if probe.y - probe.radius > CANVAS_HEIGHT:
            break

    return None, path_points, bounce_points
