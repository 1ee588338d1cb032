"""Tests for flying-bubble collision and placement."""

import math

from bubble_entity import Bubble, BubbleRole
from bubble_geometry import BUBBLE_COLORS, BUBBLE_RADIUS, CANVAS_WIDTH, grid_to_screen
from bubble_grid import BubbleGrid
from bubble_physics import predict_landing, settle_bubble, step_flying_bubble

RED, GREEN = BUBBLE_COLORS[0], BUBBLE_COLORS[1]


def flying(x, y, vx, vy, color=RED):
    bubble = Bubble(x, y, color)
    bubble.velocity_x, bubble.velocity_y = vx, vy
    return bubble


def test_wall_bounce_without_settle():
    bubble = flying(25, 300, -10, -1)
    assert not step_flying_bubble(bubble, BubbleGrid())
    assert bubble.velocity_x == 10
    assert BUBBLE_RADIUS <= bubble.x <= CANVAS_WIDTH - BUBBLE_RADIUS


def test_bounce_and_settle_in_same_tick():
    """Reflection runs first, so the settled bubble is fully inside the canvas."""
    grid = BubbleGrid()
    grid.add(Bubble(0, 0, GREEN), 2, 0)
    bubble = flying(25, 130, -10, -10)

    assert step_flying_bubble(bubble, grid)
    assert bubble.x == BUBBLE_RADIUS
    assert bubble.velocity_x == 10

    cell = settle_bubble(bubble, grid)
    assert (cell.row, cell.col) == (3, 0)
    assert bubble.role == BubbleRole.GRID
    assert bubble in grid
    assert BUBBLE_RADIUS <= bubble.x <= CANVAS_WIDTH - BUBBLE_RADIUS


def test_straight_up_reaches_ceiling_on_empty_grid():
    grid = BubbleGrid()
    bubble = flying(200, 560, 0, -10)
    ticks = 0
    while not step_flying_bubble(bubble, grid):
        ticks += 1
        assert ticks < 100
    assert bubble.y - bubble.radius < 0

    cell = settle_bubble(bubble, grid)
    assert cell.row == 0
    assert (bubble.x, bubble.y) == grid_to_screen(cell.row, cell.col)


def test_settle_never_overwrites_a_cell():
    grid = BubbleGrid()
    occupant = grid.add(Bubble(0, 0, GREEN), 0, 5)
    bubble = flying(225, 30, 0, 0)
    cell = settle_bubble(bubble, grid)
    assert (cell.row, cell.col) != (0, 5)
    assert grid.bubble_at(0, 5) is occupant
    assert len(grid) == 2


def test_predict_landing_leaves_grid_untouched():
    grid = BubbleGrid()
    cell, path_points, bounce_points = predict_landing(grid, 200, 560, -math.pi / 2)
    assert (cell.row, cell.col) == (0, 5)
    assert len(path_points) > 1
    assert bounce_points == []
    assert grid.is_empty()


def test_predict_landing_with_bounce():
    cell, _, bounce_points = predict_landing(BubbleGrid(), 200, 560, -math.pi / 2 + 0.6)
    assert bounce_points
    assert cell is not None and cell.row == 0


def test_predict_landing_downward_shot_never_lands():
    cell, _, _ = predict_landing(BubbleGrid(), 200, 560, math.pi / 2)
    assert cell is None
