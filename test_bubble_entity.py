"""Tests for the Bubble entity."""

import pytest

from bubble_entity import Bubble, BubbleRole
from bubble_geometry import BUBBLE_COLORS, CANVAS_HEIGHT, FALL_SPEED, POP_FRAMES, grid_to_screen

RED = BUBBLE_COLORS[0]


def test_advance_applies_velocity_once():
    bubble = Bubble(100, 300, RED)
    bubble.velocity_x, bubble.velocity_y = 3, -10
    bubble.advance()
    assert (bubble.x, bubble.y) == (103, 290)


def test_collision_needs_slight_overlap():
    a = Bubble(100, 100, RED)
    assert a.is_colliding_with(Bubble(137, 100, RED))
    assert not a.is_colliding_with(Bubble(138, 100, RED))


def test_packed_neighbours_touch():
    a = Bubble(*grid_to_screen(0, 0), RED)
    below = Bubble(*grid_to_screen(1, 0), RED)
    two_over = Bubble(*grid_to_screen(0, 2), RED)
    assert a.is_touching(below)
    assert not a.is_touching(two_over)
    assert a.neighbors_in([a, below, two_over]) == [below]


def test_pop_countdown():
    bubble = Bubble(50, 50, RED, BubbleRole.GRID)
    bubble.start_pop()
    assert bubble.role == BubbleRole.POPPING
    assert bubble.pop_frames == POP_FRAMES
    assert bubble.pop_scale == 1.0

    for _ in range(POP_FRAMES - 1):
        assert bubble.advance_pop()
    assert bubble.pop_scale == pytest.approx(0.1)
    assert bubble.pop_opacity == pytest.approx(0.1)
    assert not bubble.advance_pop()
    assert bubble.pop_scale == 0


def test_start_falling_leaves_grid():
    bubble = Bubble(50, 50, RED, BubbleRole.GRID)
    bubble.row, bubble.col = 0, 1
    bubble.start_falling()
    assert bubble.role == BubbleRole.FALLING
    assert bubble.velocity_y == FALL_SPEED
    assert bubble.grid_pos is None
    assert not bubble.is_out_of_bounds()

    bubble.y = CANVAS_HEIGHT + bubble.radius + 1
    assert bubble.is_out_of_bounds()
