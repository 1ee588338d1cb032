"""
Shared Bubble Geometry Module

This module provides the geometry, physics helpers and constants shared by
the simulation core, the pygame front-end and the tests. Everything here is
a pure function or a constant, so any part of the game can import it
without pulling in state.

Shared Components:
- Canvas, bubble and cannon constants
- Hex grid snapping (logical pixel -> cell -> snapped pixel)
- Grid to screen coordinate mapping
- Wall reflection physics
- Aim angle helpers
- Loss line check
"""

import math
from typing import List, NamedTuple, Tuple

# ============================================================================
# SHARED CONSTANTS
# ============================================================================

# Logical canvas dimensions (input is delivered already mapped to this space)
CANVAS_WIDTH = 400
CANVAS_HEIGHT = 600

# Bubble size
BUBBLE_RADIUS = 20
BUBBLE_DIAMETER = BUBBLE_RADIUS * 2
ROW_HEIGHT = BUBBLE_DIAMETER * math.sqrt(3) / 2  # Hex vertical spacing

# Grid dimensions
GRID_COLS = 10  # Even rows; odd rows hold one less
INITIAL_GRID_ROWS = 5
GRID_ROWS = int((CANVAS_HEIGHT - BUBBLE_DIAMETER) // ROW_HEIGHT) + 1

# Color constants (RGB tuples)
BUBBLE_COLORS = [
    (255, 0, 0),    # 0 - Red
    (0, 255, 0),    # 1 - Green
    (0, 0, 255),    # 2 - Blue
    (255, 255, 0),  # 3 - Yellow
    (128, 0, 128),  # 4 - Purple
]
COLOR_NAMES = ["red", "green", "blue", "yellow", "purple"]
BUBBLE_STROKE_COLOR = (85, 85, 85)

# Cannon (bottom centre of the canvas)
CANNON_WIDTH = 60
CANNON_HEIGHT = 40
CANNON_X = CANVAS_WIDTH / 2
CANNON_Y = CANVAS_HEIGHT - CANNON_HEIGHT / 2
CANNON_COLOR = (128, 128, 128)
AIM_LINE_LENGTH = 150

# Game mechanics
SHOOT_SPEED = 10  # Pixels per tick
OVERLAP_TOLERANCE = 2
MATCH_THRESHOLD = 3
POP_SCORE = 10
FALL_SCORE = 5
POP_FRAMES = 10
FALL_SPEED = 5
CEILING_ANCHOR_Y = BUBBLE_RADIUS * 2  # Roughly the top row
LOSS_LINE_Y = CANVAS_HEIGHT - CANNON_HEIGHT - BUBBLE_DIAMETER


class HexCell(NamedTuple):
    """Snapped cell centre plus its (row, col) address."""
    x: float
    y: float
    row: int
    col: int


# ============================================================================
# BASIC MATH
# ============================================================================

def to_radians(angle: float) -> float:
    """Convert degrees to radians."""
    return angle * (math.pi / 180)


def _coords(point) -> Tuple[float, float]:
    if hasattr(point, "x") and hasattr(point, "y"):
        return point.x, point.y
    return point[0], point[1]


def distance(p1, p2) -> float:
    """
    Euclidean distance between two points.

    Args:
        p1, p2: (x, y) tuples or any objects with x/y attributes

    Returns:
        Distance in logical pixels
    """
    x1, y1 = _coords(p1)
    x2, y2 = _coords(p2)
    dx = x2 - x1
    dy = y2 - y1
    return math.sqrt(dx * dx + dy * dy)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ============================================================================
# HEX GRID MAPPING
# ============================================================================

def grid_to_screen(row: int, col: int) -> Tuple[float, float]:
    """
    Convert grid coordinates to the cell centre in logical pixels.

    Odd rows are shifted right by one radius to create the honeycomb.
    """
    row_offset = BUBBLE_RADIUS if row % 2 == 1 else 0
    x = BUBBLE_RADIUS + col * BUBBLE_DIAMETER + row_offset
    y = BUBBLE_RADIUS + row * ROW_HEIGHT
    return x, y


def snap_to_hex_grid(x: float, y: float) -> HexCell:
    """
    Snap logical coordinates to the nearest hex cell.

    Rounding is half-up so the result never depends on banker's rounding,
    and snapping an already snapped centre returns the same cell.

    Args:
        x, y: Logical coordinates

    Returns:
        HexCell with the exact cell centre and its (row, col)
    """
    row = _round_half_up((y - BUBBLE_RADIUS) / ROW_HEIGHT)
    row_offset = BUBBLE_RADIUS if row % 2 == 1 else 0
    col = _round_half_up((x - BUBBLE_RADIUS - row_offset) / BUBBLE_DIAMETER)
    snapped_x, snapped_y = grid_to_screen(row, col)
    return HexCell(snapped_x, snapped_y, row, col)


def cols_in_row(row: int) -> int:
    """Number of cells in a row (odd rows are one short)."""
    return GRID_COLS - (1 if row % 2 == 1 else 0)


def is_cell_in_bounds(row: int, col: int) -> bool:
    return 0 <= row < GRID_ROWS and 0 <= col < cols_in_row(row)


def get_adjacent_positions(row: int, col: int) -> List[Tuple[int, int]]:
    """
    Get adjacent positions in honeycomb pattern.

    Args:
        row, col: Grid position

    Returns:
        List of the six adjacent (row, col) positions (may be out of bounds)
    """
    if row % 2 == 0:  # Even row
        return [(row-1, col), (row+1, col), (row, col-1), (row, col+1), (row-1, col-1), (row+1, col-1)]
    else:  # Odd row
        return [(row-1, col), (row+1, col), (row, col-1), (row, col+1), (row-1, col+1), (row+1, col+1)]


# ============================================================================
# WALL REFLECTION
# ============================================================================

def reflect_off_walls(x: float, velocity_x: float, radius: float = BUBBLE_RADIUS) -> Tuple[float, float, bool]:
    """
    Reflect horizontal motion off the side walls.

    Args:
        x: Current bubble centre x
        velocity_x: Current horizontal velocity
        radius: Bubble radius

    Returns:
        Tuple of (new_x, new_vx, did_bounce); new_x is clamped to
        [radius, CANVAS_WIDTH - radius] so the bubble cannot stick in a wall
    """
    if x - radius < 0:
        return radius, -velocity_x, True
    if x + radius > CANVAS_WIDTH:
        return CANVAS_WIDTH - radius, -velocity_x, True
    return x, velocity_x, False


# ============================================================================
# AIMING
# ============================================================================

def calculate_angle_to_target(shooter_x: float, shooter_y: float,
                              target_x: float, target_y: float) -> float:
    """Angle in radians from shooter to target (screen y grows downward)."""
    return math.atan2(target_y - shooter_y, target_x - shooter_x)


def is_upward_angle(angle: float) -> bool:
    """True when the angle points strictly above the horizontal."""
    return math.sin(angle) < 0


# ============================================================================
# COLOR ENCODING
# ============================================================================

def rgb_to_color_index(rgb_color: Tuple[int, int, int]) -> int:
    """
    Convert RGB color tuple to its palette index.

    Returns:
        Color index or -1 if not in the palette
    """
    try:
        return BUBBLE_COLORS.index(rgb_color)
    except ValueError:
        return -1


def color_name(rgb_color: Tuple[int, int, int]) -> str:
    idx = rgb_to_color_index(rgb_color)
    return COLOR_NAMES[idx] if idx >= 0 else str(rgb_color)


# ============================================================================
# LOSE CONDITION
# ============================================================================

def crosses_loss_line(y: float, radius: float = BUBBLE_RADIUS) -> bool:
    """
    Check if a bubble centred at y reaches below the loss line.

    A lower edge exactly on the line does not count.
    """
    return y + radius > LOSS_LINE_Y
