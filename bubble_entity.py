from enum import Enum
from typing import Iterable, List, Optional, Tuple

from bubble_geometry import (
    BUBBLE_RADIUS, CANVAS_HEIGHT, FALL_SPEED, OVERLAP_TOLERANCE, POP_FRAMES,
    distance,
)


class BubbleRole(Enum):
    """Which part of the game currently owns a bubble."""
    FLYING = "flying"
    GRID = "grid"
    FALLING = "falling"
    POPPING = "popping"


class Bubble:
    def __init__(self, x: float, y: float, color: Tuple[int, int, int],
                 role: BubbleRole = BubbleRole.FLYING):
        self.x = x
        self.y = y
        self.color = color
        self.radius = BUBBLE_RADIUS
        self.role = role
        self.velocity_x = 0.0
        self.velocity_y = 0.0
        self.pop_frames = 0  # Countdown while popping, 0 otherwise
        self.row: Optional[int] = None
        self.col: Optional[int] = None

    def __repr__(self):
        return f"Bubble({self.x:.1f}, {self.y:.1f}, {self.color}, {self.role.value})"

    @property
    def grid_pos(self) -> Optional[Tuple[int, int]]:
        if self.row is None or self.col is None:
            return None
        return self.row, self.col

    def advance(self):
        """Move by one tick of velocity."""
        self.x += self.velocity_x
        self.y += self.velocity_y

    def is_colliding_with(self, other: "Bubble") -> bool:
        # Slight overlap required before contact registers
        return distance(self, other) < self.radius + other.radius - OVERLAP_TOLERANCE

    def is_touching(self, other: "Bubble") -> bool:
        """Grid adjacency: packed neighbours sit exactly one diameter apart."""
        return distance(self, other) < self.radius + other.radius + OVERLAP_TOLERANCE

    def neighbors_in(self, grid_bubbles: Iterable["Bubble"]) -> List["Bubble"]:
        """All grid bubbles touching this one, excluding itself."""
        return [b for b in grid_bubbles if b is not self and self.is_touching(b)]

    # ------------------------------------------------------------------
    # Pop animation
    # ------------------------------------------------------------------

    def start_pop(self):
        self.role = BubbleRole.POPPING
        self.pop_frames = POP_FRAMES
        self.row = None
        self.col = None

    @property
    def pop_scale(self) -> float:
        if self.role != BubbleRole.POPPING:
            return 1.0
        return self.pop_frames / POP_FRAMES

    @property
    def pop_opacity(self) -> float:
        return self.pop_scale

    def advance_pop(self) -> bool:
        """
        Step the pop animation one frame.

        Returns:
            False once the bubble has shrunk away and can be dropped
        """
        if self.pop_frames > 0:
            self.pop_frames -= 1
        return self.pop_frames > 0

    # ------------------------------------------------------------------
    # Falling
    # ------------------------------------------------------------------

    def start_falling(self):
        self.role = BubbleRole.FALLING
        self.velocity_x = 0.0
        self.velocity_y = FALL_SPEED
        self.row = None
        self.col = None

    def is_out_of_bounds(self) -> bool:
        return self.y - self.radius > CANVAS_HEIGHT
