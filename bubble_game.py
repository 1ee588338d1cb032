"""
Bubble shooter game state machine.

Owns everything that changes during a game: the grid, the single flying
bubble slot, the transient popping/falling bubbles, the score and the
phase. The host calls aim_at/activate from input, tick() once per frame
and render() with a drawing surface; nothing here knows about pygame.

Phases:
- AIMING: no flying bubble, aim follows the pointer
- FLYING: one bubble in flight, aim frozen
- RESOLVING: settle, pop and gravity passes (never spans a tick)
- GAME_OVER: terminal, tick() does nothing

Render surface interface (duck typed):
    clear()
    draw_circle(x, y, radius, fill_color, stroke_color=None, opacity=1.0)
    draw_rect(x, y, w, h, fill_color, rotation=0.0, origin=None)
    draw_line(x1, y1, x2, y2, color, width=1, opacity=1.0)

Audio interface: play_cue(cue_id) with cue ids "shoot" and "pop".
"""

import math
import random
from enum import Enum
from typing import Callable, List, Optional, Tuple

from bubble_entity import Bubble, BubbleRole
from bubble_geometry import (
    AIM_LINE_LENGTH, BUBBLE_COLORS, BUBBLE_STROKE_COLOR, CANNON_COLOR,
    CANNON_HEIGHT, CANNON_WIDTH, CANNON_X, CANNON_Y, FALL_SCORE, POP_SCORE,
    SHOOT_SPEED, calculate_angle_to_target, color_name, crosses_loss_line,
    is_upward_angle,
)
from bubble_grid import BubbleGrid, populate_initial_rows
from bubble_physics import settle_bubble, step_flying_bubble
from bubble_resolver import resolve_floating, resolve_matches

# Debug constants
DEBUG_GAME = False  # Console logs for shots, settles, pops and game end

SHOOT_CUE = "shoot"
POP_CUE = "pop"


class GamePhase(Enum):
    AIMING = "aiming"
    FLYING = "flying"
    RESOLVING = "resolving"
    GAME_OVER = "game_over"


class GameOutcome(Enum):
    NONE = "none"
    WON = "won"
    LOST = "lost"


def _point_coords(point) -> Optional[Tuple[float, float]]:
    """Pull (x, y) out of a tuple, dict or object; None if malformed."""
    if point is None:
        return None
    if isinstance(point, dict):
        x, y = point.get("x"), point.get("y")
    elif hasattr(point, "x") and hasattr(point, "y"):
        x, y = point.x, point.y
    elif isinstance(point, (tuple, list)) and len(point) >= 2:
        x, y = point[0], point[1]
    else:
        return None
    if not isinstance(x, (int, float)) or not isinstance(y, (int, float)):
        return None
    if math.isnan(x) or math.isnan(y):
        return None
    return float(x), float(y)


class BubbleShooterGame:
    def __init__(self, rng: random.Random = None, audio=None,
                 on_score_change: Callable[[int], None] = None,
                 on_game_end: Callable[[GameOutcome, int], None] = None,
                 populate: bool = True, debug: bool = DEBUG_GAME):
        self.rng = rng or random.Random()
        self.audio = audio
        self.on_score_change = on_score_change
        self.on_game_end = on_game_end
        self.populate = populate
        self.debug = debug
        self.reset()

    def reset(self):
        self.grid = BubbleGrid()
        if self.populate:
            populate_initial_rows(self.grid, self.rng)
        self.score = 0
        self.aim_angle = -math.pi / 2  # Straight up
        self.flying_bubble: Optional[Bubble] = None
        self.transients: List[Bubble] = []  # Popping and falling bubbles
        self.phase = GamePhase.AIMING
        self.outcome = GameOutcome.NONE
        self.shots_fired = 0
        if self.on_score_change:
            self.on_score_change(self.score)

    @property
    def is_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def aim_at(self, point) -> bool:
        """Point the cannon at a logical-space point. Returns False if ignored."""
        if self.phase != GamePhase.AIMING:
            return False
        coords = _point_coords(point)
        if coords is None:
            return False
        # Only aim upwards
        if coords[1] >= CANNON_Y:
            return False
        self.aim_angle = calculate_angle_to_target(CANNON_X, CANNON_Y, *coords)
        return True

    def set_aim_angle(self, angle: float) -> bool:
        if self.phase != GamePhase.AIMING or not is_upward_angle(angle):
            return False
        self.aim_angle = angle
        return True

    def activate(self, point=None) -> bool:
        """Pointer activate: re-aim at the point if one is given, then shoot."""
        if point is not None:
            self.aim_at(point)
        return self.shoot()

    def choose_color(self) -> Tuple[int, int, int]:
        """Uniform over colours still in the grid, or the full palette when empty."""
        available = sorted(self.grid.colors_present())
        if available:
            return self.rng.choice(available)
        return self.rng.choice(BUBBLE_COLORS)

    def shoot(self, angle: float = None) -> bool:
        """
        Fire a bubble from the cannon.

        Args:
            angle: Shot angle in radians; defaults to the current aim

        Returns:
            True if a bubble was fired, False if the request was ignored
        """
        if self.phase != GamePhase.AIMING or self.flying_bubble is not None:
            return False
        if angle is None:
            angle = self.aim_angle
        if not is_upward_angle(angle):
            return False

        self.aim_angle = angle
        mouth_x = CANNON_X + math.cos(angle) * (CANNON_HEIGHT / 2)
        mouth_y = CANNON_Y + math.sin(angle) * (CANNON_HEIGHT / 2)
        bubble = Bubble(mouth_x, mouth_y, self.choose_color(), BubbleRole.FLYING)
        bubble.velocity_x = math.cos(angle) * SHOOT_SPEED
        bubble.velocity_y = math.sin(angle) * SHOOT_SPEED
        self.flying_bubble = bubble
        self.phase = GamePhase.FLYING
        self.shots_fired += 1
        self._play(SHOOT_CUE)

        if self.debug:
            print(f"Shot {self.shots_fired}: {color_name(bubble.color)} at {math.degrees(angle):.1f}°")
        return True

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def tick(self):
        """Advance the simulation by one frame."""
        if self.phase == GamePhase.GAME_OVER:
            return

        self._update_transients()

        if self.flying_bubble is not None:
            if step_flying_bubble(self.flying_bubble, self.grid):
                self._resolve()

    def _update_transients(self):
        still_active = []
        for bubble in self.transients:
            if bubble.role == BubbleRole.POPPING:
                if bubble.advance_pop():
                    still_active.append(bubble)
            elif bubble.role == BubbleRole.FALLING:
                bubble.advance()
                if not bubble.is_out_of_bounds():
                    still_active.append(bubble)
        self.transients = still_active

    def _resolve(self):
        self.phase = GamePhase.RESOLVING
        bubble = self.flying_bubble
        cell = settle_bubble(bubble, self.grid)
        self.flying_bubble = None

        if self.debug:
            print(f"Settled {color_name(bubble.color)} at row={cell.row}, col={cell.col}")

        popped = resolve_matches(bubble, self.grid)
        if popped:
            self.transients.extend(popped)
            self._add_score(len(popped) * POP_SCORE)
            self._play(POP_CUE)
            if self.debug:
                print(f"Popped {len(popped)} bubbles (+{len(popped) * POP_SCORE})")

        fallen = resolve_floating(self.grid)
        if fallen:
            self.transients.extend(fallen)
            self._add_score(len(fallen) * FALL_SCORE)
            if self.debug:
                print(f"Dropped {len(fallen)} floating bubbles (+{len(fallen) * FALL_SCORE})")

        self.check_game_over()

    def check_game_over(self) -> GameOutcome:
        """Loss first, then win; otherwise hand control back to aiming."""
        if self.phase == GamePhase.GAME_OVER:
            return self.outcome
        if any(crosses_loss_line(b.y, b.radius) for b in self.grid):
            self._end(GameOutcome.LOST)
        elif self.grid.is_empty() and self.flying_bubble is None:
            self._end(GameOutcome.WON)
        elif self.flying_bubble is None:
            self.phase = GamePhase.AIMING
        return self.outcome

    def _end(self, outcome: GameOutcome):
        self.phase = GamePhase.GAME_OVER
        self.outcome = outcome
        if self.debug:
            print(f"Game over: {outcome.value}, score {self.score}")
        if self.on_game_end:
            self.on_game_end(outcome, self.score)

    def _add_score(self, points: int):
        self.score += points
        if self.on_score_change:
            self.on_score_change(self.score)

    def _play(self, cue_id: str):
        if self.audio is not None:
            self.audio.play_cue(cue_id)

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def render(self, surface):
        surface.clear()

        for bubble in self.grid:
            surface.draw_circle(bubble.x, bubble.y, bubble.radius, bubble.color, BUBBLE_STROKE_COLOR, 1.0)

        for bubble in self.transients:
            if bubble.role == BubbleRole.POPPING:
                surface.draw_circle(bubble.x, bubble.y, bubble.radius * bubble.pop_scale,
                                    bubble.color, None, bubble.pop_opacity)
            else:
                surface.draw_circle(bubble.x, bubble.y, bubble.radius, bubble.color, BUBBLE_STROKE_COLOR, 1.0)

        if self.flying_bubble is not None:
            b = self.flying_bubble
            surface.draw_circle(b.x, b.y, b.radius, b.color, BUBBLE_STROKE_COLOR, 1.0)

        # Cannon rotated about its centre so it faces the aim direction
        surface.draw_rect(CANNON_X - CANNON_WIDTH / 2, CANNON_Y - CANNON_HEIGHT / 2,
                          CANNON_WIDTH, CANNON_HEIGHT, CANNON_COLOR,
                          rotation=self.aim_angle + math.pi / 2, origin=(CANNON_X, CANNON_Y))

        if self.phase == GamePhase.AIMING:
            end_x = CANNON_X + math.cos(self.aim_angle) * AIM_LINE_LENGTH
            end_y = CANNON_Y + math.sin(self.aim_angle) * AIM_LINE_LENGTH
            surface.draw_line(CANNON_X, CANNON_Y, end_x, end_y, (255, 255, 255), 2, 0.5)
