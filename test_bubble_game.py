"""Tests for the game state machine, scoring and win/loss flow."""

import math
import random

import pytest

from bubble_entity import Bubble, BubbleRole
from bubble_game import BubbleShooterGame, GameOutcome, GamePhase
from bubble_geometry import (
    BUBBLE_COLORS, CANNON_X, CANNON_Y, FALL_SCORE, POP_SCORE, crosses_loss_line,
)

RED, GREEN, BLUE = BUBBLE_COLORS[0], BUBBLE_COLORS[1], BUBBLE_COLORS[2]
STRAIGHT_UP = -math.pi / 2


class RecordingAudio:
    def __init__(self):
        self.cues = []

    def play_cue(self, cue_id):
        self.cues.append(cue_id)


class RecordingSurface:
    def __init__(self):
        self.calls = []

    def clear(self):
        self.calls.append(("clear",))

    def draw_circle(self, x, y, radius, fill_color, stroke_color=None, opacity=1.0):
        self.calls.append(("circle", x, y, radius, fill_color, stroke_color, opacity))

    def draw_rect(self, x, y, w, h, fill_color, rotation=0.0, origin=None):
        self.calls.append(("rect", x, y, w, h, fill_color, rotation, origin))

    def draw_line(self, x1, y1, x2, y2, color, width=1, opacity=1.0):
        self.calls.append(("line", x1, y1, x2, y2))

    def of_kind(self, kind):
        return [call for call in self.calls if call[0] == kind]


class GameRecorder:
    def __init__(self):
        self.scores = []
        self.endings = []

    def on_score_change(self, score):
        self.scores.append(score)

    def on_game_end(self, outcome, score):
        self.endings.append((outcome, score))


def make_game(cells=None, color=None, seed=0):
    recorder = GameRecorder()
    audio = RecordingAudio()
    game = BubbleShooterGame(
        rng=random.Random(seed),
        audio=audio,
        on_score_change=recorder.on_score_change,
        on_game_end=recorder.on_game_end,
        populate=cells is None,
    )
    for (row, col), cell_color in (cells or {}).items():
        game.grid.add(Bubble(0, 0, cell_color), row, col)
    if color is not None:
        game.choose_color = lambda: color
    return game, recorder, audio


def run_until_settled(game, max_ticks=500):
    for _ in range(max_ticks):
        game.tick()
        if game.phase != GamePhase.FLYING:
            return
    raise AssertionError("bubble never settled")


def launch(game, x, y, vx, vy, color):
    """Put a bubble in flight at an arbitrary point."""
    bubble = Bubble(x, y, color)
    bubble.velocity_x, bubble.velocity_y = vx, vy
    game.flying_bubble = bubble
    game.phase = GamePhase.FLYING
    return bubble


def column_chain(last_row, color=BLUE):
    return {(row, 0): color for row in range(last_row + 1)}


def test_new_game_state():
    game, recorder, _ = make_game()
    assert len(game.grid) == 48
    assert game.phase == GamePhase.AIMING
    assert game.outcome == GameOutcome.NONE
    assert game.score == 0
    assert game.flying_bubble is None
    assert recorder.scores == [0]


def test_straight_up_on_empty_grid_settles_at_ceiling():
    game, recorder, audio = make_game(cells={})
    assert game.shoot(STRAIGHT_UP)
    assert game.phase == GamePhase.FLYING
    assert game.flying_bubble.color in BUBBLE_COLORS

    run_until_settled(game)
    assert game.phase == GamePhase.AIMING
    assert game.flying_bubble is None
    assert [b.grid_pos[0] for b in game.grid] == [0]
    assert game.score == 0
    assert game.transients == []
    assert audio.cues == ["shoot"]


def test_third_bubble_pops_pair():
    game, recorder, audio = make_game(cells={(0, 4): RED, (0, 5): RED, (0, 9): BLUE}, color=RED)
    game.shoot(STRAIGHT_UP)
    run_until_settled(game)

    assert [b.grid_pos for b in game.grid] == [(0, 9)]
    assert game.score == 3 * POP_SCORE
    assert recorder.scores[-1] == 3 * POP_SCORE
    popping = [b for b in game.transients if b.role == BubbleRole.POPPING]
    assert len(popping) == 3
    assert audio.cues == ["shoot", "pop"]
    assert game.phase == GamePhase.AIMING


def test_pair_does_not_pop():
    game, recorder, audio = make_game(cells={(0, 4): RED, (0, 9): BLUE}, color=RED)
    game.shoot(STRAIGHT_UP)
    run_until_settled(game)

    assert len(game.grid) == 3
    assert game.grid.bubble_at(1, 4).color == RED
    assert game.score == 0
    assert recorder.scores == [0]
    assert "pop" not in audio.cues


def test_pop_drops_hanging_bubbles_and_scores_both():
    game, recorder, _ = make_game(cells={
        (0, 4): RED, (0, 5): RED,
        (1, 3): GREEN, (2, 3): GREEN,
        (0, 9): BLUE,
    }, color=RED)
    game.shoot(STRAIGHT_UP)
    run_until_settled(game)

    assert game.score == 3 * POP_SCORE + 2 * FALL_SCORE
    assert recorder.scores == [0, 3 * POP_SCORE, 3 * POP_SCORE + 2 * FALL_SCORE]
    falling = [b for b in game.transients if b.role == BubbleRole.FALLING]
    assert {b.color for b in falling} == {GREEN}
    assert [b.grid_pos for b in game.grid] == [(0, 9)]


def test_transients_are_dropped_when_done():
    game, _, _ = make_game(cells={
        (0, 4): RED, (0, 5): RED,
        (1, 3): GREEN,
        (0, 9): BLUE,
    }, color=RED)
    game.shoot(STRAIGHT_UP)
    run_until_settled(game)
    assert len(game.transients) == 4

    for _ in range(10):
        game.tick()
    assert all(b.role == BubbleRole.FALLING for b in game.transients)

    for _ in range(200):
        game.tick()
    assert game.transients == []


def test_clearing_the_grid_wins():
    game, recorder, _ = make_game(cells={(0, 4): RED, (0, 5): RED})
    game.shoot(STRAIGHT_UP)
    run_until_settled(game)

    assert game.grid.is_empty()
    assert game.phase == GamePhase.GAME_OVER
    assert game.outcome == GameOutcome.WON
    assert recorder.endings == [(GameOutcome.WON, 3 * POP_SCORE)]


def test_empty_grid_without_flying_bubble_is_a_win():
    game, recorder, _ = make_game(cells={})
    assert game.check_game_over() == GameOutcome.WON
    assert recorder.endings == [(GameOutcome.WON, 0)]


def test_settling_past_loss_line_loses():
    game, recorder, _ = make_game(cells=column_chain(13))
    launch(game, 30, 505, 0, -1, GREEN)
    run_until_settled(game)

    assert game.grid.bubble_at(14, 0).color == GREEN
    assert game.phase == GamePhase.GAME_OVER
    assert game.outcome == GameOutcome.LOST
    assert recorder.endings == [(GameOutcome.LOST, 0)]


def test_row_above_loss_line_is_safe():
    game, recorder, _ = make_game(cells=column_chain(13))
    assert not crosses_loss_line(game.grid.bubble_at(13, 0).y)
    assert game.check_game_over() == GameOutcome.NONE
    assert game.phase == GamePhase.AIMING
    assert recorder.endings == []


def test_game_over_is_terminal():
    game, recorder, _ = make_game(cells=column_chain(13))
    launch(game, 30, 505, 0, -1, GREEN)
    run_until_settled(game)
    grid_before = [b.grid_pos for b in game.grid]

    for _ in range(20):
        game.tick()
    assert not game.shoot(STRAIGHT_UP)
    assert not game.aim_at((CANNON_X, 100))
    assert [b.grid_pos for b in game.grid] == grid_before
    assert len(recorder.endings) == 1


def test_aim_follows_points_above_the_cannon():
    game, _, _ = make_game(cells={(0, 0): RED})
    assert game.aim_at((CANNON_X, 100))
    assert game.aim_angle == pytest.approx(STRAIGHT_UP)
    assert game.aim_at({"x": CANNON_X + 100, "y": CANNON_Y - 100})
    assert game.aim_angle == pytest.approx(-math.pi / 4)


@pytest.mark.parametrize("point", [
    None,
    (CANNON_X + 50, CANNON_Y + 10),
    (CANNON_X + 50, CANNON_Y),
    {"x": 10},
    "junk",
    (float("nan"), 10),
])
def test_invalid_aim_is_ignored(point):
    game, _, _ = make_game(cells={(0, 0): RED})
    game.aim_at((CANNON_X - 100, CANNON_Y - 100))
    before = game.aim_angle
    assert not game.aim_at(point)
    assert game.aim_angle == before


def test_downward_shots_are_ignored():
    game, _, audio = make_game(cells={(0, 0): RED})
    assert not game.shoot(math.pi / 4)
    assert not game.shoot(0)
    assert not game.set_aim_angle(math.pi / 2)
    assert game.phase == GamePhase.AIMING
    assert game.flying_bubble is None
    assert audio.cues == []


def test_only_one_bubble_in_flight():
    game, _, _ = make_game(cells={(0, 0): RED})
    assert game.shoot(STRAIGHT_UP)
    first = game.flying_bubble
    assert not game.shoot(STRAIGHT_UP)
    assert not game.aim_at((10, 10))
    assert game.flying_bubble is first
    assert game.aim_angle == STRAIGHT_UP


def test_activate_aims_then_shoots():
    game, _, _ = make_game(cells={(0, 0): RED})
    assert game.activate((100, 100))
    expected = math.atan2(100 - CANNON_Y, 100 - CANNON_X)
    assert game.aim_angle == pytest.approx(expected)
    assert game.flying_bubble.velocity_x == pytest.approx(math.cos(expected) * 10)


def test_projectile_colours_come_from_the_grid():
    game, _, _ = make_game(cells={(0, 0): RED, (0, 1): BLUE})
    colors = {game.choose_color() for _ in range(50)}
    assert colors <= {RED, BLUE}


def test_render_draws_grid_cannon_and_aim_line():
    game, _, _ = make_game()
    surface = RecordingSurface()
    game.render(surface)

    assert surface.calls[0] == ("clear",)
    assert len(surface.of_kind("circle")) == 48
    rect = surface.of_kind("rect")[0]
    assert rect[6] == pytest.approx(0.0)
    assert rect[7] == (CANNON_X, CANNON_Y)
    assert len(surface.of_kind("line")) == 1

    game.shoot(STRAIGHT_UP)
    surface = RecordingSurface()
    game.render(surface)
    assert len(surface.of_kind("circle")) == 49
    assert surface.of_kind("line") == []


def test_render_fades_popping_bubbles():
    game, _, _ = make_game(cells={(0, 4): RED, (0, 5): RED, (0, 9): BLUE}, color=RED)
    game.shoot(STRAIGHT_UP)
    run_until_settled(game)
    game.tick()

    surface = RecordingSurface()
    game.render(surface)
    faded = [call for call in surface.of_kind("circle") if call[6] < 1.0]
    assert len(faded) == 3
    assert all(call[6] == pytest.approx(0.9) for call in faded)


def test_reset_starts_over():
    game, recorder, _ = make_game(cells={(0, 4): RED, (0, 5): RED})
    game.shoot(STRAIGHT_UP)
    run_until_settled(game)
    assert game.is_over

    game.populate = True
    game.reset()
    assert game.phase == GamePhase.AIMING
    assert game.outcome == GameOutcome.NONE
    assert game.score == 0
    assert len(game.grid) == 48
    assert recorder.scores[-1] == 0
