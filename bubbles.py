import argparse
import math
import os
import random
import sys
from typing import Optional, Tuple

import pygame

from bubble_game import DEBUG_GAME, POP_CUE, SHOOT_CUE, BubbleShooterGame, GameOutcome
from bubble_geometry import (
    BUBBLE_RADIUS, CANNON_HEIGHT, CANNON_X, CANNON_Y, CANVAS_HEIGHT, CANVAS_WIDTH,
    LOSS_LINE_Y, grid_to_screen,
)
from bubble_physics import predict_landing

# Pygame front-end for the bubble shooter.
#
# The simulation lives in bubble_game; this module only adapts pygame to the
# render surface / audio / input interfaces the game expects:
# - PygameSurface draws circles, rotated rects and lines in logical space
# - PygameAudio plays the shoot/pop cues from assets/sounds
# - BubbleShooterApp maps window pixels to the 400x600 logical canvas
#
# DEBUG FEATURES:
# - Press 'D' key to toggle debug mode on/off
# - Console output shows shots, settle cells, pops and drops
# - Yellow dots show the predicted path of the next shot
# - Red circle shows the predicted landing cell

BACKGROUND_COLOR = (20, 24, 40)
LOSING_LINE_COLOR = (255, 255, 255)
HUD_COLOR = (255, 255, 255)
DEBUG_PATH_COLOR = (255, 215, 0)
DEBUG_TARGET_COLOR = (255, 80, 80)
SOUND_FILES = {
    SHOOT_CUE: "shoot.wav",
    POP_CUE: "pop.wav",
}


class PygameSurface:
    """Render surface backed by a pygame display, scaled from logical space."""

    def __init__(self, screen: pygame.Surface, scale: float = 1.0):
        self.screen = screen
        self.scale = scale

    def _p(self, value: float) -> int:
        return int(round(value * self.scale))

    def clear(self):
        self.screen.fill(BACKGROUND_COLOR)

    def draw_circle(self, x, y, radius, fill_color, stroke_color=None, opacity=1.0):
        r = self._p(radius)
        if r <= 0 or opacity <= 0:
            return
        if opacity >= 1.0:
            pygame.draw.circle(self.screen, fill_color, (self._p(x), self._p(y)), r)
            if stroke_color is not None:
                pygame.draw.circle(self.screen, stroke_color, (self._p(x), self._p(y)), r, 2)
            return
        # Translucent shapes go through their own SRCALPHA surface
        surf = pygame.Surface((r * 2, r * 2), pygame.SRCALPHA)
        alpha = int(255 * opacity)
        pygame.draw.circle(surf, (*fill_color, alpha), (r, r), r)
        if stroke_color is not None:
            pygame.draw.circle(surf, (*stroke_color, alpha), (r, r), r, 2)
        self.screen.blit(surf, (self._p(x) - r, self._p(y) - r))

    def draw_rect(self, x, y, w, h, fill_color, rotation=0.0, origin=None):
        surf = pygame.Surface((self._p(w), self._p(h)), pygame.SRCALPHA)
        surf.fill(fill_color)
        cx, cy = x + w / 2, y + h / 2
        if origin is not None and rotation:
            ox, oy = origin
            dx, dy = cx - ox, cy - oy
            cos_r, sin_r = math.cos(rotation), math.sin(rotation)
            cx = ox + dx * cos_r - dy * sin_r
            cy = oy + dx * sin_r + dy * cos_r
        # pygame rotates counter-clockwise, screen y grows downward
        rotated = pygame.transform.rotate(surf, -math.degrees(rotation))
        self.screen.blit(rotated, rotated.get_rect(center=(self._p(cx), self._p(cy))))

    def draw_line(self, x1, y1, x2, y2, color, width=1, opacity=1.0):
        if opacity >= 1.0:
            pygame.draw.line(self.screen, color, (self._p(x1), self._p(y1)), (self._p(x2), self._p(y2)), width)
            return
        overlay = pygame.Surface(self.screen.get_size(), pygame.SRCALPHA)
        pygame.draw.line(overlay, (*color, int(255 * opacity)),
                         (self._p(x1), self._p(y1)), (self._p(x2), self._p(y2)), width)
        self.screen.blit(overlay, (0, 0))


class PygameAudio:
    """Plays cues from assets/sounds; missing files just stay silent."""

    def __init__(self, sounds_dir: str = os.path.join("assets", "sounds"), enabled: bool = True):
        self.sounds = {}
        if not enabled:
            return
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init()
        except Exception as e:
            print(f"Warning: Could not initialise audio mixer: {e}")
            return
        for cue_id, filename in SOUND_FILES.items():
            sound_path = os.path.join(sounds_dir, filename)
            try:
                self.sounds[cue_id] = pygame.mixer.Sound(sound_path)
            except Exception as e:
                print(f"Warning: Could not load {cue_id} sound {sound_path}: {e}")

    def play_cue(self, cue_id: str):
        sound = self.sounds.get(cue_id)
        if sound:
            # Restart from the beginning if it is still playing
            sound.stop()
            sound.play()


class BubbleShooterApp:
    def __init__(self, seed: Optional[int] = None, fps: int = 60, scale: float = 1.0,
                 debug: bool = DEBUG_GAME, sound: bool = True):
        self.scale = scale
        self.fps = fps
        self.screen = pygame.display.set_mode((int(CANVAS_WIDTH * scale), int(CANVAS_HEIGHT * scale)))
        pygame.display.set_caption("Bubble Shooter")
        self.clock = pygame.time.Clock()
        self.surface = PygameSurface(self.screen, scale)
        self.audio = PygameAudio(enabled=sound)
        self.font = pygame.font.Font(None, int(32 * scale))
        self.score_text = "Score: 0"
        self.final_result: Optional[Tuple[GameOutcome, int]] = None
        self.game = BubbleShooterGame(
            rng=random.Random(seed),
            audio=self.audio,
            on_score_change=self._on_score_change,
            on_game_end=self._on_game_end,
            debug=debug,
        )

    def _on_score_change(self, score: int):
        self.score_text = f"Score: {score}"

    def _on_game_end(self, outcome: GameOutcome, score: int):
        self.final_result = (outcome, score)

    def to_logical(self, pos) -> Tuple[float, float]:
        return pos[0] / self.scale, pos[1] / self.scale

    def handle_events(self) -> bool:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            elif event.type == pygame.MOUSEMOTION:
                self.game.aim_at(self.to_logical(event.pos))
            elif event.type == pygame.MOUSEBUTTONDOWN:
                # Fire on left button down only
                if getattr(event, 'button', 1) == 1:
                    self.game.activate(self.to_logical(event.pos))
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_d:  # Press 'D' to toggle debug mode
                    self.game.debug = not self.game.debug
                    print(f"Debug mode {'enabled' if self.game.debug else 'disabled'}")
                elif event.key == pygame.K_ESCAPE:
                    return False
        return True

    def draw_debug_overlay(self):
        mouth_x = CANNON_X + math.cos(self.game.aim_angle) * (CANNON_HEIGHT / 2)
        mouth_y = CANNON_Y + math.sin(self.game.aim_angle) * (CANNON_HEIGHT / 2)
        cell, path_points, _ = predict_landing(self.game.grid, mouth_x, mouth_y, self.game.aim_angle)
        for x, y in path_points[::4]:
            self.surface.draw_circle(x, y, 2, DEBUG_PATH_COLOR)
        if cell is not None:
            x, y = grid_to_screen(cell.row, cell.col)
            pygame.draw.circle(self.screen, DEBUG_TARGET_COLOR,
                               (int(x * self.scale), int(y * self.scale)), int(BUBBLE_RADIUS * self.scale), 2)

    def draw(self):
        self.game.render(self.surface)

        # Losing threshold line
        self.surface.draw_line(0, LOSS_LINE_Y, CANVAS_WIDTH, LOSS_LINE_Y, LOSING_LINE_COLOR, 1, 0.4)

        if self.game.debug and not self.game.is_over and self.game.flying_bubble is None:
            self.draw_debug_overlay()

        text = self.font.render(self.score_text, True, HUD_COLOR)
        self.screen.blit(text, (int(10 * self.scale), self.screen.get_height() - text.get_height() - int(8 * self.scale)))

        pygame.display.flip()

    def show_game_over_screen(self) -> str:
        width, height = self.screen.get_size()
        font = pygame.font.Font(None, int(60 * self.scale))
        score_font = pygame.font.Font(None, int(40 * self.scale))
        button_font = pygame.font.Font(None, int(34 * self.scale))

        outcome, score = self.final_result or (self.game.outcome, self.game.score)
        if outcome == GameOutcome.WON:
            title, color = "You Win!", (0, 200, 0)
        else:
            title, color = "Game Over!", (255, 80, 80)

        # Dark overlay background
        overlay = pygame.Surface((width, height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 180))
        self.screen.blit(overlay, (0, 0))

        text = font.render(title, True, color)
        self.screen.blit(text, text.get_rect(center=(width // 2, height // 2 - int(90 * self.scale))))
        score_text = score_font.render(f"Your Score: {score}", True, (255, 255, 255))
        self.screen.blit(score_text, score_text.get_rect(center=(width // 2, height // 2 - int(30 * self.scale))))

        button_w, button_h = int(140 * self.scale), int(50 * self.scale)
        restart_rect = pygame.Rect(width // 2 - button_w - int(10 * self.scale), height // 2 + int(30 * self.scale), button_w, button_h)
        quit_rect = pygame.Rect(width // 2 + int(10 * self.scale), height // 2 + int(30 * self.scale), button_w, button_h)

        while True:
            mouse_pos = pygame.mouse.get_pos()
            for rect, label in [(restart_rect, "Restart"), (quit_rect, "Quit")]:
                if rect.collidepoint(mouse_pos):
                    pygame.draw.rect(self.screen, (255, 255, 255), rect, border_radius=12)
                    text_surf = button_font.render(label, True, (0, 0, 0))
                else:
                    pygame.draw.rect(self.screen, (50, 50, 50), rect, border_radius=12)
                    text_surf = button_font.render(label, True, (255, 255, 255))
                pygame.draw.rect(self.screen, (200, 200, 200), rect, 3, border_radius=12)
                self.screen.blit(text_surf, text_surf.get_rect(center=rect.center))

            pygame.display.update()

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    return "quit"
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        return "quit"
                    if event.key == pygame.K_r:
                        return "restart"
                elif event.type == pygame.MOUSEBUTTONDOWN and getattr(event, 'button', 1) == 1:
                    if restart_rect.collidepoint(event.pos):
                        return "restart"
                    elif quit_rect.collidepoint(event.pos):
                        return "quit"
            self.clock.tick(30)

    def run(self):
        running = True
        while running:
            running = self.handle_events()
            self.game.tick()
            self.draw()
            self.clock.tick(self.fps)
            # Ticking stops here once the game is over; the modal takes over
            if self.game.is_over:
                choice = self.show_game_over_screen()
                if choice == "restart":
                    self.final_result = None
                    self.game.reset()
                else:
                    running = False


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Bubble shooter")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for colours")
    parser.add_argument("--fps", type=int, default=60)
    parser.add_argument("--scale", type=float, default=1.0, help="Window scale of the 400x600 canvas")
    parser.add_argument("--debug", action="store_true", help="Start with debug logging and overlay on")
    parser.add_argument("--no-sound", action="store_true")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    pygame.init()
    app = BubbleShooterApp(seed=args.seed, fps=args.fps, scale=args.scale,
                           debug=args.debug, sound=not args.no_sound)
    app.run()
    pygame.quit()


if __name__ == "__main__":
    main()
    sys.exit(0)
