"""
One Tap Shift

Features:
- Blocks of two colors fall towards the bottom edge of the window
- The player bar at the bottom is always one of those two colors
- Tap / click / SPACE to shift the bar's color before a block lands
- A block that lands on a matching bar is cleared; a mismatch ends the run
- Fall speed and spawn rate ramp up with survival time
- Survival time is the score; the best one is kept in a small JSON file

Run:
1) Install pygame if needed: pip install pygame
2) python ShiftGame.py            (or the one-tap-shift script once installed)

Controls: SPACE / click = shift color (or start), M = menu, ESC = quit.
"""

import argparse
import enum
import json
import logging
import math
import os
import random
from collections import namedtuple
from pathlib import Path

import pygame

logger = logging.getLogger(__name__)

# -----------------------------
# CONFIGURATION / CONSTANTS
# -----------------------------
WIDTH, HEIGHT = 480, 720  # window size
FPS = 60  # frames per second (simulation uses delta-time)
SMOKE_FRAMES = 30  # frames to run with --smoke before exiting

# Player bar geometry
PLAYER_WIDTH_RATIO = 0.78  # fraction of the viewport width
PLAYER_HEIGHT = 30
PLAYER_BOTTOM_MARGIN = 8

# Obstacle settings
OBSTACLE_MIN_SIZE = 28
OBSTACLE_MAX_SIZE = 72

# Difficulty ramp (seconds -> px/s and seconds between spawns)
FALL_SPEED_BASE = 180.0
FALL_SPEED_PER_SEC = 20.0
FALL_SPEED_MAX_BONUS = 460.0
SPAWN_INTERVAL_BASE = 0.95
SPAWN_INTERVAL_PER_SEC = 0.02
SPAWN_INTERVAL_MIN = 0.22

# Longest step the simulation will integrate at once (seconds)
MAX_FRAME_DELTA = 0.05

# High score persistence
STORAGE_KEY = "oneTapShiftHighScoreMs"
DATA_DIR_ENV = "ONE_TAP_SHIFT_DATA_DIR"
HIGH_SCORE_FILE = "highscore.json"

# Visuals
BACKGROUND = (11, 16, 32)
COLOR_A = (45, 212, 191)  # teal
COLOR_B = (255, 95, 143)  # pink
TEXT_COLOR = (244, 247, 255)
HINT_COLOR = (255, 209, 102)
WHITE = (255, 255, 255)
GRID_GAP = 40
HINT_TEXT = "Tap / Click / Space to shift color"


# -----------------------------
# HELPER FUNCTIONS
# -----------------------------

def rand_range(lo, hi, rng=random):
    """Uniform float in [lo, hi)."""
    return rng.random() * (hi - lo) + lo


def format_score(ms):
    """Milliseconds -> seconds with three decimals, e.g. 12345 -> '12.345s'."""
    return f"{ms / 1000:.3f}s"


def blend(base, over, alpha):
    """Color you get painting `over` at opacity `alpha` on top of `base`."""
    return tuple(int(round(b + (o - b) * alpha)) for b, o in zip(base, over))


def default_data_dir():
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override)
    return Path.home() / ".one_tap_shift"


# -----------------------------
# DIFFICULTY
# -----------------------------

Difficulty = namedtuple("Difficulty", ["fall_speed", "spawn_interval"])


def get_difficulty(elapsed_ms):
    """Map time survived to (fall speed px/s, spawn interval s).

    Fall speed ramps linearly and is capped; the spawn interval decays linearly
    and is floored. Both are recomputed every step since they change continuously.
    """
    seconds = elapsed_ms / 1000.0
    fall_speed = FALL_SPEED_BASE + min(FALL_SPEED_MAX_BONUS, seconds * FALL_SPEED_PER_SEC)
    spawn_interval = max(SPAWN_INTERVAL_MIN, SPAWN_INTERVAL_BASE - seconds * SPAWN_INTERVAL_PER_SEC)
    return Difficulty(fall_speed, spawn_interval)


# -----------------------------
# GAME OBJECTS
# -----------------------------

class ColorState(enum.Enum):
    """The two colors shared by the player bar and the falling blocks."""

    A = "A"
    B = "B"

    def toggled(self):
        return ColorState.B if self is ColorState.A else ColorState.A

    @property
    def rgb(self):
        return COLOR_A if self is ColorState.A else COLOR_B


class Player:
    """The color-shifting bar at the bottom of the screen."""

    def __init__(self, x, y, width, height, color_state=ColorState.A):
        self.x = float(x)
        self.y = float(y)
        self.width = width
        self.height = height
        self.color_state = color_state

    @classmethod
    def for_viewport(cls, width, height):
        """Centered bar spanning most of the viewport, sitting just above the bottom edge."""
        bar_w = width * PLAYER_WIDTH_RATIO
        return cls(width / 2 - bar_w / 2, height - PLAYER_HEIGHT - PLAYER_BOTTOM_MARGIN, bar_w, PLAYER_HEIGHT)

    def toggle(self):
        self.color_state = self.color_state.toggled()

    def draw(self, surf):
        fill = self.color_state.rgb
        rect = pygame.Rect(int(self.x), int(self.y), int(self.width), int(self.height))
        pygame.draw.rect(surf, fill, rect)
        pygame.draw.rect(surf, blend(fill, WHITE, 0.32), rect, 2)


class Obstacle:
    """A falling square block."""

    def __init__(self, x, y, size, color_state):
        self.x = float(x)
        self.y = float(y)
        self.size = size
        self.color_state = color_state

    def update(self, dt, speed):
        """Move down by speed (px/sec)."""
        self.y += speed * dt

    def reached(self, boundary_y):
        # "reached or passed", so a block that overshoots in one long step still counts
        return self.y + self.size >= boundary_y

    def draw(self, surf):
        fill = self.color_state.rgb
        rect = pygame.Rect(int(self.x), int(self.y), int(self.size), int(self.size))
        pygame.draw.rect(surf, fill, rect)
        pygame.draw.rect(surf, blend(fill, WHITE, 0.25), rect, 2)


# -----------------------------
# WORLD / SIMULATION
# -----------------------------

class World:
    """Player, falling blocks and timers for one session.

    `viewport` is anything with get_size() -> (width, height), normally the
    surface the game is drawn on. It is read on every reset and every step so
    the play field always matches what is on screen.
    """

    def __init__(self, viewport, rng=None):
        self.viewport = viewport
        self.rng = rng if rng is not None else random.Random()
        self.reset()

    @property
    def width(self):
        return self.viewport.get_size()[0]

    @property
    def height(self):
        return self.viewport.get_size()[1]

    def reset(self):
        """Fresh player and an empty field. Timers go back to zero."""
        self.player = Player.for_viewport(self.width, self.height)
        self.obstacles = []
        self.elapsed_ms = 0
        self.spawn_timer = 0.0
        self.start_time_ms = 0

    def spawn_obstacle(self):
        """Drop a new block just above the top edge, fully inside the field horizontally."""
        size = rand_range(OBSTACLE_MIN_SIZE, OBSTACLE_MAX_SIZE, self.rng)
        x = rand_range(0, self.width - size, self.rng)
        color = ColorState.A if self.rng.random() < 0.5 else ColorState.B
        obstacle = Obstacle(x, -size, size, color)
        self.obstacles.append(obstacle)
        logger.debug("spawned %s block size=%.1f at x=%.1f", color.value, size, x)
        return obstacle

    def step(self, delta_seconds, now_ms):
        """Advance the simulation by one frame.

        Returns True when a block landed on a bar of the other color, i.e. the
        run is over. Scanning stops at the first mismatch.
        """
        self.elapsed_ms = now_ms - self.start_time_ms
        difficulty = get_difficulty(self.elapsed_ms)

        # spawn as many blocks as the accumulated time pays for
        self.spawn_timer += delta_seconds
        while self.spawn_timer >= difficulty.spawn_interval:
            self.spawn_timer -= difficulty.spawn_interval
            self.spawn_obstacle()

        for obstacle in self.obstacles:
            obstacle.update(delta_seconds, difficulty.fall_speed)

        # reverse scan so removing a cleared block never skips its neighbour
        boundary_y = self.height
        for i in range(len(self.obstacles) - 1, -1, -1):
            obstacle = self.obstacles[i]
            if not obstacle.reached(boundary_y):
                continue
            if obstacle.color_state is not self.player.color_state:
                return True
            del self.obstacles[i]
        return False


# -----------------------------
# HIGH SCORE PERSISTENCE
# -----------------------------

class MemoryStore:
    """Key-value store that lives only as long as the process."""

    def __init__(self, data=None):
        self.data = dict(data or {})

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value


class JsonFileStore:
    """Key-value store backed by a small JSON object on disk."""

    def __init__(self, path):
        self.path = Path(path)

    def _read(self):
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Could not read %s (%s); starting from an empty store.", self.path, exc)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring %s: expected a JSON object.", self.path)
            return {}
        return raw

    def get(self, key):
        return self._read().get(key)

    def set(self, key, value):
        data = self._read()
        data[key] = value
        tmp = self.path.with_name(f"{self.path.name}.{os.getpid()}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
            tmp.replace(self.path)
        except OSError as exc:
            logger.warning("Could not save %s (%s).", self.path, exc)
            tmp.unlink(missing_ok=True)


class HighScoreStore:
    """Best survival time (ms) kept under a single key of a key-value store."""

    def __init__(self, store, key=STORAGE_KEY):
        self.store = store
        self.key = key

    def load(self):
        """Return the stored high score, 0 if missing or unusable."""
        raw = self.store.get(self.key)
        if raw is None:
            return 0
        try:
            value = float(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric high score %r.", raw)
            return 0
        if not math.isfinite(value) or value < 0:
            return 0
        return int(value) if value.is_integer() else value

    def save(self, ms):
        """Overwrite the stored value. Callers decide whether it is an improvement."""
        self.store.set(self.key, str(ms))


# -----------------------------
# RENDERING / PRESENTATION
# -----------------------------

class Renderer:
    """Draws the world onto a surface. Reads the world, never changes it."""

    def __init__(self, surface):
        self.surface = surface
        self.font = pygame.font.SysFont(None, 34, bold=True)
        self.small_font = pygame.font.SysFont(None, 20)
        self.grid_color = blend(BACKGROUND, WHITE, 0.06)

    def draw_background(self):
        """Flat background with faint vertical lines for motion reference."""
        self.surface.fill(BACKGROUND)
        width, height = self.surface.get_size()
        for x in range(0, width + 1, GRID_GAP):
            pygame.draw.line(self.surface, self.grid_color, (x, 0), (x, height))

    def draw_hud(self, world, state):
        score = self.font.render(f"Score: {format_score(world.elapsed_ms)}", True, TEXT_COLOR)
        self.surface.blit(score, (14, 12))
        if state is GameState.PLAYING:
            hint = self.small_font.render(HINT_TEXT, True, HINT_COLOR)
            self.surface.blit(hint, (14, 44))

    def render(self, world, state):
        self.draw_background()
        for obstacle in world.obstacles:
            obstacle.draw(self.surface)
        world.player.draw(self.surface)
        self.draw_hud(world, state)


class OverlayPresenter:
    """Menu and game-over screens drawn over the last rendered frame.

    The session only tells it what to show; the window loop calls draw() every
    frame and asks button_at() where a click landed.
    """

    BUTTON_W, BUTTON_H = 180, 48

    def __init__(self, width, height):
        self.width = width
        self.height = height
        self.screen = None  # None while playing, else "menu" / "game_over"
        self.final_text = ""
        self.high_text = ""
        self.buttons = {}
        self.title_font = pygame.font.SysFont(None, 56, bold=True)
        self.font = pygame.font.SysFont(None, 30)

    def _button(self, action, center_y):
        rect = pygame.Rect(0, 0, self.BUTTON_W, self.BUTTON_H)
        rect.center = (self.width // 2, center_y)
        self.buttons[action] = rect

    def show_menu(self):
        self.screen = "menu"
        self.buttons = {}
        self._button("start", self.height // 2 + 40)

    def show_game_over(self, final_text, high_text):
        self.screen = "game_over"
        self.final_text = final_text
        self.high_text = high_text
        self.buttons = {}
        self._button("start", self.height // 2 + 70)
        self._button("menu", self.height // 2 + 130)

    def show_playing(self):
        self.screen = None
        self.buttons = {}

    def button_at(self, pos):
        """Which action (if any) sits under a click."""
        for action, rect in self.buttons.items():
            if rect.collidepoint(pos):
                return action
        return None

    def _text(self, surf, text, font, center, color=TEXT_COLOR):
        rendered = font.render(text, True, color)
        surf.blit(rendered, rendered.get_rect(center=center))

    def draw(self, surf):
        if self.screen is None:
            return
        overlay = pygame.Surface((self.width, self.height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 170))
        surf.blit(overlay, (0, 0))

        cx, cy = self.width // 2, self.height // 2
        if self.screen == "menu":
            self._text(surf, "One Tap Shift", self.title_font, (cx, cy - 80))
            self._text(surf, "Match the bar to the falling blocks", self.font, (cx, cy - 30), HINT_COLOR)
        else:
            self._text(surf, "Game Over", self.title_font, (cx, cy - 90))
            self._text(surf, self.final_text, self.font, (cx, cy - 30))
            self._text(surf, self.high_text, self.font, (cx, cy + 5), HINT_COLOR)

        labels = {"start": "Start" if self.screen == "menu" else "Restart", "menu": "Menu"}
        for action, rect in self.buttons.items():
            pygame.draw.rect(surf, COLOR_A, rect, border_radius=8)
            pygame.draw.rect(surf, WHITE, rect, 2, border_radius=8)
            self._text(surf, labels[action], self.font, rect.center, BACKGROUND)


# -----------------------------
# SESSION STATE MACHINE
# -----------------------------

class GameState(enum.Enum):
    MENU = "menu"
    PLAYING = "playing"
    GAME_OVER = "game_over"


class FrameClock:
    """requestAnimationFrame-style scheduler.

    Callbacks registered with request() are delivered once, on the next tick().
    A callback that wants another frame has to ask again, so a loop stops as
    soon as its owner stops re-arming it or cancels the pending handle.
    """

    def __init__(self):
        self._pending = {}
        self._next_handle = 1

    def request(self, callback):
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel(self, handle):
        self._pending.pop(handle, None)

    @property
    def pending(self):
        return len(self._pending)

    def tick(self, now_ms):
        # swap first: callbacks requested during delivery belong to the next tick
        due, self._pending = self._pending, {}
        for callback in due.values():
            callback(now_ms)


class Session:
    """Menu / playing / game-over state machine around a World.

    Only PLAYING drives the simulation. Leaving PLAYING always cancels the
    pending frame so no orphaned loop keeps touching the world.
    """

    def __init__(self, world, high_scores, presenter, frame_clock, time_source, renderer=None):
        self.world = world
        self.high_scores = high_scores
        self.presenter = presenter
        self.frame_clock = frame_clock
        self.time_source = time_source
        self.renderer = renderer
        self.state = GameState.MENU
        self.high_score_ms = high_scores.load()
        self.final_score_ms = 0
        self.frame_handle = None
        self.last_frame_ms = 0

    # -----------------------------
    # TRANSITIONS
    # -----------------------------
    def _cancel_frame(self):
        if self.frame_handle is not None:
            self.frame_clock.cancel(self.frame_handle)
            self.frame_handle = None

    def render(self):
        if self.renderer is not None:
            self.renderer.render(self.world, self.state)

    def show_menu(self):
        """Back to the title screen with a freshly reset (idle) world."""
        self.state = GameState.MENU
        self._cancel_frame()
        self.world.reset()
        self.presenter.show_menu()
        self.render()

    def start_game(self):
        self._cancel_frame()
        self.state = GameState.PLAYING
        self.world.reset()
        self.presenter.show_playing()

        now = self.time_source()
        self.world.start_time_ms = now
        self.last_frame_ms = now
        self.frame_handle = self.frame_clock.request(self._on_frame)
        logger.info("Session started (high score %s).", format_score(self.high_score_ms))

    def end_game(self):
        self.state = GameState.GAME_OVER
        self._cancel_frame()

        self.final_score_ms = self.world.elapsed_ms
        logger.info("Game over after %s.", format_score(self.final_score_ms))
        if self.final_score_ms > self.high_score_ms:
            self.high_score_ms = self.final_score_ms
            self.high_scores.save(self.high_score_ms)
            logger.info("New high score: %s.", format_score(self.high_score_ms))

        self.presenter.show_game_over(
            f"Final Score: {format_score(self.final_score_ms)}",
            f"High Score: {format_score(self.high_score_ms)}",
        )

    # -----------------------------
    # FRAME LOOP
    # -----------------------------
    def _on_frame(self, now_ms):
        self.frame_handle = None
        if self.state is not GameState.PLAYING:
            return

        # a stall (window drag, breakpoint) integrates as at most one short step
        dt = min(MAX_FRAME_DELTA, max(0.0, (now_ms - self.last_frame_ms) / 1000.0))
        self.last_frame_ms = now_ms

        if self.world.step(dt, now_ms):
            self.end_game()
        self.render()

        if self.state is GameState.PLAYING:
            self.frame_handle = self.frame_clock.request(self._on_frame)

    # -----------------------------
    # INPUT INTENTS
    # -----------------------------
    def toggle_color(self):
        if self.state is GameState.PLAYING:
            self.world.player.toggle()

    def on_start_request(self):
        if self.state in (GameState.MENU, GameState.GAME_OVER):
            self.start_game()

    def on_menu_request(self):
        if self.state in (GameState.PLAYING, GameState.GAME_OVER):
            self.show_menu()

    def on_pointer_down(self):
        self.toggle_color()

    def on_key_down(self, key):
        """Keyboard intents; anything not valid in the current state is dropped."""
        if key == pygame.K_SPACE:
            if self.state is GameState.PLAYING:
                self.toggle_color()
            else:
                self.on_start_request()
        elif key == pygame.K_r:
            self.on_start_request()
        elif key == pygame.K_m:
            self.on_menu_request()


# -----------------------------
# MAIN GAME CLASS
# -----------------------------

class Game:
    """Owns the pygame window and wires input, frame clock and drawing to a Session."""

    def __init__(self, width=WIDTH, height=HEIGHT, store=None, seed=None):
        # initialize pygame and create the window
        pygame.init()
        self.screen = pygame.display.set_mode((width, height))
        pygame.display.set_caption("One Tap Shift")
        self.clock = pygame.time.Clock()

        # the world is drawn here; overlays go on the screen on top of it
        self.frame = pygame.Surface((width, height))

        if store is None:
            store = JsonFileStore(default_data_dir() / HIGH_SCORE_FILE)
        self.frame_clock = FrameClock()
        self.world = World(self.frame, rng=random.Random(seed))
        self.presenter = OverlayPresenter(width, height)
        self.session = Session(
            self.world,
            HighScoreStore(store),
            self.presenter,
            self.frame_clock,
            pygame.time.get_ticks,
            renderer=Renderer(self.frame),
        )
        self.running = False

    def handle_input(self):
        """Process events from pygame's queue and translate them into session intents."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                else:
                    self.session.on_key_down(event.key)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                action = self.presenter.button_at(event.pos)
                if action == "start":
                    self.session.on_start_request()
                elif action == "menu":
                    self.session.on_menu_request()
                else:
                    self.session.on_pointer_down()

    def draw(self):
        self.screen.blit(self.frame, (0, 0))
        self.presenter.draw(self.screen)
        pygame.display.flip()

    def run(self, smoke=False):
        """Main loop. With smoke=True a session starts at once and the loop exits after a few frames."""
        self.session.show_menu()
        if smoke:
            self.session.start_game()

        self.running = True
        frames = 0
        while self.running:
            self.clock.tick(FPS)
            self.handle_input()
            self.frame_clock.tick(pygame.time.get_ticks())
            self.draw()

            frames += 1
            if smoke and frames >= SMOKE_FRAMES:
                self.running = False
        pygame.quit()


# -----------------------------
# ENTRY POINT
# -----------------------------

def positive_int(text):
    """argparse type for window dimensions."""
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{text!r} is not an integer")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"{value} must be greater than 0")
    return value


def main(argv=None):
    parser = argparse.ArgumentParser(prog="one-tap-shift", description="One Tap Shift arcade game")
    parser.add_argument("--smoke", action="store_true", help="Run briefly and exit (for quick verification).")
    parser.add_argument("--seed", type=int, default=None, help="Seed for block spawning.")
    parser.add_argument("--width", type=positive_int, default=WIDTH)
    parser.add_argument("--height", type=positive_int, default=HEIGHT)
    parser.add_argument("--scores", type=Path, default=None, help="High score JSON file.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.smoke:
        store = MemoryStore()
    elif args.scores is not None:
        store = JsonFileStore(args.scores)
    else:
        store = None
    Game(args.width, args.height, store=store, seed=args.seed).run(smoke=args.smoke)


if __name__ == "__main__":
    main()
