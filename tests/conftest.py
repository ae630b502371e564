import os

# headless pygame; must be set before pygame is imported
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame  # noqa: E402
import pytest  # noqa: E402


@pytest.fixture(autouse=True)
def _pygame():
    pygame.init()
    yield


class RecordingPresenter:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def show_menu(self) -> None:
        self.calls.append(("menu",))

    def show_game_over(self, final_text: str, high_text: str) -> None:
        self.calls.append(("game_over", final_text, high_text))

    def show_playing(self) -> None:
        self.calls.append(("playing",))


class FakeTime:
    def __init__(self, now: int = 0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def presenter() -> RecordingPresenter:
    return RecordingPresenter()


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime(1000)
