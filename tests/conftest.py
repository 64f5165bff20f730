import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pygame
import pytest

from adsb_view.config import DEFAULT_CONFIG
from adsb_view.geo import Center, Position, ScreenPoint


@pytest.fixture(scope="session", autouse=True)
def pygame_session():
    pygame.display.init()
    pygame.font.init()
    yield
    pygame.quit()


@pytest.fixture
def fonts():
    return pygame.font.Font(None, 16), pygame.font.Font(None, 14)


@pytest.fixture
def config():
    return DEFAULT_CONFIG.copy()


@pytest.fixture
def equator_center():
    return Center(Position(0.0, 0.0), ScreenPoint(400, 400), 1.0)
