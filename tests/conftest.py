"""Shared test fixtures."""
import os
import sys
from pathlib import Path

import pytest

# Headless SDL so pygame never opens a window or an audio device
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

# Ensure project root is on sys.path so the flat modules import
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pygame  # noqa: E402


@pytest.fixture(scope="session")
def font():
    pygame.font.init()
    return pygame.font.Font(None, 18)


@pytest.fixture(scope="session")
def fonts():
    from hmi_demo import load_fonts
    return load_fonts()


@pytest.fixture
def surface():
    return pygame.Surface((800, 480), 0, 32)


def mouse_down(x, y, button=1):
    return pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=button, pos=(x, y))


def mouse_up(x, y, button=1):
    return pygame.event.Event(pygame.MOUSEBUTTONUP, button=button, pos=(x, y))


def mouse_move(x, y):
    return pygame.event.Event(pygame.MOUSEMOTION, pos=(x, y), rel=(0, 0), buttons=(0, 0, 0))


def key_down(key):
    return pygame.event.Event(pygame.KEYDOWN, key=key, mod=0, unicode="", scancode=0)


def text_input(text):
    return pygame.event.Event(pygame.TEXTINPUT, text=text)
