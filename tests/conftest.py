import types

import pytest

from klondike.cards import RANK_TO_TEXT, SUITS, Card
from klondike.piles import FOUNDATION_COUNT, TABLEAU_COUNT
from klondike.state import GameState

_SUIT_BY_SYMBOL = {s: i for i, s in enumerate(SUITS)}
_RANK_BY_TEXT = {t: r for r, t in RANK_TO_TEXT.items()}


def parse_card(text: str) -> Card:
    """'7♦' is face-up, '7♦↓' face-down."""
    face_up = not text.endswith("↓")
    text = text.rstrip("↓↑")
    return Card(_SUIT_BY_SYMBOL[text[-1]], _RANK_BY_TEXT[text[:-1]], face_up)


def parse_pile(texts):
    return tuple(parse_card(t) for t in texts)


def build_table(tableau=(), foundations=(), waste=(), stock=(), stock_cycles=None) -> GameState:
    tableau = [parse_pile(p) for p in tableau]
    tableau += [()] * (TABLEAU_COUNT - len(tableau))
    foundations = [parse_pile(p) for p in foundations]
    foundations += [()] * (FOUNDATION_COUNT - len(foundations))
    return GameState(
        stock=parse_pile(stock),
        waste=parse_pile(waste),
        foundations=tuple(foundations),
        tableau=tuple(tableau),
        stock_cycles=stock_cycles,
    )


@pytest.fixture
def card():
    return parse_card


@pytest.fixture
def table():
    return build_table


@pytest.fixture
def headless_pygame(monkeypatch, tmp_path):
    """pygame with dummy video/audio drivers and fonts, settings kept in tmp_path."""
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    monkeypatch.setenv("SDL_AUDIODRIVER", "dummy")

    import pygame
    from klondike import common as C

    class DummyFont:
        def __init__(self, size):
            self._size = max(1, int(size) if size else 1)

        def render(self, text, *_, **__):
            width = max(1, len(str(text)) * max(self._size // 2, 1))
            height = max(1, self._size)
            return pygame.Surface((width, height), pygame.SRCALPHA)

        def size(self, text):
            width = max(1, len(str(text)) * max(self._size // 2, 1))
            return width, max(1, self._size)

        def get_height(self):
            return max(1, self._size)

    def _make_font(size):
        return DummyFont(size or 24)

    monkeypatch.setattr(
        pygame.font,
        "SysFont",
        lambda *args, size=None, **kwargs: _make_font(size if size is not None else (args[1] if len(args) > 1 else None)),
        raising=False,
    )
    monkeypatch.setattr(pygame.font, "get_default_font", lambda: "dummy", raising=False)
    monkeypatch.setattr(pygame.display, "Info", lambda: types.SimpleNamespace(current_w=1600, current_h=900))
    monkeypatch.setattr(pygame.display, "set_mode", lambda size, flags=0: pygame.Surface(size))
    monkeypatch.setattr(pygame.display, "flip", lambda: None)
    monkeypatch.setattr(pygame.display, "set_caption", lambda _title: None)

    monkeypatch.setattr(C, "_settings_dir", lambda: str(tmp_path))
    monkeypatch.setattr(C, "_CURRENT_SETTINGS", dict(C._DEFAULT_SETTINGS))
    monkeypatch.setattr(C, "SCREEN_W", 1280)
    monkeypatch.setattr(C, "SCREEN_H", 800)
    monkeypatch.setattr(C, "CARD_W", C.CARD_W)
    monkeypatch.setattr(C, "CARD_H", C.CARD_H)
    monkeypatch.setattr(C, "BACK_COLOR", C.BACK_COLOR)
    return pygame
