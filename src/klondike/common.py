
# common.py - settings, drawing and pile views shared by the Klondike table
import os
import json
import logging
import pygame
from typing import Optional

from klondike.cards import SUITS, RANK_TO_TEXT, is_red

logger = logging.getLogger(__name__)

# --- Settings ---

_DEFAULT_SETTINGS = {
    "card_size": "Medium",   # Small | Medium | Large
    "back_color": "Blue",    # Blue | Grey | Red
    "stock_cycles": None,    # None (unlimited) | 1 | 2 | 3
}

STOCK_CYCLE_CHOICES = (None, 1, 2, 3)

_CURRENT_SETTINGS = dict(_DEFAULT_SETTINGS)

def _settings_dir() -> str:
    # Prefer %APPDATA% on Windows, else ~/.klondike_solitaire
    base = os.environ.get("APPDATA")
    if base:
        return os.path.join(base, "KlondikeSolitaire")
    return os.path.join(os.path.expanduser("~"), ".klondike_solitaire")

def _settings_path() -> str:
    return os.path.join(_settings_dir(), "settings.json")

def _clean_stock_cycles(value):
    if value is None:
        return None
    try:
        value = int(value)
    except (TypeError, ValueError):
        return _DEFAULT_SETTINGS["stock_cycles"]
    return value if value in STOCK_CYCLE_CHOICES else _DEFAULT_SETTINGS["stock_cycles"]

def get_current_settings():
    return dict(_CURRENT_SETTINGS)

def load_settings():
    global _CURRENT_SETTINGS
    try:
        with open(_settings_path(), "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return get_current_settings()
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", _settings_path(), exc)
        return get_current_settings()
    if isinstance(data, dict):
        _CURRENT_SETTINGS.update({
            "card_size": str(data.get("card_size", _CURRENT_SETTINGS["card_size"])).capitalize(),
            "back_color": str(data.get("back_color", _CURRENT_SETTINGS["back_color"])).capitalize(),
            "stock_cycles": _clean_stock_cycles(data.get("stock_cycles", _CURRENT_SETTINGS["stock_cycles"])),
        })
    return get_current_settings()

def save_settings(new_values: dict):
    # Merge and write to disk
    global _CURRENT_SETTINGS
    _CURRENT_SETTINGS.update({
        k: new_values[k] for k in ("card_size", "back_color") if k in new_values
    })
    if "stock_cycles" in new_values:
        _CURRENT_SETTINGS["stock_cycles"] = _clean_stock_cycles(new_values["stock_cycles"])
    try:
        os.makedirs(_settings_dir(), exist_ok=True)
        with open(_settings_path(), "w", encoding="utf-8") as f:
            json.dump(_CURRENT_SETTINGS, f, indent=2)
    except OSError as exc:
        logger.warning("Could not save settings to %s: %s", _settings_path(), exc)
        return False
    return True

def _size_to_dims(size_name: str):
    size_name = (size_name or "Medium").capitalize()
    if size_name == "Small":
        return 75, 105
    if size_name == "Large":
        return 150, 210
    return 100, 140

def invalidate_card_caches():
    global _card_face_cache, _card_back_cache
    _card_face_cache = {}
    _card_back_cache = None

def apply_card_settings(size_name: str = None, back_color: str = None):
    # Update globals for gameplay rendering
    global BACK_COLOR, CARD_W, CARD_H
    if size_name is not None:
        CARD_W, CARD_H = _size_to_dims(size_name)
    if back_color is not None:
        BACK_COLOR = back_color
    invalidate_card_caches()


# ---------- Configuration ----------
SCREEN_W, SCREEN_H = 1280, 800
GREEN_TABLE = (2, 100, 40)
TABLE_BG = GREEN_TABLE

CARD_W, CARD_H = _size_to_dims(_DEFAULT_SETTINGS["card_size"])
BACK_COLOR = _DEFAULT_SETTINGS["back_color"]
CARD_RADIUS = 10
CARD_GAP_X = 18
CARD_GAP_Y = 26
TABLEAU_FAN_DOWN = 12
TABLEAU_FAN_UP = 28

# Fonts are initialized via setup_fonts() AFTER pygame.init() in __main__.py
FONT_NAME = None
FONT_SMALL = None
FONT_UI = None
FONT_CORNER_RANK = None
FONT_CORNER_SUIT = None

def setup_fonts():
    global FONT_NAME, FONT_SMALL, FONT_UI, FONT_CORNER_RANK, FONT_CORNER_SUIT
    FONT_NAME = pygame.font.get_default_font()
    FONT_SMALL = pygame.font.SysFont(FONT_NAME, 20, bold=True)
    FONT_UI = pygame.font.SysFont(FONT_NAME, 26, bold=True)
    FONT_CORNER_RANK = pygame.font.SysFont(FONT_NAME, 28, bold=True)
    # Suit glyphs need a Unicode-capable font
    try:
        FONT_CORNER_SUIT = pygame.font.SysFont("Segoe UI Symbol", 26, bold=True)
    except (OSError, pygame.error):
        FONT_CORNER_SUIT = pygame.font.SysFont(FONT_NAME, 26, bold=True)

# UI bar heights
TOP_BAR_H = 60

# Colors
BLACK = (20, 20, 20)
WHITE = (245, 245, 245)
RED = (200, 20, 20)
GOLD = (230, 190, 80)
LIGHT = (220, 220, 220)
BACK_COLORS = {"Blue": (34, 96, 200), "Grey": (110, 110, 120), "Red": (170, 30, 40)}

# ---------- Card drawing ----------

_card_face_cache = {}
_card_back_cache = None

def draw_suit_shape(surface, center, suit_index, color, size=42):
    x, y = center
    if suit_index == 3:  # ♦ diamond
        half = size//2
        points = [(x, y - half), (x + half, y), (x, y + half), (x - half, y)]
        pygame.draw.polygon(surface, color, points)
    elif suit_index == 1:  # ♥ heart
        r = size//3
        pygame.draw.circle(surface, color, (x - r, y - r), r)
        pygame.draw.circle(surface, color, (x + r, y - r), r)
        tri = [(x - 2*r, y - r), (x + 2*r, y - r), (x, y + 2*r)]
        pygame.draw.polygon(surface, color, tri)
    elif suit_index == 0:  # ♠ spade
        r = size//3
        pygame.draw.circle(surface, color, (x - r, y), r)
        pygame.draw.circle(surface, color, (x + r, y), r)
        tri = [(x - 2*r, y), (x + 2*r, y), (x, y - 2*r)]
        pygame.draw.polygon(surface, color, tri)
        stem_w = max(6, size//6)
        pygame.draw.rect(surface, color, (x - stem_w//2, y + r, stem_w, size//2))
    else:  # ♣ club
        r = size//3
        pygame.draw.circle(surface, color, (x, y - r), r)
        pygame.draw.circle(surface, color, (x - r, y + r//3), r)
        pygame.draw.circle(surface, color, (x + r, y + r//3), r)
        stem_w = max(6, size//6)
        pygame.draw.rect(surface, color, (x - stem_w//2, y + r, stem_w, size//2))

def get_card_surface(card):
    if not card.face_up:
        return get_back_surface()
    key = (card.suit, card.rank)
    if key in _card_face_cache:
        return _card_face_cache[key]
    surf = pygame.Surface((CARD_W, CARD_H), pygame.SRCALPHA)
    pygame.draw.rect(surf, WHITE, (0,0,CARD_W,CARD_H), border_radius=CARD_RADIUS)
    pygame.draw.rect(surf, BLACK, (0,0,CARD_W,CARD_H), width=3, border_radius=CARD_RADIUS)
    color = RED if is_red(card.suit) else BLACK
    margin = 10
    rtxt = FONT_CORNER_RANK.render(RANK_TO_TEXT[card.rank], True, color)
    stxt = FONT_CORNER_SUIT.render(SUITS[card.suit], True, color)
    surf.blit(rtxt, (margin, margin))
    surf.blit(stxt, (margin, margin + rtxt.get_height() - 2))
    draw_suit_shape(surf, (CARD_W//2, CARD_H//2), card.suit, color, size=CARD_W//2)
    _card_face_cache[key] = surf
    return surf

def get_back_surface():
    global _card_back_cache
    if _card_back_cache is not None:
        return _card_back_cache
    surf = pygame.Surface((CARD_W, CARD_H), pygame.SRCALPHA)
    pygame.draw.rect(surf, WHITE, (0,0,CARD_W,CARD_H), border_radius=CARD_RADIUS)
    pygame.draw.rect(surf, BLACK, (0,0,CARD_W,CARD_H), width=3, border_radius=CARD_RADIUS)
    inset = 8
    inner_rect = pygame.Rect(inset, inset, CARD_W-2*inset, CARD_H-2*inset)
    pygame.draw.rect(surf, BACK_COLORS.get(BACK_COLOR, BACK_COLORS["Blue"]), inner_rect, border_radius=8)
    for i in range(-CARD_H, CARD_W, 12):
        pygame.draw.line(surf, LIGHT, (i, 8), (i+CARD_H, CARD_H-8), 1)
    _card_back_cache = surf
    return surf

# ---------- Pile views ----------

class PileView:
    """
    Screen placement of one pile. Holds no cards of its own: the scene
    passes the engine's card tuple in for drawing and hit-testing.
    """
    def __init__(self, ref, x, y, fan_y=0):
        self.ref = ref
        self.x, self.y = x, y
        self.fan_y = fan_y

    def _offset(self, cards, idx):
        if not self.fan_y:
            return 0
        off = 0
        for c in cards[:idx]:
            off += self.fan_y if c.face_up else TABLEAU_FAN_DOWN
        return off

    def rect_for_index(self, cards, idx):
        return pygame.Rect(self.x, self.y + self._offset(cards, idx), CARD_W, CARD_H)

    def top_rect(self, cards):
        if not cards:
            return pygame.Rect(self.x, self.y, CARD_W, CARD_H)
        return self.rect_for_index(cards, len(cards)-1)

    def drop_rect(self, cards):
        # Whole fanned column, so a drop anywhere over the pile counts
        r = self.top_rect(cards)
        return pygame.Rect(self.x, self.y, CARD_W, r.bottom - self.y)

    def draw(self, screen, cards, highlight_id: Optional[int] = None):
        if not cards:
            pygame.draw.rect(
                screen,
                (255, 255, 255, 40),
                (self.x, self.y, CARD_W, CARD_H),
                border_radius=CARD_RADIUS,
                width=2,
            )
        # Stock and waste only ever show their top card
        visible = range(len(cards)) if self.fan_y else range(max(0, len(cards)-1), len(cards))
        for i in visible:
            c = cards[i]
            r = self.rect_for_index(cards, i)
            screen.blit(get_card_surface(c), r.topleft)
            if highlight_id is not None and c.id == highlight_id:
                pygame.draw.rect(screen, GOLD, r, width=4, border_radius=CARD_RADIUS)

    def hit(self, cards, pos):
        if not cards:
            r = pygame.Rect(self.x, self.y, CARD_W, CARD_H)
            if r.collidepoint(pos):
                return -1
            return None
        for i in reversed(range(len(cards))):
            if self.rect_for_index(cards, i).collidepoint(pos):
                return i
        return None
