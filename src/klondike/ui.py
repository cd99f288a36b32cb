# ui.py - command bar drawn across the top of the table
import pygame
from typing import Callable, List, Optional, Sequence, Tuple

from klondike import common as C
from klondike.state import GameState

# (label, command, predicate on the current state); no predicate means always enabled
Command = Tuple[str, Callable[[], None], Optional[Callable[[GameState], bool]]]

BAR_MARGIN = (12, 12)
BUTTON_GAP = 8
BUTTON_H = 36
LABEL_PAD = 12

FILL_IDLE = (230, 230, 235)
FILL_HOVER = (215, 215, 225)
FILL_DISABLED = (200, 200, 205)
OUTLINE = (160, 160, 170)
LABEL = (30, 30, 35)
LABEL_DISABLED = (120, 120, 130)


class CommandButton:
    def __init__(self, label: str, command: Callable[[], None],
                 enabled_when: Optional[Callable[[GameState], bool]] = None):
        self.label = label
        self.command = command
        self.enabled_when = enabled_when
        self.hover = False
        width = C.FONT_SMALL.size(label)[0] + 2 * LABEL_PAD
        self.rect = pygame.Rect(0, 0, width, BUTTON_H)

    def enabled_for(self, state: GameState) -> bool:
        return self.enabled_when is None or bool(self.enabled_when(state))

    def draw(self, surface: pygame.Surface, state: GameState):
        enabled = self.enabled_for(state)
        if not enabled:
            fill = FILL_DISABLED
        else:
            fill = FILL_HOVER if self.hover else FILL_IDLE
        pygame.draw.rect(surface, fill, self.rect, border_radius=8)
        pygame.draw.rect(surface, OUTLINE, self.rect, width=1, border_radius=8)
        text = C.FONT_SMALL.render(self.label, True, LABEL if enabled else LABEL_DISABLED)
        surface.blit(text, text.get_rect(center=self.rect.center))


class CommandBar:
    """Buttons laid out left to right, enabled against the scene's current GameState."""

    def __init__(self, commands: Sequence[Command], current_state: Callable[[], GameState]):
        self.buttons: List[CommandButton] = [CommandButton(*cmd) for cmd in commands]
        self.current_state = current_state
        self.relayout()

    def relayout(self):
        x, y = BAR_MARGIN
        for b in self.buttons:
            b.rect.topleft = (x, y)
            x += b.rect.width + BUTTON_GAP

    def button(self, label: str) -> Optional[CommandButton]:
        return next((b for b in self.buttons if b.label == label), None)

    def is_enabled(self, label: str) -> bool:
        b = self.button(label)
        return b is not None and b.enabled_for(self.current_state())

    def handle_event(self, e) -> bool:
        if e.type == pygame.MOUSEMOTION:
            for b in self.buttons:
                b.hover = b.rect.collidepoint(e.pos)
            return False
        if e.type != pygame.MOUSEBUTTONDOWN or e.button != 1:
            return False
        for b in self.buttons:
            if b.rect.collidepoint(e.pos):
                if b.enabled_for(self.current_state()):
                    b.command()
                # a click on a disabled button is still consumed
                return True
        return False

    def draw(self, surface: pygame.Surface):
        state = self.current_state()
        for b in self.buttons:
            b.draw(surface, state)
