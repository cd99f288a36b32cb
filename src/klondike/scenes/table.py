# table.py - the Klondike table: forwards clicks and drags to the engine and draws its state
import pygame

from klondike import common as C
from klondike import engine as E
from klondike.piles import FOUNDATIONS, STOCK, TABLEAUS, WASTE
from klondike.rules import pick_up
from klondike.ui import CommandBar

MESSAGES = {
    E.INVALID_MOVE: "Invalid move",
    E.NOTHING_TO_UNDO: "Nothing to undo",
    E.NO_HINT_AVAILABLE: "No moves found - try dealing from the stock",
}
WIN_MESSAGE = "Congratulations! You won! Press N for a new game."


def _has_history(state):
    return state.history.can_undo()


def _can_autofinish(state):
    return E.can_auto_finish(state) and not E.is_won(state)


class KlondikeTableScene:
    def __init__(self, stock_cycles=None, seed=None):
        self.stock_cycles = stock_cycles
        self.state = E.new_game(seed=seed, stock_cycles=stock_cycles)
        self.message = ""
        self.drag = None  # (source ref, card index, cards, grab offset)
        self.drag_pos = (0, 0)

        # Auto-finish pacing
        self.auto_play_active = False
        self.auto_last_time = 0
        self.auto_interval_ms = 180  # move a card roughly every 0.18s

        self.toolbar = CommandBar(
            [
                ("New", self.deal_new, None),
                ("Restart", self.restart, _has_history),
                ("Undo", self.undo, _has_history),
                ("Hint", self.show_hint, None),
                ("Auto", self.start_auto_finish, _can_autofinish),
            ],
            current_state=lambda: self.state,
        )
        self.compute_layout()

    # ---------- Layout ----------
    def compute_layout(self):
        step = C.CARD_W + C.CARD_GAP_X
        top_y = C.TOP_BAR_H + 20
        left = 40
        self.stock_view = C.PileView(STOCK, left, top_y)
        self.waste_view = C.PileView(WASTE, left + step, top_y)
        self.foundation_views = [C.PileView(ref, left + (3 + i) * step, top_y) for i, ref in enumerate(FOUNDATIONS)]
        tab_y = top_y + C.CARD_H + 30
        self.tableau_views = [
            C.PileView(ref, left + i * step, tab_y, fan_y=C.TABLEAU_FAN_UP) for i, ref in enumerate(TABLEAUS)
        ]

    def _views(self):
        return [self.stock_view, self.waste_view] + self.foundation_views + self.tableau_views

    # ---------- Commands ----------
    def _set_state(self, result: E.MoveResult):
        self.state = result.state
        if result.error:
            self.message = MESSAGES.get(result.error, result.error)
        elif result.won:
            self.message = WIN_MESSAGE
        else:
            self.message = ""

    def deal_new(self):
        self.state = E.new_game(stock_cycles=self.stock_cycles)
        self.message = ""
        self.drag = None
        self.auto_play_active = False

    def restart(self):
        self.state = E.restart(self.state)
        self.message = ""
        self.drag = None
        self.auto_play_active = False

    def undo(self):
        self.auto_play_active = False
        self._set_state(E.undo(self.state))

    def show_hint(self):
        self._set_state(E.show_hint(self.state))

    def draw_from_stock(self):
        if not E.can_deal(self.state):
            if self.state.waste:
                self.message = "No more stock cycles!"
            return
        self.state = E.deal_from_stock(self.state)
        self.message = ""

    def try_move(self, source, card_index, target):
        self._set_state(E.propose_move(self.state, source, target, card_index))

    # ---------- Auto finish ----------
    def start_auto_finish(self):
        if not _can_autofinish(self.state):
            return
        self.auto_play_active = True
        self.auto_last_time = pygame.time.get_ticks()

    def step_auto_finish(self):
        """Execute one auto move if possible; stop when done."""
        nxt = E.auto_finish_step(self.state)
        if nxt is None:
            self.auto_play_active = False
            if E.is_won(self.state):
                self.message = WIN_MESSAGE
            return
        self.state = nxt

    # ---------- Hit testing ----------
    def _drop_target(self, pos):
        # Foundations first (single cards), then tableau columns
        for v in self.foundation_views:
            if v.top_rect(self.state.pile(v.ref)).collidepoint(pos):
                return v.ref
        for v in self.tableau_views:
            if v.drop_rect(self.state.pile(v.ref)).collidepoint(pos):
                return v.ref
        return None

    def _start_drag(self, pos) -> bool:
        for v in [self.waste_view] + self.tableau_views:
            cards = self.state.pile(v.ref)
            hi = v.hit(cards, pos)
            if hi is None or hi == -1:
                continue
            picked = pick_up(self.state, v.ref, hi)
            if picked is None:
                return False
            r = v.rect_for_index(cards, hi)
            self.drag = (v.ref, hi, picked, (pos[0] - r.x, pos[1] - r.y))
            self.drag_pos = pos
            return True
        return False

    # ---------- Event handling ----------
    def handle_event(self, e):
        if self.toolbar.handle_event(e):
            return
        if e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
            if E.is_won(self.state):
                self.deal_new()
                return
            if self.stock_view.top_rect(self.state.stock).collidepoint(e.pos):
                self.draw_from_stock()
                return
            self._start_drag(e.pos)

        elif e.type == pygame.MOUSEMOTION:
            if self.drag:
                self.drag_pos = e.pos

        elif e.type == pygame.MOUSEBUTTONUP and e.button == 1:
            if not self.drag:
                return
            source, index, _cards, _grab = self.drag
            self.drag = None
            target = self._drop_target(e.pos)
            if target is None or target == source:
                return
            self.try_move(source, index, target)

        elif e.type == pygame.KEYDOWN:
            if e.key == pygame.K_r:
                self.restart()
            elif e.key == pygame.K_n:
                self.deal_new()
            elif e.key == pygame.K_u:
                self.undo()
            elif e.key == pygame.K_h:
                self.show_hint()
            elif e.key == pygame.K_a:
                self.start_auto_finish()
            elif e.key == pygame.K_SPACE:
                self.draw_from_stock()
            elif e.key == pygame.K_ESCAPE:
                self.drag = None
                self.message = ""

    # ---------- Drawing ----------
    def _visible_cards(self, ref):
        cards = self.state.pile(ref)
        if self.drag and self.drag[0] == ref:
            return cards[: self.drag[1]]
        return cards

    def draw(self, screen):
        screen.fill(C.TABLE_BG)

        if self.auto_play_active:
            now = pygame.time.get_ticks()
            if now - self.auto_last_time >= self.auto_interval_ms:
                self.step_auto_finish()
                self.auto_last_time = now

        self.toolbar.draw(screen)
        if self.stock_cycles is not None:
            left = max(0, self.stock_cycles - self.state.recycles_used)
            sc = C.FONT_UI.render(f"Stock cycles left: {left}", True, C.WHITE)
            screen.blit(sc, (C.SCREEN_W - sc.get_width() - 20, 16))

        hint_id = self.state.hint_card_id
        for v in self._views():
            v.draw(screen, self._visible_cards(v.ref), highlight_id=hint_id)

        for v, label in ((self.stock_view, "Stock"), (self.waste_view, "Waste")):
            lab = C.FONT_SMALL.render(label, True, C.WHITE)
            screen.blit(lab, (v.x + (C.CARD_W - lab.get_width()) // 2, v.y - 22))

        if self.drag:
            _source, _index, cards, (gx, gy) = self.drag
            mx, my = self.drag_pos
            for i, c in enumerate(cards):
                screen.blit(C.get_card_surface(c), (mx - gx, my - gy + i * C.TABLEAU_FAN_UP))

        if self.message:
            msg = C.FONT_UI.render(self.message, True, (255, 255, 180))
            screen.blit(msg, (C.SCREEN_W // 2 - msg.get_width() // 2, C.SCREEN_H - 40))
