import importlib

from klondike import engine as E
from klondike.piles import Foundation, Tableau


def test_application_flow(headless_pygame, monkeypatch):
    pygame = headless_pygame
    monkeypatch.setenv("KLONDIKE_SEED", "1234")

    entry = importlib.import_module("klondike.__main__")
    table_module = importlib.import_module("klondike.scenes.table")

    captured = {}

    class DummyClock:
        def tick(self, _fps):
            return 16

    monkeypatch.setattr(pygame.time, "Clock", lambda: DummyClock())
    monkeypatch.setattr(entry, "_initial_window_size", lambda: (1024, 768))

    class LoggedTableScene(table_module.KlondikeTableScene):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            captured["scene"] = self
            captured["opening"] = self.state

    monkeypatch.setattr(entry, "KlondikeTableScene", LoggedTableScene)

    def _key(key):
        return [pygame.event.Event(pygame.KEYDOWN, {"key": key, "mod": 0})]

    def _record(name):
        captured[name] = (captured["scene"].state, captured["scene"].message)
        return _key(pygame.K_ESCAPE)

    event_steps = [
        lambda: _key(pygame.K_SPACE),
        lambda: _record("after_deal"),
        lambda: _key(pygame.K_u),
        lambda: _record("after_undo"),
        lambda: _key(pygame.K_u),
        lambda: _record("after_empty_undo"),
        lambda: [pygame.event.Event(pygame.QUIT, {})],
    ]
    index = {"value": 0}

    def scripted_events():
        step = index["value"]
        if step >= len(event_steps):
            return [pygame.event.Event(pygame.QUIT, {})]
        index["value"] += 1
        return event_steps[step]()

    monkeypatch.setattr(pygame.event, "get", scripted_events)

    quit_calls = []
    real_quit = pygame.quit

    def tracked_quit():
        quit_calls.append(True)
        real_quit()

    monkeypatch.setattr(pygame, "quit", tracked_quit)

    entry.main()

    assert quit_calls, "pygame.quit() should be called"
    opening = captured["opening"]
    assert opening == E.new_game(seed=1234)

    dealt, _ = captured["after_deal"]
    assert len(dealt.waste) == 1
    assert len(dealt.stock) == 23

    undone, message = captured["after_undo"]
    assert undone == opening
    assert message == ""

    _, message = captured["after_empty_undo"]
    assert message == "Nothing to undo"


def _make_scene(pygame, state=None, **kwargs):
    from klondike import common as C
    from klondike.scenes.table import KlondikeTableScene

    pygame.init()
    C.setup_fonts()
    scene = KlondikeTableScene(**kwargs)
    if state is not None:
        scene.state = state
    return scene


def _click(pygame, scene, pos, event_type):
    scene.handle_event(pygame.event.Event(event_type, {"pos": pos, "button": 1}))


def test_drag_waste_card_to_foundation(headless_pygame, table):
    pygame = headless_pygame
    scene = _make_scene(pygame, table(waste=["A♦"], tableau=[["K♠"]]))

    waste_rect = scene.waste_view.top_rect(scene.state.waste)
    target_rect = scene.foundation_views[2].top_rect(())
    _click(pygame, scene, waste_rect.center, pygame.MOUSEBUTTONDOWN)
    assert scene.drag is not None
    scene.draw(pygame.Surface((1280, 800)))
    _click(pygame, scene, target_rect.center, pygame.MOUSEBUTTONUP)

    assert scene.drag is None
    assert scene.state.waste == ()
    assert [c.rank for c in scene.state.foundations[2]] == [1]
    assert scene.message == ""


def test_illegal_drop_shows_message(headless_pygame, table):
    pygame = headless_pygame
    scene = _make_scene(pygame, table(tableau=[["8♠"], ["7♠"]]))

    src = scene.tableau_views[1].top_rect(scene.state.tableau[1])
    dst = scene.tableau_views[0].top_rect(scene.state.tableau[0])
    _click(pygame, scene, src.center, pygame.MOUSEBUTTONDOWN)
    _click(pygame, scene, dst.center, pygame.MOUSEBUTTONUP)

    assert scene.message == "Invalid move"
    assert [repr(c) for c in scene.state.tableau[1]] == ["7♠↑"]


def test_hint_key_highlights_card(headless_pygame, table, card):
    pygame = headless_pygame
    scene = _make_scene(pygame, table(tableau=[["8♠"], ["7♦"]]))
    scene.handle_event(pygame.event.Event(pygame.KEYDOWN, {"key": pygame.K_h, "mod": 0}))
    assert scene.state.hint_card_id == card("7♦").id
    scene.draw(pygame.Surface((1280, 800)))


def test_stock_cycle_limit_message(headless_pygame, table):
    pygame = headless_pygame
    scene = _make_scene(pygame, stock_cycles=1)
    scene.state = table(waste=["5♣", "9♦"], stock_cycles=1)
    scene.state = E.deal_from_stock(scene.state)  # uses the one recycle
    while scene.state.stock:
        scene.draw_from_stock()
    scene.draw_from_stock()
    assert scene.message == "No more stock cycles!"


def test_auto_button_plays_to_the_foundations(headless_pygame, table, monkeypatch):
    pygame = headless_pygame
    nearly_won = table(
        foundations=[[f"{r}{s}" for r in ["A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q"]] for s in "♠♥♣♦"],
        tableau=[["K♠"], ["K♥"], ["K♣"], ["K♦"]],
    )
    scene = _make_scene(pygame, nearly_won)
    assert scene.toolbar.is_enabled("Auto")
    button = scene.toolbar.button("Auto")
    _click(pygame, scene, button.rect.center, pygame.MOUSEBUTTONDOWN)
    assert scene.auto_play_active

    scene.auto_last_time = 0
    ticks = {"now": 0}
    monkeypatch.setattr(pygame.time, "get_ticks", lambda: ticks["now"])
    surface = pygame.Surface((1280, 800))
    for _ in range(6):
        ticks["now"] += 1000
        scene.draw(surface)

    assert E.is_won(scene.state)
    assert not scene.auto_play_active
    assert scene.message.startswith("Congratulations")
    assert scene.state.history.last().target == Foundation(3)
    assert Tableau(0) in {r.source for r in scene.state.history}


def test_toolbar_buttons_follow_game_state(headless_pygame, table):
    pygame = headless_pygame
    scene = _make_scene(pygame, table(waste=["5♣"], stock=["9♦↓"], tableau=[["4♠↓", "K♥"]]))
    bar = scene.toolbar
    assert [b.label for b in bar.buttons] == ["New", "Restart", "Undo", "Hint", "Auto"]
    assert bar.button("Shuffle") is None
    assert not bar.is_enabled("Undo")
    assert not bar.is_enabled("Restart")
    assert not bar.is_enabled("Auto")
    assert bar.is_enabled("Hint")

    before = scene.state
    _click(pygame, scene, bar.button("Undo").rect.center, pygame.MOUSEBUTTONDOWN)
    assert scene.state is before
    assert scene.message == ""

    scene.draw_from_stock()
    assert bar.is_enabled("Undo")
    _click(pygame, scene, bar.button("Undo").rect.center, pygame.MOUSEBUTTONDOWN)
    assert scene.state == before
    assert not bar.is_enabled("Undo")


def test_toolbar_lays_buttons_out_left_to_right(headless_pygame):
    pygame = headless_pygame
    scene = _make_scene(pygame)
    rects = [b.rect for b in scene.toolbar.buttons]
    assert rects[0].topleft == (12, 12)
    assert all(a.right < b.left for a, b in zip(rects, rects[1:]))
    assert len({r.y for r in rects}) == 1
    scene.draw(pygame.Surface((1280, 800)))
