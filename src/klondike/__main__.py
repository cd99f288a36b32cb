# __main__.py - entry point
import os
import logging
import pygame
from klondike import common as C
from klondike.scenes.table import KlondikeTableScene

logger = logging.getLogger("klondike")


def _initial_window_size():
    info = pygame.display.Info()
    # Keep a safety margin so the window never hides under taskbar
    margin_w, margin_h = 120, 140
    w = min(C.SCREEN_W, max(640, info.current_w - margin_w))
    h = min(C.SCREEN_H, max(480, info.current_h - margin_h))
    return w, h


def _env_seed():
    raw = os.environ.get("KLONDIKE_SEED", "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer KLONDIKE_SEED=%r", raw)
        return None


def _configure_logging():
    level_name = os.environ.get("KLONDIKE_LOG_LEVEL", "WARNING").strip().upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main():
    _configure_logging()
    settings = C.load_settings()
    card_size = os.environ.get("KLONDIKE_CARD_SIZE", "").strip().capitalize() or settings["card_size"]
    if card_size not in ("Small", "Medium", "Large"):
        card_size = "Medium"
    C.apply_card_settings(size_name=card_size, back_color=settings["back_color"])

    # Center window and init
    os.environ.setdefault("SDL_VIDEO_CENTERED", "1")
    pygame.init()

    w, h = _initial_window_size()
    C.SCREEN_W, C.SCREEN_H = w, h
    screen = pygame.display.set_mode((w, h), pygame.RESIZABLE)
    pygame.display.set_caption("Klondike Solitaire")
    C.setup_fonts()
    clock = pygame.time.Clock()

    scene = KlondikeTableScene(stock_cycles=settings["stock_cycles"], seed=_env_seed())

    running = True
    while running:
        clock.tick(60)
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                running = False
                continue
            if e.type == pygame.VIDEORESIZE:
                C.SCREEN_W, C.SCREEN_H = e.size
                screen = pygame.display.set_mode((C.SCREEN_W, C.SCREEN_H), pygame.RESIZABLE)
                scene.compute_layout()
                scene.toolbar.relayout()
                continue
            scene.handle_event(e)
        scene.draw(screen)
        pygame.display.flip()
    pygame.quit()


if __name__ == "__main__":
    main()
