"""
XSmall-HMI: IO components demo
------------------------------
  Toggle pump.enabled   flips the pump bool; the ON/OFF label follows
  Temperature +0.25     bumps the temperature float
  Operator name field   click, type, Enter commits, Escape discards,
                        clicking elsewhere also commits
  Close window          quit

Environment
-----------
  HMI_FONT        path to a .ttf to use instead of pygame's default font
  HMI_LOG_LEVEL   logging level name (default INFO, unknown names fall back to INFO)

Variables
---------
  pump.enabled        Bool     toggled by the pump button
  pump.enabled.view   String   "ON" / "OFF", derived from pump.enabled
  temperature         Float    starts at 23.50
  operator.name       String   edited by the text field
"""

# ── platform fixes BEFORE pygame ──────────────────────────────────────
import os, sys
import logging
from typing import Dict, Optional

if sys.platform == "win32":
    try:
        import ctypes
        ctypes.windll.user32.SetProcessDPIAware()
        ctypes.windll.shell32.SetCurrentProcessExplicitAppUserModelID(
            "xsmall.hmi.demo")
    except (AttributeError, OSError):
        pass
os.environ.setdefault('SDL_VIDEO_WINDOW_POS', 'center')

import pygame

from hmi_core import Value, VariableStore
from hmi_widgets import C_BG, Button, Label, Panel, TextField

logger = logging.getLogger(__name__)

# ── defaults ─────────────────────────────────────────────────────────
INIT_W, INIT_H   = 760, 420
CAPTION          = "XSmall-HMI SCADA - IO Components"
FPS              = 60
SIZE_TITLE       = 22
SIZE_BODY        = 18
SIZE_TIP         = 16
TEMP_STEP        = 0.25
LOG_FORMAT       = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def on_off(b: bool) -> str:
    return "ON" if b else "OFF"


def load_fonts(font_path: Optional[str] = None) -> Dict[int, pygame.font.Font]:
    """Fonts keyed by point size.

    Raises:
        FileNotFoundError: ``font_path`` was given but doesn't exist.
    """
    if font_path is not None and not os.path.isfile(font_path):
        raise FileNotFoundError(font_path)
    if not pygame.font.get_init():
        pygame.font.init()
    return {sz: pygame.font.Font(font_path, sz)
            for sz in (SIZE_TITLE, SIZE_BODY, SIZE_TIP)}


# ═══════════════════════════════════════════════════════════════════════
#  LAYOUT
# ═══════════════════════════════════════════════════════════════════════

def build_demo(store: VariableStore, fonts: Dict[int, pygame.font.Font]) -> Panel:
    """Seed the demo variables and build the widget tree bound to them."""
    store.set("pump.enabled", Value.make_bool(False))
    store.set("operator.name", Value.make_string("Ivan"))
    store.set("temperature", Value.make_float(23.50))
    store.set("pump.enabled.view", Value.make_string("OFF"))
    store.at("pump.enabled").subscribe(
        lambda v: store.set("pump.enabled.view",
                            Value.make_string(on_off(v.data if v.is_bool() else False))))

    f_title, f_body, f_tip = fonts[SIZE_TITLE], fonts[SIZE_BODY], fonts[SIZE_TIP]

    panel = Panel()
    panel.set_position((20, 20))
    panel.set_size((720, 380))

    title = panel.add(Label(f_title, SIZE_TITLE))
    title.set_position((40, 35))
    title.set_text("IO Components Demo")

    def label(prefix, y, name):
        lbl = panel.add(Label(f_body, SIZE_BODY))
        lbl.set_prefix(prefix)
        lbl.set_position((40, y))
        lbl.bind_to(store, name)
        return lbl

    def button(caption, y):
        btn = panel.add(Button(f_body, SIZE_BODY))
        btn.set_position((240, y))
        btn.set_size((220, 42))
        btn.set_caption(caption)
        return btn

    label("Pump:", 85, "pump.enabled.view")
    button("Toggle pump.enabled", 78).bind_toggle_bool(store, "pump.enabled")

    def bump_temperature():
        t = store.get_float("temperature", 0.0)
        store.set("temperature", Value.make_float(t + TEMP_STEP))

    label("Temperature:", 145, "temperature")
    button(f"Temperature +{TEMP_STEP:.2f}", 138).set_on_click(bump_temperature)

    label("Operator name:", 215, "operator.name")
    field = panel.add(TextField(f_body, SIZE_BODY))
    field.set_position((240, 205))
    field.set_size((320, 42))
    field.set_hint("Type name, press Enter...")
    field.bind_string(store, "operator.name")

    for y, tip in ((290, "Variables: pump.enabled, operator.name, temperature"),
                   (320, "Tip: click text field -> type -> Enter to commit")):
        t = panel.add(Label(f_tip, SIZE_TIP))
        t.set_position((40, y))
        t.set_text(tip)

    return panel


# ═══════════════════════════════════════════════════════════════════════
#  APPLICATION
# ═══════════════════════════════════════════════════════════════════════

class App:
    def __init__(self, store: VariableStore, font_path: Optional[str] = None):
        self.store = store
        fonts = load_fonts(font_path)

        pygame.init()
        # Set caption BEFORE set_mode to avoid double window-show
        pygame.display.set_caption(CAPTION)
        self.screen = pygame.display.set_mode((INIT_W, INIT_H))
        self.screen.fill(C_BG)
        pygame.display.flip()
        self.clock = pygame.time.Clock()
        pygame.key.start_text_input()

        self.root = build_demo(store, fonts)
        self.running = True

    # ── events ────────────────────────────────────────────────────────
    def handle_events(self, events=None):
        for ev in (pygame.event.get() if events is None else events):
            if ev.type == pygame.QUIT:
                self.running = False; return
            self.root.handle_event(ev, self.screen)

    # ── update ────────────────────────────────────────────────────────
    def update(self, dt: float):
        self.root.update(dt)

    # ── render ────────────────────────────────────────────────────────
    def render(self):
        self.screen.fill(C_BG)
        self.root.draw(self.screen)
        pygame.display.flip()

    # ── main loop ─────────────────────────────────────────────────────
    def run(self):
        logger.info("entering main loop (%d variables)", len(self.store))
        dt = 0.0
        while self.running:
            self.handle_events()
            self.update(dt)
            self.render()
            dt = self.clock.tick(FPS) / 1000.0
        logger.info("window closed")
        pygame.quit()


def log_level(name: Optional[str]) -> Optional[int]:
    """Numeric level for a level name, None if logging doesn't know it."""
    level = logging.getLevelName((name or "INFO").strip().upper())
    return level if isinstance(level, int) else None


def main() -> int:
    level_name = os.environ.get("HMI_LOG_LEVEL")
    level = log_level(level_name)
    logging.basicConfig(level=logging.INFO if level is None else level, format=LOG_FORMAT)
    if level is None:
        logger.warning("unknown HMI_LOG_LEVEL %r, using INFO", level_name)
    font_path = os.environ.get("HMI_FONT") or None
    try:
        app = App(VariableStore(), font_path)
    except FileNotFoundError as e:
        logger.error("cannot load font: %s", e)
        logger.error("set HMI_FONT to an existing .ttf or unset it for the default font")
        return 1
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
