"""
Retained-mode widgets on a pygame surface
-----------------------------------------
  Label       read-only text, optionally bound to a variable
  Button      hover / press / click, optional bool toggle binding
  TextField   click to focus, type, Enter commits, Escape discards
  Panel       container, forwards everything to every child

Events are plain pygame events.  Every widget sees every event its parent
forwards; there is no consumption or stop-propagation.  Positions are set
explicitly by the caller.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

import pygame

from hmi_core import Value, VariableStore, value_to_string

logger = logging.getLogger(__name__)

# ── colour palette ────────────────────────────────────────────────────
C_BG         = (22, 22, 26)
C_PANEL      = (34, 34, 40)
C_BORDER     = (90, 90, 105)
C_TEXT       = (235, 235, 240)
C_HINT       = (170, 170, 185)
C_ACCENT     = (80, 160, 255)
C_BTN_HOV    = (40, 40, 48)
C_BTN_PRS    = (28, 28, 34)
C_DIS_FILL   = (45, 45, 52)
C_DIS_BORDER = (80, 80, 90)
C_DIS_TEXT   = (150, 150, 160)

PRIMARY = 1                 # left mouse button

# control codes a TextField understands
CODE_BACKSPACE = 8
CODE_TAB       = 9
CODE_ENTER     = 13

_KEY_CODES = {
    pygame.K_BACKSPACE: CODE_BACKSPACE,
    pygame.K_TAB:       CODE_TAB,
    pygame.K_RETURN:    CODE_ENTER,
    pygame.K_KP_ENTER:  CODE_ENTER,
}


def map_pixel(window, pos) -> pygame.Vector2:
    """Window pixel -> draw-surface coordinate.

    The display surface is the draw surface, so this is the identity; the
    window is accepted so callers don't care.
    """
    return pygame.Vector2(float(pos[0]), float(pos[1]))


def _draw_box(surf, fill, outline, pos, size):
    r = pygame.Rect(int(pos.x), int(pos.y), int(size.x), int(size.y))
    pygame.draw.rect(surf, fill, r)
    if outline is not None:
        pygame.draw.rect(surf, outline, r, 1)


# ═══════════════════════════════════════════════════════════════════════
#  BASE
# ═══════════════════════════════════════════════════════════════════════

class Widget:
    def __init__(self):
        self.pos = pygame.Vector2(0, 0)
        self.size = pygame.Vector2(0, 0)
        self._enabled = True

    def handle_event(self, ev, window=None):
        raise NotImplementedError

    def update(self, dt: float):
        pass

    def draw(self, surf):
        raise NotImplementedError

    def set_position(self, p):
        self.pos = pygame.Vector2(p)

    def set_size(self, s):
        self.size = pygame.Vector2(s)

    def position(self):
        return pygame.Vector2(self.pos)

    def get_size(self):
        return pygame.Vector2(self.size)

    def contains(self, p) -> bool:
        """Inclusive on all four edges."""
        x, y = p[0], p[1]
        return (self.pos.x <= x <= self.pos.x + self.size.x and
                self.pos.y <= y <= self.pos.y + self.size.y)

    def set_enabled(self, enabled: bool):
        self._enabled = bool(enabled)

    @property
    def enabled(self) -> bool:
        return self._enabled


class _Bound:
    """Subscription bookkeeping shared by the bindable widgets."""

    def _init_binding(self):
        self._store: Optional[VariableStore] = None
        self._var_name = ""
        self._sub_id = 0

    def _bind(self, store, name, seed, cb):
        self.unbind()
        store.ensure(name, seed)
        var = store.at(name)
        self._store, self._var_name = store, name
        self._sub_id = var.subscribe(cb)

    def unbind(self):
        if self._store is not None and self._sub_id:
            self._store.at(self._var_name).unsubscribe(self._sub_id)
        self._store, self._var_name, self._sub_id = None, "", 0

    @property
    def bound_name(self) -> str:
        return self._var_name


# ═══════════════════════════════════════════════════════════════════════
#  LABEL
# ═══════════════════════════════════════════════════════════════════════

class Label(Widget, _Bound):
    def __init__(self, font, char_size=18):
        super().__init__()
        self._init_binding()
        self.font = font
        self.color = C_TEXT
        self.prefix = ""
        self.value_text = ""
        self._text = ""
        self._rendered = None
        self.size = pygame.Vector2(300, char_size + 10)
        self._rebuild()

    def set_prefix(self, p: str):
        self.prefix = p; self._rebuild()

    def set_text(self, t: str):
        self.value_text = t; self._rebuild()

    @property
    def text(self) -> str:
        return self._text

    def bind_to(self, store: VariableStore, name: str):
        self._bind(store, name, Value.make_string(""),
                   lambda v: self.set_text(value_to_string(v)))

    def _rebuild(self):
        combined = self.prefix
        if combined:
            combined += " "
        combined += self.value_text
        self._text = combined
        self._rendered = self.font.render(combined, True, self.color)

    def handle_event(self, ev, window=None):
        pass

    def draw(self, surf):
        surf.blit(self._rendered, (int(self.pos.x), int(self.pos.y)))


# ═══════════════════════════════════════════════════════════════════════
#  BUTTON
# ═══════════════════════════════════════════════════════════════════════

class Button(Widget, _Bound):
    """Click fires on release, and only if the press also started here.

    Releasing anywhere clears ``pressed``, so dragging off the button and
    letting go cancels the click instead of leaving it stuck down.
    """

    def __init__(self, font, char_size=18):
        super().__init__()
        self._init_binding()
        self.font = font
        self.caption = "Button"
        self.on_click: Optional[Callable[[], None]] = None
        self.hovered = False
        self.pressed = False
        self.is_on = False
        self.size = pygame.Vector2(200, 40)
        self._rendered = None
        self._toggle: Optional[Callable[[], None]] = None
        self.set_caption(self.caption)

    def set_caption(self, s: str):
        self.caption = s
        self.refresh_style()

    def set_on_click(self, fn: Optional[Callable[[], None]]):
        self.on_click = fn

    def set_enabled(self, enabled: bool):
        super().set_enabled(enabled)
        self.refresh_style()

    def click(self):
        if self.on_click:
            self.on_click()

    def bind_toggle_bool(self, store: VariableStore, name: str):
        def on_value(v):
            self.is_on = v.data if v.is_bool() else False
            self.refresh_style()

        def toggle():
            cur = store.get_bool(name, False)
            store.set(name, Value.make_bool(not cur))

        self._bind(store, name, Value.make_bool(False), on_value)
        self._toggle = toggle
        self.set_on_click(toggle)

    def unbind(self):
        super().unbind()
        toggle, self._toggle = self._toggle, None
        if toggle is None:
            return
        # leave a hand-installed on_click alone
        if self.on_click is toggle:
            self.on_click = None
        self.is_on = False
        self.refresh_style()

    def handle_event(self, ev, window=None):
        if not self.enabled:
            return
        if ev.type == pygame.MOUSEMOTION:
            self.hovered = self.contains(map_pixel(window, ev.pos))
            self.refresh_style()
        elif ev.type == pygame.MOUSEBUTTONDOWN and ev.button == PRIMARY:
            if self.contains(map_pixel(window, ev.pos)):
                self.pressed = True
                self.refresh_style()
        elif ev.type == pygame.MOUSEBUTTONUP and ev.button == PRIMARY:
            was_pressed = self.pressed
            self.pressed = False
            self.refresh_style()
            if was_pressed and self.contains(map_pixel(window, ev.pos)):
                self.click()

    def refresh_style(self):
        if not self.enabled:
            self.fill, self.outline, self.text_color = C_DIS_FILL, C_DIS_BORDER, C_DIS_TEXT
        else:
            self.outline = C_ACCENT if self.is_on else C_BORDER
            if self.pressed:
                self.fill = C_BTN_PRS
            elif self.hovered:
                self.fill = C_BTN_HOV
            else:
                self.fill = C_PANEL
            self.text_color = C_TEXT
        self._rendered = self.font.render(self.caption, True, self.text_color)

    def draw(self, surf):
        _draw_box(surf, self.fill, self.outline, self.pos, self.size)
        centre = self.pos + self.size * 0.5
        surf.blit(self._rendered,
                  self._rendered.get_rect(center=(int(centre.x), int(centre.y))))


# ═══════════════════════════════════════════════════════════════════════
#  TEXT FIELD
# ═══════════════════════════════════════════════════════════════════════

class TextField(Widget, _Bound):
    """Single-line ASCII entry.

    Click inside to focus (caret jumps to the end), click outside or press
    Enter to commit the text to the bound variable, Escape to drop focus
    without committing.  While focused, updates coming from the store are
    ignored so they can't clobber what the user is typing.
    """

    MAX_LEN = 32
    BLINK_PERIOD = 0.5
    PAD_X, PAD_Y = 10, 8

    def __init__(self, font, char_size=18):
        super().__init__()
        self._init_binding()
        self.font = font
        self.char_size = char_size
        self.hint = "Enter text..."
        self.value = ""
        self.focused = False
        self.caret = 0
        self.caret_visible = False
        self._blink = 0.0
        self._commit: Optional[Callable[[], None]] = None
        self._before_edit = ""
        self.size = pygame.Vector2(260, 40)

    def set_hint(self, s: str):
        self.hint = s

    def set_text(self, s: str):
        self.value = s
        if self.caret > len(self.value):
            self.caret = len(self.value)

    def bind_string(self, store: VariableStore, name: str):
        def on_value(v):
            if not self.focused and v.is_string():
                self.set_text(v.data)

        def commit():
            logger.debug("commit %s = %r", name, self.value)
            store.set(name, Value.make_string(self.value))

        self._bind(store, name, Value.make_string(""), on_value)
        self._commit = commit

    def unbind(self):
        super().unbind()
        self._commit = None

    def set_enabled(self, enabled: bool):
        super().set_enabled(enabled)
        if not self.enabled and self.focused:
            self._set_focus(False)
            self._discard()

    def commit(self):
        if self._commit:
            self._commit()

    def _discard(self):
        # back to whatever the store holds; unbound fields keep their text
        if self._store is not None:
            self.set_text(self._store.get_string(self._var_name, self._before_edit))

    def _set_focus(self, focused: bool):
        if focused and not self.focused:
            self._before_edit = self.value
        self.focused = focused
        self._blink = 0.0
        self.caret_visible = focused

    # ── events ────────────────────────────────────────────────────────
    def handle_event(self, ev, window=None):
        if not self.enabled:
            return

        if ev.type == pygame.MOUSEBUTTONDOWN and ev.button == PRIMARY:
            now_focused = self.contains(map_pixel(window, ev.pos))
            if self.focused and not now_focused:
                self.commit()
            self._set_focus(now_focused)
            if self.focused:
                self.caret = len(self.value)

        if not self.focused:
            return

        if ev.type == pygame.TEXTINPUT:
            for ch in ev.text:
                if not self.focused:
                    break
                self.text_entered(ord(ch))
        elif ev.type == pygame.KEYDOWN:
            if ev.key in _KEY_CODES:
                self.text_entered(_KEY_CODES[ev.key])
            elif ev.key == pygame.K_LEFT:
                self.caret = max(0, self.caret - 1)
            elif ev.key == pygame.K_RIGHT:
                self.caret = min(len(self.value), self.caret + 1)
            elif ev.key == pygame.K_ESCAPE:
                self._set_focus(False)
                self._discard()

    def text_entered(self, code: int):
        if code == CODE_BACKSPACE:
            if self.caret > 0:
                self.value = self.value[:self.caret-1] + self.value[self.caret:]
                self.caret -= 1
        elif code == CODE_ENTER:
            self.commit()
            self._set_focus(False)
        elif code == CODE_TAB:
            pass
        elif 32 <= code <= 126:
            if len(self.value) < self.MAX_LEN:
                self.value = self.value[:self.caret] + chr(code) + self.value[self.caret:]
                self.caret += 1

    # ── time ──────────────────────────────────────────────────────────
    def update(self, dt: float):
        if not self.focused:
            self.caret_visible = False
            return
        self._blink += dt
        if self._blink >= self.BLINK_PERIOD:
            self._blink = 0.0
            self.caret_visible = not self.caret_visible

    # ── drawing ───────────────────────────────────────────────────────
    def caret_x(self) -> float:
        w, _ = self.font.size(self.value[:self.caret])
        return self.pos.x + self.PAD_X + w

    def draw(self, surf):
        if not self.enabled:
            outline = C_DIS_BORDER
        else:
            outline = C_ACCENT if self.focused else C_BORDER
        _draw_box(surf, C_PANEL, outline, self.pos, self.size)

        tx, ty = int(self.pos.x + self.PAD_X), int(self.pos.y + self.PAD_Y)
        if self.value:
            surf.blit(self.font.render(self.value, True, C_TEXT), (tx, ty))
        else:
            surf.blit(self.font.render(self.hint, True, C_HINT), (tx, ty))

        if self.focused and self.caret_visible:
            pygame.draw.rect(surf, C_ACCENT,
                             pygame.Rect(int(self.caret_x()), ty, 1, self.char_size))


# ═══════════════════════════════════════════════════════════════════════
#  PANEL
# ═══════════════════════════════════════════════════════════════════════

class Panel(Widget):
    def __init__(self):
        super().__init__()
        self._children: List[Widget] = []

    def add(self, w: Widget) -> Widget:
        self._children.append(w)
        return w

    @property
    def children(self):
        return list(self._children)

    def handle_event(self, ev, window=None):
        for w in self._children:
            w.handle_event(ev, window)

    def update(self, dt: float):
        for w in self._children:
            w.update(dt)

    def draw(self, surf):
        _draw_box(surf, C_PANEL, C_BORDER, self.pos, self.size)
        for w in self._children:
            w.draw(surf)
