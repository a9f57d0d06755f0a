"""Virtual keycodes, event flags and click bookkeeping used by the macOS backend."""

from __future__ import annotations

import time
from enum import IntFlag
from typing import Optional

from .keys import AnyKey, Key, Layout, Raw

# Keycodes for keys that do not depend on the keyboard layout.
KVK_RETURN = 0x24
KVK_TAB = 0x30
KVK_SPACE = 0x31
KVK_DELETE = 0x33
KVK_ESCAPE = 0x35
KVK_COMMAND = 0x37
KVK_SHIFT = 0x38
KVK_CAPS_LOCK = 0x39
KVK_OPTION = 0x3A
KVK_CONTROL = 0x3B
KVK_RIGHT_SHIFT = 0x3C
KVK_RIGHT_OPTION = 0x3D
KVK_RIGHT_CONTROL = 0x3E
KVK_FUNCTION = 0x3F
KVK_F17 = 0x40
KVK_VOLUME_UP = 0x48
KVK_VOLUME_DOWN = 0x49
KVK_MUTE = 0x4A
KVK_F18 = 0x4F
KVK_F19 = 0x50
KVK_F20 = 0x5A
KVK_F5 = 0x60
KVK_F6 = 0x61
KVK_F7 = 0x62
KVK_F3 = 0x63
KVK_F8 = 0x64
KVK_F9 = 0x65
KVK_F11 = 0x67
KVK_F13 = 0x69
KVK_F16 = 0x6A
KVK_F14 = 0x6B
KVK_F10 = 0x6D
KVK_F12 = 0x6F
KVK_F15 = 0x71
KVK_HELP = 0x72
KVK_HOME = 0x73
KVK_PAGE_UP = 0x74
KVK_FORWARD_DELETE = 0x75
KVK_F4 = 0x76
KVK_END = 0x77
KVK_F2 = 0x78
KVK_PAGE_DOWN = 0x79
KVK_F1 = 0x7A
KVK_LEFT_ARROW = 0x7B
KVK_RIGHT_ARROW = 0x7C
KVK_DOWN_ARROW = 0x7D
KVK_UP_ARROW = 0x7E
KVK_ANSI_KEYPAD0 = 0x52
KVK_ANSI_KEYPAD1 = 0x53
KVK_ANSI_KEYPAD2 = 0x54
KVK_ANSI_KEYPAD3 = 0x55
KVK_ANSI_KEYPAD4 = 0x56
KVK_ANSI_KEYPAD5 = 0x57
KVK_ANSI_KEYPAD6 = 0x58
KVK_ANSI_KEYPAD7 = 0x59
KVK_ANSI_KEYPAD8 = 0x5B
KVK_ANSI_KEYPAD9 = 0x5C
KVK_ANSI_KEYPAD_CLEAR = 0x47
KVK_ANSI_KEYPAD_DECIMAL = 0x41
KVK_ANSI_KEYPAD_MULTIPLY = 0x43
KVK_ANSI_KEYPAD_PLUS = 0x45
KVK_ANSI_KEYPAD_DIVIDE = 0x4B
KVK_ANSI_KEYPAD_ENTER = 0x4C
KVK_ANSI_KEYPAD_MINUS = 0x4E
KVK_ANSI_KEYPAD_EQUALS = 0x51
KVK_RIGHT_COMMAND = 0x36

# Keycodes of the ANSI layout's character keys.
_ANSI_KEYCODES = {
    "a": 0x00,
    "s": 0x01,
    "d": 0x02,
    "f": 0x03,
    "h": 0x04,
    "g": 0x05,
    "z": 0x06,
    "x": 0x07,
    "c": 0x08,
    "v": 0x09,
    "b": 0x0B,
    "q": 0x0C,
    "w": 0x0D,
    "e": 0x0E,
    "r": 0x0F,
    "y": 0x10,
    "t": 0x11,
    "1": 0x12,
    "2": 0x13,
    "3": 0x14,
    "4": 0x15,
    "6": 0x16,
    "5": 0x17,
    "=": 0x18,
    "9": 0x19,
    "7": 0x1A,
    "-": 0x1B,
    "8": 0x1C,
    "0": 0x1D,
    "]": 0x1E,
    "o": 0x1F,
    "u": 0x20,
    "[": 0x21,
    "i": 0x22,
    "p": 0x23,
    "l": 0x25,
    "j": 0x26,
    "'": 0x27,
    "k": 0x28,
    ";": 0x29,
    "\\": 0x2A,
    ",": 0x2B,
    "/": 0x2C,
    "n": 0x2D,
    "m": 0x2E,
    ".": 0x2F,
    "`": 0x32,
}

_KEYCODES = {
    Key.ALT: KVK_OPTION,
    Key.BACKSPACE: KVK_DELETE,
    Key.CAPS_LOCK: KVK_CAPS_LOCK,
    Key.CONTROL: KVK_CONTROL,
    Key.DELETE: KVK_FORWARD_DELETE,
    Key.DOWN_ARROW: KVK_DOWN_ARROW,
    Key.END: KVK_END,
    Key.ESCAPE: KVK_ESCAPE,
    Key.F1: KVK_F1,
    Key.F10: KVK_F10,
    Key.F11: KVK_F11,
    Key.F12: KVK_F12,
    Key.F2: KVK_F2,
    Key.F3: KVK_F3,
    Key.F4: KVK_F4,
    Key.F5: KVK_F5,
    Key.F6: KVK_F6,
    Key.F7: KVK_F7,
    Key.F8: KVK_F8,
    Key.F9: KVK_F9,
    Key.HOME: KVK_HOME,
    Key.LEFT_ARROW: KVK_LEFT_ARROW,
    Key.OPTION: KVK_OPTION,
    Key.PAGE_DOWN: KVK_PAGE_DOWN,
    Key.PAGE_UP: KVK_PAGE_UP,
    Key.RETURN: KVK_RETURN,
    Key.RIGHT_ARROW: KVK_RIGHT_ARROW,
    Key.SHIFT: KVK_SHIFT,
    Key.SPACE: KVK_SPACE,
    Key.TAB: KVK_TAB,
    Key.UP_ARROW: KVK_UP_ARROW,
    Key.NUMPAD0: KVK_ANSI_KEYPAD0,
    Key.NUMPAD1: KVK_ANSI_KEYPAD1,
    Key.NUMPAD2: KVK_ANSI_KEYPAD2,
    Key.NUMPAD3: KVK_ANSI_KEYPAD3,
    Key.NUMPAD4: KVK_ANSI_KEYPAD4,
    Key.NUMPAD5: KVK_ANSI_KEYPAD5,
    Key.NUMPAD6: KVK_ANSI_KEYPAD6,
    Key.NUMPAD7: KVK_ANSI_KEYPAD7,
    Key.NUMPAD8: KVK_ANSI_KEYPAD8,
    Key.NUMPAD9: KVK_ANSI_KEYPAD9,
    Key.MUTE: KVK_MUTE,
    # The volume keys are crossed over, as the backend has always sent them.
    Key.VOLUME_DOWN: KVK_VOLUME_UP,
    Key.VOLUME_UP: KVK_VOLUME_DOWN,
    Key.HELP: KVK_HELP,
    Key.SNAPSHOT: KVK_F13,
    Key.CLEAR: KVK_ANSI_KEYPAD_CLEAR,
    Key.DECIMAL: KVK_ANSI_KEYPAD_DECIMAL,
    Key.MULTIPLY: KVK_ANSI_KEYPAD_MULTIPLY,
    Key.ADD: KVK_ANSI_KEYPAD_PLUS,
    Key.DIVIDE: KVK_ANSI_KEYPAD_DIVIDE,
    Key.NUMPAD_ENTER: KVK_ANSI_KEYPAD_ENTER,
    Key.SUBTRACT: KVK_ANSI_KEYPAD_MINUS,
    Key.EQUALS: KVK_ANSI_KEYPAD_EQUALS,
    Key.NUM_LOCK: KVK_ANSI_KEYPAD_CLEAR,
    Key.RWIN: KVK_RIGHT_COMMAND,
    Key.RIGHT_SHIFT: KVK_RIGHT_SHIFT,
    Key.RIGHT_CONTROL: KVK_RIGHT_CONTROL,
    Key.RIGHT_ALT: KVK_RIGHT_OPTION,
    Key.SUPER: KVK_COMMAND,
    Key.COMMAND: KVK_COMMAND,
    Key.WINDOWS: KVK_COMMAND,
    Key.META: KVK_COMMAND,
}


class EventFlags(IntFlag):
    """Modifier flags attached to posted events."""

    NULL = 0
    ALPHA_SHIFT = 0x00010000
    SHIFT = 0x00020000
    CONTROL = 0x00040000
    ALTERNATE = 0x00080000
    COMMAND = 0x00100000
    NUMERIC_PAD = 0x00200000


_MODIFIER_FLAGS = {
    Key.CAPS_LOCK: EventFlags.ALPHA_SHIFT,
    Key.SHIFT: EventFlags.SHIFT,
    Key.CONTROL: EventFlags.CONTROL,
    Key.ALT: EventFlags.ALTERNATE,
    Key.META: EventFlags.COMMAND,
    Key.NUM_LOCK: EventFlags.NUMERIC_PAD,
}

DEFAULT_DOUBLE_CLICK_INTERVAL = 500
"""Double-click interval in milliseconds when the system gives none."""


def layout_keycode(ch: str) -> int:
    """Return the ANSI keycode of a character key, or 0 if it has none."""
    return _ANSI_KEYCODES.get(ch, 0)


def key_to_keycode(key: AnyKey) -> int:
    """Return the virtual keycode for ``key``; 0 when the key has no mapping."""
    if isinstance(key, Raw):
        return key.code
    if isinstance(key, Layout):
        return layout_keycode(key.char)
    return _KEYCODES.get(key, 0)


def modifier_flag(key: AnyKey) -> EventFlags:
    """Return the event flag a modifier key contributes, or ``EventFlags.NULL``."""
    if isinstance(key, Key):
        return _MODIFIER_FLAGS.get(key, EventFlags.NULL)
    return EventFlags.NULL


class ClickCounter:
    """Counts consecutive mouse presses that fall within the double-click interval."""

    def __init__(self, double_click_interval: int = DEFAULT_DOUBLE_CLICK_INTERVAL) -> None:
        self.double_click_interval = double_click_interval
        self.count = 1
        self._last: Optional[float] = None

    def press(self, now: Optional[float] = None) -> int:
        """Record a press at ``now`` (seconds, monotonic) and return the click count."""
        if now is None:
            now = time.monotonic()
        if self._last is not None:
            elapsed_ms = int((now - self._last) * 1000)
            if elapsed_ms <= self.double_click_interval:
                self.count += 1
            else:
                self.count = 1
        self._last = now
        return self.count


def scroll_steps(length: int) -> tuple[int, int]:
    """Return ``(count, direction)`` of one-line wheel events for scrolling ``length``.

    Positive lengths scroll with direction -1, negative ones with direction 1.
    """
    if length < 0:
        return -length, 1
    return length, -1


def relative_target(
    current: tuple[int, int], delta: tuple[int, int], display_size: tuple[int, int]
) -> Optional[tuple[int, int]]:
    """Return the cursor position after moving by ``delta``, or ``None`` if it leaves the display.

    Coordinates have their origin at the top-left corner; the display's width
    and height themselves are still inside.
    """
    x, y = current[0] + delta[0], current[1] + delta[1]
    width, height = display_size
    if x < 0 or x > width or y < 0 or y > height:
        return None
    return x, y