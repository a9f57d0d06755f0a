"""Key names, button numbers and modifier masks used by the X11 ``xdo`` backend."""

from __future__ import annotations

from .keys import AnyKey, Key, Layout, MouseButton, Raw

CURRENT_WINDOW = 0
DEFAULT_DELAY = 12000
"""Default delay per keypress, in microseconds."""

_BUTTON_CODES = {
    MouseButton.LEFT: 1,
    MouseButton.MIDDLE: 2,
    MouseButton.RIGHT: 3,
    MouseButton.SCROLL_UP: 4,
    MouseButton.SCROLL_DOWN: 5,
    MouseButton.SCROLL_LEFT: 6,
    MouseButton.SCROLL_RIGHT: 7,
}

_KEY_NAMES = {
    Key.ALT: "Alt",
    Key.BACKSPACE: "BackSpace",
    Key.CAPS_LOCK: "Caps_Lock",
    Key.CONTROL: "Control",
    Key.DELETE: "Delete",
    Key.DOWN_ARROW: "Down",
    Key.END: "End",
    Key.ESCAPE: "Escape",
    Key.F1: "F1",
    Key.F10: "F10",
    Key.F11: "F11",
    Key.F12: "F12",
    Key.F2: "F2",
    Key.F3: "F3",
    Key.F4: "F4",
    Key.F5: "F5",
    Key.F6: "F6",
    Key.F7: "F7",
    Key.F8: "F8",
    Key.F9: "F9",
    Key.HOME: "Home",
    Key.LEFT_ARROW: "Left",
    Key.OPTION: "Option",
    Key.PAGE_DOWN: "Page_Down",
    Key.PAGE_UP: "Page_Up",
    Key.RETURN: "Return",
    Key.RIGHT_ARROW: "Right",
    Key.SHIFT: "Shift",
    Key.SPACE: "space",
    Key.TAB: "Tab",
    Key.UP_ARROW: "Up",
    Key.NUMPAD0: "U30",
    Key.NUMPAD1: "U31",
    Key.NUMPAD2: "U32",
    Key.NUMPAD3: "U33",
    Key.NUMPAD4: "U34",
    Key.NUMPAD5: "U35",
    Key.NUMPAD6: "U36",
    Key.NUMPAD7: "U37",
    Key.NUMPAD8: "U38",
    Key.NUMPAD9: "U39",
    Key.DECIMAL: "U2E",
    Key.CANCEL: "Cancel",
    Key.CLEAR: "Clear",
    Key.PAUSE: "Pause",
    Key.KANA: "Kana",
    Key.HANGUL: "Hangul",
    Key.JUNJA: "",
    Key.FINAL: "",
    Key.HANJA: "Hanja",
    Key.KANJI: "Kanji",
    Key.CONVERT: "",
    Key.SELECT: "Select",
    Key.PRINT: "Print",
    Key.EXECUTE: "Execute",
    Key.SNAPSHOT: "3270_PrintScreen",
    Key.INSERT: "Insert",
    Key.HELP: "Help",
    Key.SLEEP: "",
    Key.SEPARATOR: "KP_Separator",
    Key.VOLUME_UP: "",
    Key.VOLUME_DOWN: "",
    Key.MUTE: "",
    Key.SCROLL: "Scroll_Lock",
    Key.NUM_LOCK: "Num_Lock",
    Key.RWIN: "Super_R",
    Key.APPS: "Menu",
    Key.MULTIPLY: "KP_Multiply",
    Key.ADD: "KP_Add",
    Key.SUBTRACT: "KP_Subtract",
    Key.DIVIDE: "KP_Divide",
    Key.EQUALS: "KP_Equal",
    Key.NUMPAD_ENTER: "KP_Enter",
    Key.RIGHT_SHIFT: "Shift_R",
    Key.RIGHT_CONTROL: "Control_R",
    Key.RIGHT_ALT: "Alt_R",
    Key.COMMAND: "Super",
    Key.SUPER: "Super",
    Key.WINDOWS: "Super",
    Key.META: "Super",
}

MOD_SHIFT = 1 << 0
MOD_LOCK = 1 << 1
MOD_CONTROL = 1 << 2
MOD_ALT = 1 << 3
MOD_NUMLOCK = 1 << 4
MOD_META = 1 << 6

_MODIFIER_BITS = {
    Key.SHIFT: MOD_SHIFT,
    Key.CAPS_LOCK: MOD_LOCK,
    Key.CONTROL: MOD_CONTROL,
    Key.ALT: MOD_ALT,
    Key.NUM_LOCK: MOD_NUMLOCK,
    Key.META: MOD_META,
}


def mouse_button_code(button: MouseButton) -> int:
    """Return the X11 button number for a mouse button."""
    return _BUTTON_CODES[button]


def keysequence(key: AnyKey) -> str:
    """Return the key sequence string xdo expects for ``key``.

    Layout keys become ``U<hex code point>``, raw keys their decimal code;
    named keys without an X11 equivalent give an empty string.
    """
    if isinstance(key, Layout):
        return f"U{ord(key.char):X}"
    if isinstance(key, Raw):
        return str(key.code)
    return _KEY_NAMES.get(key, "")


def key_state_from_mask(key: AnyKey, mask: int) -> bool:
    """Tell whether ``key`` is active in an X11 input-state modifier mask."""
    bit = _MODIFIER_BITS.get(key) if isinstance(key, Key) else None
    return bit is not None and mask & bit != 0


def _scroll_clicks(length: int, negative: MouseButton, positive: MouseButton) -> list[MouseButton]:
    button = negative if length < 0 else positive
    return [button] * abs(length)


def scroll_x_clicks(length: int) -> list[MouseButton]:
    """Button clicks that scroll horizontally by ``length`` lines (negative is left)."""
    return _scroll_clicks(length, MouseButton.SCROLL_LEFT, MouseButton.SCROLL_RIGHT)


def scroll_y_clicks(length: int) -> list[MouseButton]:
    """Button clicks that scroll vertically by ``length`` lines (negative is up)."""
    return _scroll_clicks(length, MouseButton.SCROLL_UP, MouseButton.SCROLL_DOWN)