"""Keys, mouse buttons and the interfaces an input backend implements."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import Union


class Key(Enum):
    """A named key on the keyboard.

    For characters use :class:`Layout`; for a raw platform keycode use :class:`Raw`.
    """

    ALT = auto()
    BACKSPACE = auto()
    CAPS_LOCK = auto()
    COMMAND = auto()  # deprecated, use META
    CONTROL = auto()
    DELETE = auto()
    DOWN_ARROW = auto()
    END = auto()
    ESCAPE = auto()
    F1 = auto()
    F10 = auto()
    F11 = auto()
    F12 = auto()
    F2 = auto()
    F3 = auto()
    F4 = auto()
    F5 = auto()
    F6 = auto()
    F7 = auto()
    F8 = auto()
    F9 = auto()
    HOME = auto()
    LEFT_ARROW = auto()
    META = auto()
    OPTION = auto()  # deprecated, use ALT
    PAGE_DOWN = auto()
    PAGE_UP = auto()
    RETURN = auto()
    RIGHT_ARROW = auto()
    SHIFT = auto()
    SPACE = auto()
    SUPER = auto()  # deprecated, use META
    TAB = auto()
    UP_ARROW = auto()
    WINDOWS = auto()  # deprecated, use META
    NUMPAD0 = auto()
    NUMPAD1 = auto()
    NUMPAD2 = auto()
    NUMPAD3 = auto()
    NUMPAD4 = auto()
    NUMPAD5 = auto()
    NUMPAD6 = auto()
    NUMPAD7 = auto()
    NUMPAD8 = auto()
    NUMPAD9 = auto()
    CANCEL = auto()
    CLEAR = auto()
    PAUSE = auto()
    KANA = auto()
    HANGUL = auto()
    JUNJA = auto()
    FINAL = auto()
    HANJA = auto()
    KANJI = auto()
    CONVERT = auto()
    SELECT = auto()
    PRINT = auto()
    EXECUTE = auto()
    SNAPSHOT = auto()
    INSERT = auto()
    HELP = auto()
    SLEEP = auto()
    SEPARATOR = auto()
    VOLUME_UP = auto()
    VOLUME_DOWN = auto()
    MUTE = auto()
    SCROLL = auto()
    NUM_LOCK = auto()
    RWIN = auto()
    APPS = auto()
    MULTIPLY = auto()
    ADD = auto()
    SUBTRACT = auto()
    DECIMAL = auto()
    DIVIDE = auto()
    EQUALS = auto()
    NUMPAD_ENTER = auto()
    RIGHT_SHIFT = auto()
    RIGHT_CONTROL = auto()
    RIGHT_ALT = auto()


@dataclass(frozen=True)
class Layout:
    """A key identified by the character it produces in the current keyboard layout."""

    char: str

    def __post_init__(self) -> None:
        if not isinstance(self.char, str) or len(self.char) != 1:
            raise ValueError(f"layout key needs exactly one character, got {self.char!r}")


@dataclass(frozen=True)
class Raw:
    """A key identified by a raw 16-bit platform keycode."""

    code: int

    def __post_init__(self) -> None:
        if not isinstance(self.code, int) or not 0 <= self.code <= 0xFFFF:
            raise ValueError(f"raw keycode must be in 0..65535, got {self.code!r}")


AnyKey = Union[Key, Layout, Raw]


class MouseButton(Enum):
    """A mouse button. The scroll variants are not meant for general use."""

    LEFT = auto()
    MIDDLE = auto()
    RIGHT = auto()
    SCROLL_UP = auto()
    SCROLL_DOWN = auto()
    SCROLL_LEFT = auto()
    SCROLL_RIGHT = auto()


class MouseControllable(ABC):
    """Mouse operations an input backend provides."""

    @abstractmethod
    def mouse_move_to(self, x: int, y: int) -> None:
        """Move the cursor to absolute screen coordinates."""

    @abstractmethod
    def mouse_move_relative(self, x: int, y: int) -> None:
        """Move the cursor by the given offsets."""

    @abstractmethod
    def mouse_down(self, button: MouseButton) -> None:
        """Press a mouse button and hold it; raises on failure."""

    @abstractmethod
    def mouse_up(self, button: MouseButton) -> None:
        """Release a mouse button."""

    @abstractmethod
    def mouse_click(self, button: MouseButton) -> None:
        """Press and release a mouse button."""

    @abstractmethod
    def mouse_scroll_x(self, length: int) -> None:
        """Scroll horizontally; positive is right, negative is left."""

    @abstractmethod
    def mouse_scroll_y(self, length: int) -> None:
        """Scroll vertically; positive is down, negative is up."""


class KeyboardControllable(ABC):
    """Keyboard operations an input backend provides."""

    def key_sequence_parse(self, sequence: str) -> None:
        """Type a string written in the key DSL, e.g. ``{+SHIFT}hello{-SHIFT}``.

        Raises :class:`hbbkit.dsl.ParseError` if the sequence is malformed;
        nothing is typed in that case.
        """
        from .dsl import evaluate

        evaluate(self, sequence)

    @abstractmethod
    def key_sequence(self, sequence: str) -> None:
        """Type the given text, independent of the keyboard layout."""

    @abstractmethod
    def key_down(self, key: AnyKey) -> None:
        """Press a key and hold it; raises on failure."""

    @abstractmethod
    def key_up(self, key: AnyKey) -> None:
        """Release a key pressed with :meth:`key_down`."""

    @abstractmethod
    def key_click(self, key: AnyKey) -> None:
        """Press and release a key."""

    @abstractmethod
    def get_key_state(self, key: AnyKey) -> bool:
        """Return whether the key is down (or, for lock keys, toggled on)."""