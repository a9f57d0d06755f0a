import pytest

from hbbkit.dsl import UnknownTagError, UnmatchedOpenError
from hbbkit.keys import (
    Key,
    KeyboardControllable,
    Layout,
    MouseButton,
    MouseControllable,
    Raw,
)


class RecordingKeyboard(KeyboardControllable):
    def __init__(self):
        self.events = []

    def key_sequence(self, sequence):
        self.events.append(("sequence", sequence))

    def key_down(self, key):
        self.events.append(("down", key))

    def key_up(self, key):
        self.events.append(("up", key))

    def key_click(self, key):
        self.events.append(("click", key))

    def get_key_state(self, key):
        return False


def test_key_sequence_parse_with_modifier():
    kb = RecordingKeyboard()
    kb.key_sequence_parse("{+CTRL}a{-CTRL}")
    assert kb.events == [
        ("down", Key.CONTROL),
        ("click", Layout("a")),
        ("up", Key.CONTROL),
    ]


def test_key_sequence_parse_unicode_block():
    kb = RecordingKeyboard()
    kb.key_sequence_parse("{+UNICODE}{{Hello World!}} ❤️{-UNICODE}{+CTRL}a{-CTRL}")
    assert kb.events == [
        ("sequence", "{Hello World!} ❤️"),
        ("down", Key.CONTROL),
        ("click", Layout("a")),
        ("up", Key.CONTROL),
    ]


def test_key_sequence_parse_raises_and_types_nothing():
    kb = RecordingKeyboard()
    with pytest.raises(UnmatchedOpenError):
        KeyboardControllable.key_sequence_parse(kb, "abc{+SHIFT")
    assert kb.events == []


def test_key_sequence_parse_unknown_tag():
    kb = RecordingKeyboard()
    with pytest.raises(UnknownTagError):
        KeyboardControllable.key_sequence_parse(kb, "{+TEST}x{-TEST}")
    assert kb.events == []


def test_abstract_interfaces_cannot_be_instantiated():
    with pytest.raises(TypeError):
        MouseControllable()
    with pytest.raises(TypeError):
        KeyboardControllable()


def test_layout_requires_single_character():
    with pytest.raises(ValueError):
        Layout("ab")
    with pytest.raises(ValueError):
        Layout("")


def test_layout_equality_and_hash():
    assert Layout("a") == Layout("a")
    assert {Layout("a"), Layout("a"), Layout("b")} == {Layout("a"), Layout("b")}


def test_raw_range():
    assert Raw(0x38).code == 0x38
    assert Raw(0xFFFF).code == 0xFFFF
    with pytest.raises(ValueError):
        Raw(0x10000)
    with pytest.raises(ValueError):
        Raw(-1)


def test_meta_and_alt_tags_press_current_keys_not_deprecated_ones():
    kb = RecordingKeyboard()
    KeyboardControllable.key_sequence_parse(kb, "{+META}{-META}{+ALT}{-ALT}")
    assert kb.events == [
        ("down", Key.META),
        ("up", Key.META),
        ("down", Key.ALT),
        ("up", Key.ALT),
    ]
    pressed = {key for _, key in kb.events}
    assert Key.COMMAND not in pressed
    assert Key.SUPER not in pressed
    assert Key.OPTION not in pressed