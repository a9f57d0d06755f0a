import pytest

from hbbkit.dsl import (
    ParseError,
    Token,
    TokenKind,
    UnexpectedOpenError,
    UnknownTagError,
    UnmatchedCloseError,
    UnmatchedOpenError,
    evaluate,
    tokenize,
)
from hbbkit.keys import Key, KeyboardControllable, Layout


class RecordingKeyboard(KeyboardControllable):
    def __init__(self, fail_down=False):
        self.events = []
        self.fail_down = fail_down

    def key_sequence(self, sequence):
        self.events.append(("sequence", sequence))

    def key_down(self, key):
        self.events.append(("down", key))
        if self.fail_down:
            raise OSError("cannot press")

    def key_up(self, key):
        self.events.append(("up", key))

    def key_click(self, key):
        self.events.append(("click", key))

    def get_key_state(self, key):
        return False


def test_success():
    assert tokenize("{{Hello World!}} {+CTRL}hi{-CTRL}") == [
        Token(TokenKind.SEQUENCE, "{Hello World!} "),
        Token(TokenKind.KEY_DOWN, Key.CONTROL),
        Token(TokenKind.SEQUENCE, "hi"),
        Token(TokenKind.KEY_UP, Key.CONTROL),
    ]


def test_unexpected_open():
    with pytest.raises(UnexpectedOpenError):
        tokenize("{hello{}world}")


def test_unmatched_open():
    with pytest.raises(UnmatchedOpenError):
        tokenize("{this is going to fail")


def test_unmatched_close():
    with pytest.raises(UnmatchedCloseError):
        tokenize("{+CTRL}{{this}} is going to fail}")


def test_lone_open_at_end():
    with pytest.raises(UnmatchedOpenError):
        tokenize("abc{")


def test_unknown_tag_carries_name():
    with pytest.raises(UnknownTagError) as info:
        tokenize("{+TEST}{-TEST}")
    assert info.value.tag == "+TEST"
    assert isinstance(info.value, ParseError)


def test_unicode_mode_switch():
    assert tokenize("ab{+UNICODE}cd{-UNICODE}ef") == [
        Token(TokenKind.SEQUENCE, "ab"),
        Token(TokenKind.UNICODE, "cd"),
        Token(TokenKind.SEQUENCE, "ef"),
    ]


def test_all_modifier_tags():
    tokens = tokenize("{+SHIFT}{-SHIFT}{+META}{-META}{+ALT}{-ALT}")
    assert tokens == [
        Token(TokenKind.KEY_DOWN, Key.SHIFT),
        Token(TokenKind.KEY_UP, Key.SHIFT),
        Token(TokenKind.KEY_DOWN, Key.META),
        Token(TokenKind.KEY_UP, Key.META),
        Token(TokenKind.KEY_DOWN, Key.ALT),
        Token(TokenKind.KEY_UP, Key.ALT),
    ]


def test_empty_input_gives_no_tokens():
    assert tokenize("") == []


def test_evaluate_dispatches_events():
    kb = RecordingKeyboard()
    evaluate(kb, "{+SHIFT}ab{-SHIFT}{+UNICODE}❤{-UNICODE}")
    assert kb.events == [
        ("down", Key.SHIFT),
        ("click", Layout("a")),
        ("click", Layout("b")),
        ("up", Key.SHIFT),
        ("sequence", "❤"),
    ]


def test_evaluate_ignores_key_down_failure():
    kb = RecordingKeyboard(fail_down=True)
    evaluate(kb, "{+CTRL}x{-CTRL}")
    assert kb.events == [
        ("down", Key.CONTROL),
        ("click", Layout("x")),
        ("up", Key.CONTROL),
    ]


def test_evaluate_sends_nothing_on_parse_error():
    kb = RecordingKeyboard()
    with pytest.raises(UnmatchedCloseError):
        evaluate(kb, "{+CTRL}abc}")
    assert kb.events == []