import pytest

from yoyak.marker import MarkerScanner, make_marker

MARKER = "</a1b2>"


def test_make_marker_is_random_closing_tag():
    first, second = make_marker(), make_marker()
    assert first.startswith("</") and first.endswith(">")
    assert len(first) == len("</") + 6 + len(">")
    assert first != second


def test_plain_text_is_released_immediately():
    scanner = MarkerScanner(MARKER)
    assert scanner.feed("Bonjour ") == "Bonjour "
    assert scanner.feed("le monde") == "le monde"
    assert scanner.pending == ""
    assert not scanner.found


def test_marker_prefix_is_held_back_until_resolved():
    scanner = MarkerScanner(MARKER)
    assert scanner.feed("Hello <") == "Hello "
    assert scanner.pending == "<"
    assert scanner.feed("/a1") == ""
    assert scanner.pending == "</a1"
    assert scanner.feed("b2> trailing") == ""
    assert scanner.found
    assert scanner.feed("more") == ""


def test_held_text_is_released_when_it_is_not_the_marker():
    scanner = MarkerScanner(MARKER)
    assert scanner.feed("a </a1") == "a "
    assert scanner.feed("x b") == "</a1x b"
    assert not scanner.found


def test_text_before_marker_in_same_chunk_is_released():
    scanner = MarkerScanner(MARKER)
    assert scanner.feed("le monde</a1b2>\nignored") == "le monde"
    assert scanner.found


def test_marker_fed_one_character_at_a_time_never_leaks():
    scanner = MarkerScanner(MARKER)
    released: list[str] = []
    for ch in "Guten Tag</a1b2>ignored":
        out = scanner.feed(ch)
        assert "<" not in out
        released.append(out)
    assert "".join(released) == "Guten Tag"
    assert scanner.found


def test_flush_returns_pending_text():
    scanner = MarkerScanner(MARKER)
    scanner.feed("x </a")
    assert scanner.flush() == "</a"
    assert scanner.pending == ""


def test_empty_marker_rejected():
    with pytest.raises(ValueError):
        MarkerScanner("")
