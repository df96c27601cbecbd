import pytest

import eline_codec
from eline_codec.bits import BitStream
from eline_codec.charsets import CHARSET_NAMES
from eline_codec.submethods import (
    MethodResult,
    assemble_charset_index,
    conceal_in_extended_line,
    conceal_in_random_whitespace,
    conceal_in_trailing_character,
    find_approx_whitespace_position,
    reveal_in_extended_line,
    reveal_in_random_whitespace,
    reveal_in_trailing_character,
)
from eline_codec.text import (
    WordCursor,
    graphemes_length,
    normalize_whitespace,
    split_lines,
    verify_pivot,
)

EN_QUAD = chr(0x2000)
EM_QUAD = chr(0x2001)
COMBINING_ACUTE = chr(0x0301)
FLAG_US = chr(0x1F1FA) + chr(0x1F1F8)


class FixedRandom:
    def __init__(self, value: int = 0):
        self.value = value

    def randrange(self, stop: int) -> int:
        return min(self.value, stop - 1)


def test_bytes_to_bits_is_msb_first() -> None:
    assert eline_codec.bytes_to_bits(b"E") == [0, 1, 0, 0, 0, 1, 0, 1]
    assert eline_codec.bytes_to_bits(b"") == []


def test_bits_to_bytes_requires_whole_bytes() -> None:
    with pytest.raises(eline_codec.NotByteAlignedError):
        eline_codec.bits_to_bytes([0, 1, 0])


def test_bits_to_bytes_rejects_non_binary_values() -> None:
    with pytest.raises(ValueError):
        eline_codec.bits_to_bytes([0, 1, 2, 0, 0, 0, 0, 0])


@pytest.mark.parametrize(
    "length,expected",
    [(None, b"E\x00"), (1, b"E"), (0, b""), (3, b"E\x00\x00")],
)
def test_bits_to_bytes_length(length, expected: bytes) -> None:
    bits = eline_codec.pad_bits([0, 1, 0, 0, 0, 1, 0, 1, 0, 0, 0])
    assert len(bits) == 16
    assert eline_codec.bits_to_bytes(bits, length=length) == expected


def test_bit_stream_take_returns_short_tail() -> None:
    stream = BitStream([1, 0, 1])
    assert stream.next_bit() == 1
    assert stream.take(5) == [0, 1]
    assert stream.exhausted
    assert stream.next_bit() is None
    assert stream.take(2) == []


@pytest.mark.parametrize(
    "name,size,bitrate",
    [
        ("full", 31, 5),
        ("twitter", 15, 4),
        ("four_bit", 15, 4),
        ("three_bit", 7, 3),
        ("two_bit", 3, 2),
        ("one_bit", 1, 1),
    ],
)
def test_predefined_character_sets(name: str, size: int, bitrate: int) -> None:
    charset = eline_codec.get_character_set(name)
    assert charset.size() == size
    assert charset.bitrate() == bitrate


@pytest.mark.parametrize("name", CHARSET_NAMES)
def test_character_mapping_is_inverse(name: str) -> None:
    charset = eline_codec.get_character_set(name)
    assert charset.get_character(0) is None
    for index in range(1, charset.size() + 1):
        assert charset.character_to_bits(charset.get_character(index)) == index
    assert charset.character_to_bits("x") == 0


def test_character_index_out_of_range() -> None:
    charset = eline_codec.get_character_set("two_bit")
    with pytest.raises(IndexError):
        charset.get_character(4)


@pytest.mark.parametrize(
    "characters",
    [[], [" ", EN_QUAD], [" ", " ", EN_QUAD], ["ab"]],
)
def test_invalid_character_sets_are_rejected(characters) -> None:
    with pytest.raises(ValueError):
        eline_codec.CharacterSet("custom", characters)


def test_unknown_charset_name() -> None:
    with pytest.raises(ValueError, match="Unknown charset"):
        eline_codec.get_character_set("five_bit")


def test_graphemes_length_counts_clusters() -> None:
    assert graphemes_length("cafe" + COMBINING_ACUTE) == 4
    assert graphemes_length(FLAG_US) == 1
    assert graphemes_length("") == 0


def test_line_helpers() -> None:
    assert split_lines("a\r\nb\nc") == ["a", "b", "c"]
    assert normalize_whitespace("a  b" + EN_QUAD + "c ") == "a b c"
    assert eline_codec.determine_pivot("a bb ccc") == 4
    assert eline_codec.determine_pivot("") == 0


def test_word_cursor_builds_pivot_lines() -> None:
    cursor = WordCursor("a b c a b c ")
    assert cursor.construct_pivot_line(3) == "a b"
    assert cursor.construct_pivot_line(3) == "c a"
    assert cursor.construct_pivot_line(3) == "b c"
    assert cursor.construct_pivot_line(3) == ""


def test_verify_pivot_names_offending_word() -> None:
    with pytest.raises(eline_codec.PivotTooSmallError) as exc_info:
        verify_pivot("A little panda", 2)
    assert exc_info.value == eline_codec.PivotTooSmallError("little", 2)
    assert "little" in str(exc_info.value)


def test_extended_line_zero_bit_leaves_line() -> None:
    words = WordCursor("next")
    result = conceal_in_extended_line("ab cd", 5, words, BitStream([0]))
    assert result == ("ab cd", 1, MethodResult.SUCCESS)
    assert words.peek() == "next"


def test_extended_line_one_bit_appends_word() -> None:
    words = WordCursor("next")
    result = conceal_in_extended_line("ab cd", 5, words, BitStream([1]))
    assert result.line == "ab cd next"
    assert words.peek() is None


def test_extended_line_too_short() -> None:
    with pytest.raises(eline_codec.CoverTextTooSmallError) as exc_info:
        conceal_in_extended_line("a", 5, WordCursor("b"), BitStream([1]))
    assert exc_info.value == eline_codec.CoverTextTooSmallError(
        eline_codec.CoverTooSmallReason.CONSTRUCTED_TOO_SHORT_LINE, 0, 5
    )


def test_pivot_line_counts_leading_combining_mark_once() -> None:
    cursor = WordCursor("ab " + COMBINING_ACUTE + "cd ef")
    assert cursor.construct_pivot_line(5) == "ab " + COMBINING_ACUTE + "cd"
    assert cursor.construct_pivot_line(5) == "ef"


def test_extended_line_measures_joined_graphemes() -> None:
    words = WordCursor(COMBINING_ACUTE + "cd")
    result = conceal_in_extended_line("ab", 4, words, BitStream([1]))
    assert result.line == "ab " + COMBINING_ACUTE + "cd"

    with pytest.raises(eline_codec.CoverTextTooSmallError) as exc_info:
        conceal_in_extended_line(
            "ab", 5, WordCursor(COMBINING_ACUTE + "cd"), BitStream([1])
        )
    assert exc_info.value.reason is eline_codec.CoverTooSmallReason.CONSTRUCTED_TOO_SHORT_LINE


def test_extended_line_without_data() -> None:
    result = conceal_in_extended_line("ab", 5, WordCursor("b"), BitStream([]))
    assert result == ("ab", 0, MethodResult.NO_DATA_LEFT)


def test_reveal_extended_line_ignores_extra_whitespace() -> None:
    assert reveal_in_extended_line("ab  cd ", 5) == ("ab  cd ", [0])
    assert reveal_in_extended_line("ab cd ef", 5) == ("ab cd ef", [1])


@pytest.mark.parametrize("value,expected", [(0, 2), (4, 2), (6, 5), (100, 5)])
def test_find_approx_whitespace_position(value: int, expected: int) -> None:
    assert find_approx_whitespace_position("ab cd ef", FixedRandom(value)) == expected


def test_random_whitespace_round_trip() -> None:
    result = conceal_in_random_whitespace("ab cd ef", BitStream([1]), FixedRandom(6))
    assert result.line == "ab cd  ef"
    assert reveal_in_random_whitespace(result.line) == ("ab cd ef", [1])
    assert reveal_in_random_whitespace("ab cd ef") == ("ab cd ef", [0])


def test_random_whitespace_needs_two_words() -> None:
    with pytest.raises(eline_codec.NotEnoughWordsOnPivotLineError) as exc_info:
        conceal_in_random_whitespace("Words.", BitStream([1]), FixedRandom())
    assert exc_info.value.line == "Words."


def test_assemble_charset_index_pads_short_chunks() -> None:
    assert assemble_charset_index([1, 1], 2) == 3
    assert assemble_charset_index([1], 2) == 2
    assert assemble_charset_index([0, 1, 1], 3) == 3


def test_trailing_character_partial_chunk() -> None:
    charset = eline_codec.get_character_set("two_bit")
    result = conceal_in_trailing_character("ab", BitStream([1]), charset)
    assert result == ("ab" + EN_QUAD, 1, MethodResult.NO_DATA_LEFT)


def test_trailing_character_reveal() -> None:
    charset = eline_codec.get_character_set("two_bit")
    assert reveal_in_trailing_character("abc" + EM_QUAD, charset) == ("abc", [1, 1])
    assert reveal_in_trailing_character("abc", charset) == ("abc", [0, 0])
    assert reveal_in_trailing_character("", charset) == ("", [])


def test_notifier_delivers_to_callables_and_observers() -> None:
    received = []

    class Recorder(eline_codec.Observer):
        def on_notify(self, event) -> None:
            received.append(("observer", event))

    def callback(event) -> None:
        received.append(("callable", event))

    notifier = eline_codec.EventNotifier()
    recorder = Recorder()
    notifier.subscribe(recorder)
    notifier.subscribe(callback)
    notifier.notify(eline_codec.DataWritten(3))
    notifier.unsubscribe(recorder)
    notifier.notify(eline_codec.Finished())

    assert received == [
        ("observer", eline_codec.DataWritten(3)),
        ("callable", eline_codec.DataWritten(3)),
        ("callable", eline_codec.Finished()),
    ]
    assert notifier.count_subscribers() == 1


def test_notifier_prunes_subscribers_that_are_no_longer_alive(caplog) -> None:
    received = []
    state = {"alive": True}

    notifier = eline_codec.EventNotifier()
    notifier.subscribe(received.append, is_alive=lambda: state["alive"])
    notifier.notify(eline_codec.DataWritten(1))
    state["alive"] = False
    with caplog.at_level("WARNING", logger="eline_codec.observer"):
        notifier.notify(eline_codec.Finished())
    assert received == [eline_codec.DataWritten(1)]
    assert notifier.count_subscribers() == 0
    assert "Stale subscriber" in caplog.text


def test_notifier_rejects_non_callable() -> None:
    with pytest.raises(TypeError):
        eline_codec.EventNotifier().subscribe(42)


def test_observer_requires_on_notify() -> None:
    with pytest.raises(TypeError):
        eline_codec.Observer()


def test_conceal_errors_compare_by_fields_and_hash() -> None:
    first = eline_codec.PivotTooSmallError("little", 2)
    second = eline_codec.PivotTooSmallError("little", 2)
    assert first == second
    assert len({first, eline_codec.NotEnoughWordsOnPivotLineError("Words.")}) == 2
