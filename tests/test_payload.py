"""
Unit tests for cue payload parsing.

This module tests:
- recognized karaoke spans and bare timestamp tags
- the recovery paths for malformed markup
- CuePayload rendering and list behavior
"""

import pytest

from vtt_payload.fragment import PlainText, TimedText
from vtt_payload.payload import CuePayload, CuePayloadParser, parse_cue_payload
from vtt_payload.timestamp import VttTimestamp


def ts(value):
    return VttTimestamp.from_str(value)


class TestRecognizedMarkup:
    """Test payloads whose tags are timestamps."""

    def test_karaoke_line(self):
        assert parse_cue_payload("when<00:00:00.199><c> I</c><00:00:00.280><c> started</c>") == [
            PlainText("when"),
            TimedText(ts("00:00:00.199"), " I"),
            TimedText(ts("00:00:00.280"), " started"),
        ]

    def test_timestamp_without_span(self):
        assert parse_cue_payload("<00:00:01.000>") == [TimedText(ts("00:00:01.000"), "")]

    def test_timestamp_followed_by_plain_text(self):
        assert parse_cue_payload("<00:00:01.000> hello") == [
            TimedText(ts("00:00:01.000"), ""),
            PlainText(" hello"),
        ]

    def test_empty_span(self):
        assert parse_cue_payload("<00:00:01.000><c></c>") == [TimedText(ts("00:00:01.000"), "")]

    def test_short_timestamp_form(self):
        assert parse_cue_payload("<01:02.500><c>x</c>") == [TimedText(ts("00:01:02.500"), "x")]

    def test_span_text_may_contain_angle_brackets(self):
        assert parse_cue_payload("<00:00:01.000><c>a<b</c>") == [TimedText(ts("00:00:01.000"), "a<b")]

    def test_whitespace_between_tags_is_dropped(self):
        assert parse_cue_payload("<00:00:01.000><c>a</c>   <00:00:02.000><c>b</c>  ") == [
            TimedText(ts("00:00:01.000"), "a"),
            TimedText(ts("00:00:02.000"), "b"),
        ]

    def test_newlines_are_ordinary_text(self):
        assert parse_cue_payload(" \nwhen<00:00:00.199><c> I</c>\n") == [
            PlainText(" \nwhen"),
            TimedText(ts("00:00:00.199"), " I"),
        ]

    def test_span_must_follow_timestamp_immediately(self):
        assert parse_cue_payload("<00:00:01.000> <c>x</c>") == [
            TimedText(ts("00:00:01.000"), ""),
            PlainText("<"),
            PlainText("c>x"),
            PlainText("<"),
            PlainText("/c>"),
        ]


class TestRecovery:
    """Test that malformed markup degrades to literal text."""

    def test_non_timestamp_tag_peels_one_character(self):
        assert parse_cue_payload("a <b> b") == [PlainText("a "), PlainText("<"), PlainText("b> b")]

    def test_unterminated_span_keeps_rest_verbatim(self):
        assert parse_cue_payload("text <00:00:02.000><c>unterminated") == [
            PlainText("text "),
            PlainText("<c>unterminated"),
        ]

    def test_unterminated_tag_keeps_rest_verbatim(self):
        assert parse_cue_payload("hi <00:00:01") == [PlainText("hi "), PlainText("<00:00:01")]

    def test_unterminated_tag_remainder_is_emitted_once(self):
        assert parse_cue_payload("<   ") == [PlainText("<   ")]

    def test_styling_tags_are_reproduced_piecewise(self):
        assert parse_cue_payload("<i>x</i>") == [
            PlainText("<"),
            PlainText("i>x"),
            PlainText("<"),
            PlainText("/i>"),
        ]

    def test_voice_tag(self):
        fragments = parse_cue_payload("<v Roger>Hi")
        assert fragments == [PlainText("<"), PlainText("v Roger>Hi")]

    def test_nested_angle_bracket_before_timestamp(self):
        assert parse_cue_payload("<<00:00:01.000><c>x</c>") == [
            PlainText("<"),
            TimedText(ts("00:00:01.000"), "x"),
        ]

    def test_many_open_brackets_share_one_close_bracket(self):
        fragments = parse_cue_payload("<" * 20_000 + ">")
        assert len(fragments) == 20_001
        assert fragments[-1] == PlainText(">")
        assert all(fragment == PlainText("<") for fragment in fragments[:-1])

    def test_open_brackets_without_close_bracket(self):
        assert parse_cue_payload("<" * 20_000) == [PlainText("<" * 20_000)]


@pytest.mark.parametrize("payload", ["hello", " padded ", "line\nbreak", "a > b"])
def test_text_without_tags_is_one_fragment(payload):
    assert parse_cue_payload(payload) == [PlainText(payload)]


@pytest.mark.parametrize("payload", ["", " ", "\n", " \t\n "])
def test_blank_text_without_tags_is_empty(payload):
    assert parse_cue_payload(payload) == []


@pytest.mark.parametrize(
    "payload",
    [
        "when<00:00:00.199><c> I</c><00:00:00.280><c> started</c>",
        "<00:00:01.000>",
        "<00:00:01.000> hello",
        "a <b> b",
        "<i>x</i> and <00:00:01.000><c>y</c>",
        "hi <00:00:01",
        "< <00:00:01.000><c>a</c>",
        "<00:00:01.000>x</c>",
        "<02:03.004><c>short</c>",
    ],
)
def test_render_then_parse_is_stable(payload):
    fragments = parse_cue_payload(payload)
    rendered = "".join(fragment.render() for fragment in fragments)
    assert parse_cue_payload(rendered) == fragments


def test_unterminated_span_settles_after_one_more_cycle():
    first = parse_cue_payload("text <00:00:02.000><c>unterminated")
    second = parse_cue_payload(CuePayload(first).render())
    assert CuePayload(second).render() == CuePayload(first).render()
    assert parse_cue_payload(CuePayload(second).render()) == second


def test_each_nested_unterminated_span_needs_one_more_cycle():
    cycles = [parse_cue_payload("/<01:02.500><c><01:02.500><c>")]
    for _ in range(3):
        cycles.append(parse_cue_payload(CuePayload(cycles[-1]).render()))

    assert cycles[0] == [PlainText("/"), PlainText("<c><01:02.500><c>")]
    assert cycles[1] != cycles[2]
    assert CuePayload(cycles[1]).render() == CuePayload(cycles[2]).render() == "/<c><c>"
    assert cycles[2] == cycles[3] == [
        PlainText("/"),
        PlainText("<"),
        PlainText("c>"),
        PlainText("<"),
        PlainText("c>"),
    ]


def test_parser_accepts_another_timestamp_type():
    class StrictHoursTimestamp(VttTimestamp):
        @classmethod
        def parse_span(cls, text, start, end):
            if end - start < 12:
                return None
            return super().parse_span(text, start, end)

    parser = CuePayloadParser(timestamp_type=StrictHoursTimestamp)
    fragments = parser.parse("<01:00.000><c>a</c><00:01:00.000><c>b</c>")
    assert fragments[0] == PlainText("<")
    assert fragments[-1].text == "b"
    assert fragments[-1].timestamp.total_millis == 60_000


class TestCuePayload:
    """Test the list-like fragment container."""

    def test_from_text_and_render(self):
        payload = CuePayload.from_text("when<00:00:00.199><c> I</c>")
        assert payload.render() == "when<00:00:00.199><c> I</c>"
        assert str(payload) == payload.render()

    def test_render_canonicalizes_bare_timestamps(self):
        payload = CuePayload.from_text("<00:01.000>go")
        assert payload.render() == "<00:00:01.000><c></c>go"

    def test_plain_text_drops_karaoke_markup_only(self):
        payload = CuePayload.from_text("<i>when</i><00:00:00.199><c> I</c>")
        assert payload.plain_text() == "<i>when</i> I"

    def test_timed_fragments_and_karaoke_flag(self):
        payload = CuePayload.from_text("when<00:00:00.199><c> I</c>")
        assert payload.is_karaoke
        assert payload.timed_fragments() == [TimedText(ts("00:00:00.199"), " I")]
        assert not CuePayload.from_text("just text").is_karaoke

    def test_is_editable_like_a_list(self):
        payload = CuePayload.from_text("when<00:00:00.199><c> I</c>")
        payload.append(TimedText(ts("00:00:00.280"), " started"))
        payload.insert(0, PlainText(">> "))
        del payload[1]
        assert payload.render() == ">> <00:00:00.199><c> I</c><00:00:00.280><c> started</c>"
        assert len(payload) == 3

    def test_equals_plain_list_of_same_fragments(self):
        assert CuePayload.from_text("a <b> b") == parse_cue_payload("a <b> b")

    def test_repr_names_the_type(self):
        assert repr(CuePayload([PlainText("x")])) == "CuePayload([PlainText(text='x')])"
