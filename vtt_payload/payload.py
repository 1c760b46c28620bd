"""
Cue payload parsing into plain and karaoke-timed fragments.

Design note:
- Parsing is total: malformed markup degrades to literal text, it never raises.
- One forward pass over index offsets into the original string, no backtracking.
- Keep a parser class plus a function wrapper for callers that only need a list.
"""

from vtt_payload.fragment import TIMED_TEXT_CLOSE, TIMED_TEXT_OPEN, Fragment, PlainText, TimedText
from vtt_payload.timestamp import VttTimestamp

TAG_OPEN = "<"
TAG_CLOSE = ">"


class CuePayloadParser:
    """
    Split a single cue payload into ordered fragments.

    Variables:
    - timestamp_type
      usage: timestamp class whose parse_span method decides whether tag content is a timestamp.
    """

    def __init__(self, timestamp_type: type[VttTimestamp] = VttTimestamp):
        self.timestamp_type = timestamp_type

    def parse(self, payload: str) -> list[Fragment]:
        """
        Variables:
            • payload
                usage: raw cue text that may contain <timestamp><c>...</c> karaoke markup.
            • fragments
                usage: ordered output collected while scanning left to right.
            • cursor
                usage: index of the first character not yet consumed.
            • close_bracket
                usage: last found '>' position, reused while '<' characters are peeled off inside the same tag.
            • tag_start
                usage: position of the next '<' at or after the cursor.
            • literal
                usage: text between the cursor and the next '<', kept only when it has non-whitespace content.
            • timestamp
                usage: parsed tag content, or None when the tag is not a timestamp.
            • span_end
                usage: position of the '</c>' closing the timed span.
        Functions:
            self.timestamp_type.parse_span - recognizes timestamp tags without copying tag content.

        Scans the payload once and returns literal and timed fragments in payload order.

        Recovery rules:
        - a '<' with no '>' after it ends the scan and the rest is kept verbatim;
        - a tag that is not a timestamp emits only its '<' and scanning resumes one character later;
        - a timestamp followed by '<c>' with no '</c>' ends the scan and the rest, from '<c>', is kept verbatim.
        A timestamp tag not immediately followed by '<c>' yields a timed fragment with empty text.
        """
        fragments: list[Fragment] = []
        cursor = 0
        close_bracket = -1

        while True:
            tag_start = payload.find(TAG_OPEN, cursor)
            if tag_start == -1:
                break

            literal = payload[cursor:tag_start]
            if literal.strip():
                fragments.append(PlainText(literal))
            cursor = tag_start

            if close_bracket < tag_start:
                close_bracket = payload.find(TAG_CLOSE, tag_start)
            if close_bracket == -1:
                fragments.append(PlainText(payload[tag_start:]))
                return fragments

            timestamp = self.timestamp_type.parse_span(payload, tag_start + 1, close_bracket)
            if timestamp is None:
                fragments.append(PlainText(TAG_OPEN))
                cursor = tag_start + 1
                continue

            cursor = close_bracket + 1
            if not payload.startswith(TIMED_TEXT_OPEN, cursor):
                fragments.append(TimedText(timestamp, ""))
                continue

            span_end = payload.find(TIMED_TEXT_CLOSE, cursor + len(TIMED_TEXT_OPEN))
            if span_end == -1:
                fragments.append(PlainText(payload[cursor:]))
                return fragments

            fragments.append(TimedText(timestamp, payload[cursor + len(TIMED_TEXT_OPEN):span_end]))
            cursor = span_end + len(TIMED_TEXT_CLOSE)

        if payload[cursor:].strip():
            fragments.append(PlainText(payload[cursor:]))
        return fragments


class CuePayload(list):
    """
    Ordered, editable fragment sequence for one cue.

    Built once from payload text; afterwards it behaves like a normal list, so callers may
    append, insert or remove fragments. The rendered form is recomputed on every call.
    """

    @classmethod
    def from_text(cls, payload: str, parser: CuePayloadParser | None = None) -> "CuePayload":
        """
        Variables:
            • payload
                usage: raw cue text handed over by the document reader or a caller.
            • parser
                usage: optional parser instance, defaulting to the shared module parser.
        Functions:
            CuePayloadParser.parse - produces the fragments stored in the new payload.

        Parses payload text into a new fragment sequence.
        """
        return cls((parser or DEFAULT_PAYLOAD_PARSER).parse(payload))

    def render(self) -> str:
        return "".join(fragment.render() for fragment in self)

    def plain_text(self) -> str:
        """
        Joins the text of every fragment, dropping karaoke tags but keeping any literal markup that was not recognised.
        """
        return "".join(fragment.text for fragment in self)

    def timed_fragments(self) -> list[TimedText]:
        return [fragment for fragment in self if fragment.is_timed]

    @property
    def is_karaoke(self) -> bool:
        return any(fragment.is_timed for fragment in self)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list.__repr__(self)})"


DEFAULT_PAYLOAD_PARSER = CuePayloadParser()


def parse_cue_payload(payload: str) -> list[Fragment]:
    """
    Variables:
        • payload
            usage: raw cue text forwarded to the shared parser.
    Functions:
        DEFAULT_PAYLOAD_PARSER.parse - delegates the scan to the shared parser instance.

    Provides a plain function entry point that returns the parsed fragments as a list.
    """
    return DEFAULT_PAYLOAD_PARSER.parse(payload)
