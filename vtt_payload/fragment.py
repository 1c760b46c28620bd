"""
Fragment data model for one parsed piece of a cue payload.

Design note:
- Exactly two variants: literal text, and text anchored to a timestamp.
- Each variant knows how to render itself back to cue markup.
"""

from dataclasses import dataclass

from vtt_payload.timestamp import VttTimestamp

TIMED_TEXT_OPEN = "<c>"
TIMED_TEXT_CLOSE = "</c>"


@dataclass(frozen=True)
class PlainText:
    """
    Literal payload text with no timing attached.

    Variables:
    - text
      usage: exact characters copied from the payload, including any unrecognised markup.
    """

    text: str

    @property
    def is_timed(self) -> bool:
        return False

    def render(self) -> str:
        return self.text

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class TimedText:
    """
    Karaoke span that becomes active at a timestamp.

    Variables:
    - timestamp
      usage: moment the text becomes active, taken from the inline <HH:MM:SS.mmm> tag.
    - text
      usage: text captured between <c> and </c>; empty when the tag had no following span.
    """

    timestamp: VttTimestamp
    text: str = ""

    @property
    def is_timed(self) -> bool:
        return True

    def render(self) -> str:
        """
        Renders the fragment as a timestamp tag followed by a <c> span, even when the span text is empty.
        """
        return f"<{self.timestamp.format()}>{TIMED_TEXT_OPEN}{self.text}{TIMED_TEXT_CLOSE}"

    def __str__(self) -> str:
        return self.render()


Fragment = PlainText | TimedText
