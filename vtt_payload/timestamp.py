"""
WebVTT timestamp value type used by cue timing lines and inline karaoke tags.

Design note:
- Store one integer millisecond count so ordering and equality come for free.
- Keep a non-raising parse for tag recognition and a raising parse for timing lines.
"""

import re
from dataclasses import dataclass

MILLIS_PER_SECOND = 1000
MILLIS_PER_MINUTE = 60 * MILLIS_PER_SECOND
MILLIS_PER_HOUR = 60 * MILLIS_PER_MINUTE

TIMESTAMP_RE = re.compile(
    r"(?:(?P<hours>\d{2,}):)?(?P<minutes>[0-5]\d):(?P<seconds>[0-5]\d)\.(?P<millis>\d{3})",
    re.ASCII,
)


@dataclass(frozen=True, order=True)
class VttTimestamp:
    """
    Point in time inside a WebVTT file.

    Variables:
    - total_millis
      usage: non-negative millisecond offset from the start of the media.
    """

    total_millis: int

    def __post_init__(self):
        if self.total_millis < 0:
            raise ValueError(f"Timestamp cannot be negative: {self.total_millis}")

    @classmethod
    def parse(cls, value: str) -> "VttTimestamp | None":
        """
        Variables:
            • value
                usage: candidate text such as the content between an inline tag's angle brackets.
        Functions:
            cls.parse_span - matches the whole candidate against the WebVTT timestamp grammar.

        Parses a WebVTT timestamp and returns None instead of raising when the text does not match the grammar exactly.
        """
        if not isinstance(value, str):
            return None
        return cls.parse_span(value, 0, len(value))

    @classmethod
    def parse_span(cls, text: str, start: int, end: int) -> "VttTimestamp | None":
        """
        Variables:
            • text
                usage: larger string that holds the candidate timestamp, typically a whole cue payload.
            • start
                usage: index of the first candidate character.
            • end
                usage: index just past the last candidate character.
            • match
                usage: regex match covering exactly text[start:end], or None when the grammar is not met.
            • hours
                usage: optional hour component, zero when the short MM:SS.mmm form is used.

        Parses text[start:end] as a timestamp without copying the slice, so scanners can probe tag content in place.
        """
        match = TIMESTAMP_RE.fullmatch(text, start, end)
        if match is None:
            return None
        hours = int(match.group("hours") or 0)
        return cls(
            hours * MILLIS_PER_HOUR
            + int(match.group("minutes")) * MILLIS_PER_MINUTE
            + int(match.group("seconds")) * MILLIS_PER_SECOND
            + int(match.group("millis"))
        )

    @classmethod
    def from_str(cls, value: str) -> "VttTimestamp":
        """
        Parses a WebVTT timestamp and raises ValueError when the text is not a valid timestamp.
        """
        timestamp = cls.parse(value)
        if timestamp is None:
            raise ValueError(f"Invalid timestamp: {value!r}")
        return timestamp

    @classmethod
    def from_millis(cls, millis: int) -> "VttTimestamp":
        return cls(int(millis))

    @classmethod
    def from_seconds(cls, seconds: float) -> "VttTimestamp":
        """
        Builds a timestamp from fractional seconds, rounding to the nearest millisecond.
        """
        return cls(int(round(float(seconds) * MILLIS_PER_SECOND)))

    @property
    def hours(self) -> int:
        return self.total_millis // MILLIS_PER_HOUR

    @property
    def minutes(self) -> int:
        return (self.total_millis % MILLIS_PER_HOUR) // MILLIS_PER_MINUTE

    @property
    def seconds(self) -> int:
        return (self.total_millis % MILLIS_PER_MINUTE) // MILLIS_PER_SECOND

    @property
    def milliseconds(self) -> int:
        return self.total_millis % MILLIS_PER_SECOND

    def total_seconds(self) -> float:
        return self.total_millis / MILLIS_PER_SECOND

    def format(self) -> str:
        """
        Formats the timestamp as HH:MM:SS.mmm, the exact text written between angle brackets when a timed fragment is rendered.
        """
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}.{self.milliseconds:03d}"

    def __str__(self) -> str:
        return self.format()
