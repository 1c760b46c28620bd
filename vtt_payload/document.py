"""
WebVTT document reading, writing and transcript conversion helpers.

Design note:
- The document layer only splits files into header and cue blocks; every cue
  payload is handed to the payload parser.
- Use one converter class so behavior can be reused from the CLI or other callers.
- Keep function wrappers for callers that work with raw VTT text.
"""

import html
import logging
import re
from dataclasses import dataclass, field

from vtt_payload.payload import CuePayload, CuePayloadParser
from vtt_payload.timestamp import VttTimestamp

logger = logging.getLogger(__name__)

SIGNATURE = "WEBVTT"
TIMING_ARROW = "-->"
SKIPPED_BLOCK_KINDS = ("NOTE", "STYLE", "REGION")


class VttFormatError(ValueError):
    """Raised when text cannot be read as a WebVTT document at all."""


def has_signature(first_line: str) -> bool:
    """Return True when a first line (byte order mark already removed) opens a WebVTT file."""
    return first_line == SIGNATURE or first_line.startswith((SIGNATURE + " ", SIGNATURE + "\t"))


@dataclass
class VttHeader:
    """
    Header block of a WebVTT file.

    Variables:
    - description
      usage: free text following the WEBVTT signature on the first line, if any.
    - metadata
      usage: "Key: Value" lines between the signature and the first blank line, in file order.
    """

    description: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    def render(self) -> str:
        lines = [f"{SIGNATURE} {self.description}" if self.description else SIGNATURE]
        lines.extend(f"{key}: {value}" for key, value in self.metadata.items())
        return "\n".join(lines)


@dataclass
class VttCue:
    """
    One cue of a WebVTT file.

    Variables:
    - start
      usage: cue start time from the timing line.
    - end
      usage: cue end time from the timing line.
    - payload
      usage: parsed cue text, editable as a list of fragments.
    - identifier
      usage: optional cue id line that precedes the timing line.
    - settings
      usage: raw cue settings after the end timestamp (for example "align:start position:0%").
    """

    start: VttTimestamp
    end: VttTimestamp
    payload: CuePayload = field(default_factory=CuePayload)
    identifier: str | None = None
    settings: str = ""

    @property
    def text(self) -> str:
        return self.payload.plain_text()

    def timing_line(self) -> str:
        line = f"{self.start} {TIMING_ARROW} {self.end}"
        return f"{line} {self.settings}" if self.settings else line

    def render(self) -> str:
        """
        Renders the cue block: optional identifier, timing line, then the payload when it is not empty.
        """
        lines = [self.identifier] if self.identifier else []
        lines.append(self.timing_line())
        rendered_payload = self.payload.render()
        if rendered_payload:
            lines.append(rendered_payload)
        return "\n".join(lines)


def parse_timing_line(line: str) -> tuple[VttTimestamp, VttTimestamp, str]:
    """
    Variables:
        • line
            usage: cue timing line such as "00:00:01.000 --> 00:00:04.000 align:start".
        • start_text
            usage: text before the arrow, parsed as the cue start.
        • parts
            usage: end timestamp and optional settings split from the text after the arrow.
    Functions:
        VttTimestamp.from_str - parses both timestamps and raises ValueError on bad input.

    Splits a timing line into start, end and settings, raising ValueError when it is malformed.
    """
    start_text, arrow, rest = line.partition(TIMING_ARROW)
    if not arrow:
        raise ValueError(f"Missing '{TIMING_ARROW}' in timing line: {line!r}")
    parts = rest.strip().split(maxsplit=1)
    if not parts:
        raise ValueError(f"Missing end timestamp in timing line: {line!r}")
    start = VttTimestamp.from_str(start_text.strip())
    end = VttTimestamp.from_str(parts[0])
    return start, end, parts[1] if len(parts) > 1 else ""


@dataclass
class WebVtt:
    """
    Parsed WebVTT document.

    Variables:
    - header
      usage: signature description and metadata lines.
    - cues
      usage: cues in file order.
    """

    header: VttHeader = field(default_factory=VttHeader)
    cues: list[VttCue] = field(default_factory=list)

    @classmethod
    def from_str(cls, text: str, parser: CuePayloadParser | None = None) -> "WebVtt":
        """
        Variables:
            • text
                usage: complete WebVTT file content.
            • parser
                usage: optional payload parser passed to every cue.
            • lines
                usage: newline-normalized file lines without a leading byte order mark.
            • header
                usage: description and metadata read from the first block.
            • index
                usage: moving line index used while reading the header.
            • blocks
                usage: groups of consecutive non-empty lines after the header.
        Functions:
            cls._read_header - reads signature, description and metadata.
            cls._split_blocks - groups remaining lines into blocks separated by empty lines.
            cls._read_cue - turns one block into a cue, or None when it is not a usable cue.

        Parses WebVTT text into a header and cue list, raising VttFormatError when the WEBVTT signature is missing.
        """
        lines = text.replace("\r\n", "\n").replace("\r", "\n").lstrip("\ufeff").split("\n")
        header, index = cls._read_header(lines)
        document = cls(header=header)
        blocks = cls._split_blocks(lines[index:])
        for block in blocks:
            cue = cls._read_cue(block, parser)
            if cue is not None:
                document.cues.append(cue)
        logger.debug("Parsed %d cue(s) from %d block(s)", len(document.cues), len(blocks))
        return document

    @staticmethod
    def _read_header(lines: list[str]) -> tuple[VttHeader, int]:
        first = lines[0] if lines else ""
        if not has_signature(first):
            raise VttFormatError("Missing WEBVTT signature on the first line")

        header = VttHeader(description=first[len(SIGNATURE):].strip() or None)
        index = 1
        while index < len(lines) and lines[index]:
            if TIMING_ARROW in lines[index]:
                break
            key, separator, value = lines[index].partition(":")
            if separator:
                header.metadata[key.strip()] = value.strip()
            index += 1
        return header, index

    @staticmethod
    def _split_blocks(lines: list[str]) -> list[list[str]]:
        blocks: list[list[str]] = []
        current: list[str] = []
        for line in lines:
            if line:
                current.append(line)
            elif current:
                blocks.append(current)
                current = []
        if current:
            blocks.append(current)
        return blocks

    @staticmethod
    def _read_cue(block: list[str], parser: CuePayloadParser | None) -> VttCue | None:
        """
        Variables:
            • block
                usage: non-empty lines of one block.
            • parser
                usage: optional payload parser for the cue text.
            • kind
                usage: first word of the block, checked against NOTE/STYLE/REGION.
            • identifier
                usage: cue id line when the timing line is second.
            • timing
                usage: line holding the cue start, end and settings.
            • payload_lines
                usage: lines after the timing line, joined with newlines into the payload text.
        Functions:
            parse_timing_line - splits the timing line into timestamps and settings.
            CuePayload.from_text - parses the joined payload text into fragments.

        Reads a single block into a cue, skipping comment/style/region blocks and logging blocks whose timing cannot be read.
        """
        kind = block[0].split(maxsplit=1)[0] if block[0].strip() else ""
        if kind in SKIPPED_BLOCK_KINDS and TIMING_ARROW not in block[0]:
            return None

        if TIMING_ARROW in block[0]:
            identifier, timing, payload_lines = None, block[0], block[1:]
        elif len(block) > 1 and TIMING_ARROW in block[1]:
            identifier, timing, payload_lines = block[0].strip(), block[1], block[2:]
        else:
            logger.warning("Skipping block without a timing line: %r", block[0])
            return None

        try:
            start, end, settings = parse_timing_line(timing.strip())
        except ValueError as error:
            logger.warning("Skipping cue with unreadable timing: %s", error)
            return None

        return VttCue(
            start=start,
            end=end,
            payload=CuePayload.from_text("\n".join(payload_lines), parser=parser),
            identifier=identifier,
            settings=settings,
        )

    def render(self) -> str:
        """
        Renders the document back to WebVTT text: header, blank line, cue blocks separated by blank lines.
        """
        blocks = [self.header.render()] + [cue.render() for cue in self.cues]
        return "\n\n".join(blocks) + "\n"

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class WordTiming:
    """
    Karaoke word (or phrase) with its active interval.

    Variables:
    - cue_index
      usage: zero-based position of the owning cue in the document.
    - start
      usage: moment the text becomes active.
    - end
      usage: next timing boundary inside the cue, or the cue end for the last segment.
    - text
      usage: whitespace-normalized segment text.
    """

    cue_index: int
    start: VttTimestamp
    end: VttTimestamp
    text: str


class TranscriptConverter:
    """
    Convert WebVTT payloads into transcript output formats.

    Variables:
    - tag_re
      usage: regex used to remove leftover caption markup such as <i> or <v Name> during normalization.
    - parser
      usage: payload parser used for every cue of every document.
    """

    def __init__(self, parser: CuePayloadParser | None = None):
        self.tag_re = re.compile(r"<[^>]+>")
        self.parser = parser

    def _clean_caption_text(self, text: str) -> str:
        """
        Variables:
            • text
                usage: plain cue text that may still hold non-karaoke markup, entities and line breaks.

        Cleans caption text by removing markup, decoding entities, and collapsing whitespace to single spaces.
        """
        text = self.tag_re.sub("", text)
        text = html.unescape(text)
        return re.sub(r"\s+", " ", text).strip()

    def parse(self, vtt_text: str) -> WebVtt:
        return WebVtt.from_str(vtt_text, parser=self.parser)

    def normalize(self, vtt_text: str) -> str:
        """
        Functions:
            self.parse - reads the document and parses every cue payload.

        Re-renders a document in canonical form, with karaoke spans written as <timestamp><c>text</c>.
        """
        return self.parse(vtt_text).render()

    def to_timestamped_txt(self, vtt_text: str) -> str:
        """
        Variables:
            • vtt_text
                usage: raw VTT transcript payload converted into timestamped plain text.
            • blocks
                usage: formatted cue blocks joined with blank lines for readable transcript output.
            • cue
                usage: iterated cue providing timing and text for each output block.
            • text
                usage: cleaned cue text; cues that clean to nothing are left out.
        Functions:
            self.parse - parses raw VTT content into cues used for timestamped formatting.
            self._clean_caption_text - turns cue text into a single readable line.

        Converts VTT cues into timestamped plain text blocks separated by blank lines.
        """
        blocks = []
        for cue in self.parse(vtt_text).cues:
            text = self._clean_caption_text(cue.text)
            if text:
                blocks.append(f"{cue.start} {TIMING_ARROW} {cue.end}\n{text}")
        return "\n\n".join(blocks).strip() + "\n"

    def word_timings(self, vtt_text: str) -> list[WordTiming]:
        """
        Variables:
            • vtt_text
                usage: raw VTT content with karaoke-timed cues.
            • words
                usage: collected word timings across all cues.
            • cue_index
                usage: position of the current cue.
            • segments
                usage: [start, text] pairs for the current cue; timed fragments open a segment, plain text extends the last one.
            • position
                usage: index of the current segment, used to read the start of the next one.
        Functions:
            self.parse - parses raw VTT content into cues.
            self._clean_caption_text - normalizes each segment text.

        Lists each karaoke segment with its start and the next boundary inside the cue; plain text before the first timed fragment starts at the cue start.
        """
        words: list[WordTiming] = []
        for cue_index, cue in enumerate(self.parse(vtt_text).cues):
            segments: list[list] = []
            for fragment in cue.payload:
                if fragment.is_timed:
                    segments.append([fragment.timestamp, fragment.text])
                elif segments:
                    segments[-1][1] += fragment.text
                else:
                    segments.append([cue.start, fragment.text])

            for position, (start, text) in enumerate(segments):
                end = segments[position + 1][0] if position + 1 < len(segments) else cue.end
                text = self._clean_caption_text(text)
                if text:
                    words.append(WordTiming(cue_index=cue_index, start=start, end=end, text=text))
        return words


DEFAULT_TRANSCRIPT_CONVERTER = TranscriptConverter()


def parse_vtt(vtt_text: str) -> WebVtt:
    """
    Functions:
        DEFAULT_TRANSCRIPT_CONVERTER.parse - delegates document parsing to the shared converter instance.

    Parses raw VTT text into a document using the shared converter.
    """
    return DEFAULT_TRANSCRIPT_CONVERTER.parse(vtt_text)


def normalize_vtt(vtt_text: str) -> str:
    return DEFAULT_TRANSCRIPT_CONVERTER.normalize(vtt_text)


def vtt_to_timestamped_txt(vtt_text: str) -> str:
    """
    Variables:
        • vtt_text
            usage: raw VTT transcript payload forwarded to the shared converter.
    Functions:
        DEFAULT_TRANSCRIPT_CONVERTER.to_timestamped_txt - delegates timestamped conversion to the shared converter instance.

    Converts VTT text into timestamped plain-text output through the shared converter.
    """
    return DEFAULT_TRANSCRIPT_CONVERTER.to_timestamped_txt(vtt_text)


def vtt_word_timings(vtt_text: str) -> list[WordTiming]:
    return DEFAULT_TRANSCRIPT_CONVERTER.word_timings(vtt_text)
