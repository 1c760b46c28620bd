"""
CLI entrypoints for inspecting and converting karaoke-style WebVTT files.
"""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from vtt_payload.document import TranscriptConverter, VttFormatError, WebVtt
from vtt_payload.downloader import DEFAULT_TIMEOUT, DownloadService, is_url
from vtt_payload.logger import setup_logging
from vtt_payload.payload import CuePayload

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("table", "tsv")


class VttPayloadCLI:
    """
    Coordinate loading, parsing and output for CLI commands.

    Variables:
    - console
      usage: stderr renderer for tables, status, and result messages; stdout carries only document output.
    - download_service
      usage: service used when a source is an http(s) URL.
    - transcript_converter
      usage: converter for documents into normalized VTT, timestamped text and word timings.
    """

    def __init__(
        self,
        console_instance: Console | None = None,
        download_service: DownloadService | None = None,
        transcript_converter: TranscriptConverter | None = None,
    ):
        """
        Variables:
            • console_instance
                usage: optional terminal renderer dependency injected for tables and result messages.
            • download_service
                usage: optional HTTP service used to fetch remote subtitle files.
            • transcript_converter
                usage: optional converter used to parse and transform WebVTT documents.
        Functions:
            DownloadService - creates the default download service wired to the active console.
            TranscriptConverter - creates the default transcript conversion helper.

        Initializes the CLI coordinator with either injected collaborators or default service instances.
        """
        self.console = console_instance or Console(stderr=True)
        self.download_service = download_service or DownloadService(console_instance=self.console)
        self.transcript_converter = transcript_converter or TranscriptConverter()

    def _report(self, message: str) -> None:
        self.console.print(f"[red]{escape(message)}[/red]", soft_wrap=True)

    def _load_source(self, source: str) -> str | None:
        """
        Variables:
            • source
                usage: local file path or http(s) URL of a WebVTT file.
            • error
                usage: file read failure reported to the user.
        Functions:
            self.download_service.fetch_text - retrieves remote subtitle text.

        Reads subtitle text from a URL or a local file and returns None after reporting any failure.
        """
        if is_url(source):
            return self.download_service.fetch_text(source)
        try:
            return Path(source).read_text(encoding="utf-8")
        except OSError as error:
            self._report(f"Could not read {source}: {error}")
            return None

    def _load_document(self, source: str) -> WebVtt | None:
        """
        Functions:
            self._load_source - reads raw text from the file or URL.
            self.transcript_converter.parse - turns the text into a document.

        Loads and parses a WebVTT source, reporting a red error and returning None when it is not valid WebVTT.
        """
        vtt_text = self._load_source(source)
        if vtt_text is None:
            return None
        try:
            return self.transcript_converter.parse(vtt_text)
        except VttFormatError as error:
            self._report(f"{source} is not a WebVTT file: {error}")
            return None

    def _emit_text(self, text: str, output: str | None) -> bool:
        """
        Variables:
            • text
                usage: finished command output.
            • output
                usage: optional destination path; stdout when omitted.
            • file
                usage: open file handle used to write UTF-8 output to disk.
            • error
                usage: write failure reported to the user.

        Writes command output to a file and reports the saved location, or prints it unchanged to stdout.
        """
        if output is None:
            click.echo(text, nl=False)
            return True
        try:
            with open(output, "w", encoding="utf-8") as file:
                file.write(text)
        except OSError as error:
            self._report(f"Could not write {output}: {error}")
            return False
        self.console.print(f"[green]✓ Successfully saved: {escape(output)}[/green]", soft_wrap=True)
        return True

    def inspect(self, payload: str) -> bool:
        """
        Variables:
            • payload
                usage: one cue payload string given on the command line.
            • fragments
                usage: parsed fragment sequence displayed row by row.
            • table
                usage: Rich table listing kind, timestamp and text for each fragment.
        Functions:
            CuePayload.from_text - parses the payload string.

        Shows how a single cue payload splits into plain and timed fragments, followed by its canonical rendering.
        """
        fragments = CuePayload.from_text(payload)
        table = Table(title="Fragments")
        table.add_column("#", justify="right")
        table.add_column("Kind")
        table.add_column("Timestamp")
        table.add_column("Text")
        for position, fragment in enumerate(fragments, start=1):
            table.add_row(
                str(position),
                "timed" if fragment.is_timed else "plain",
                str(fragment.timestamp) if fragment.is_timed else "",
                escape(repr(fragment.text)),
            )
        self.console.print(table)
        self.console.print(f"[bold]Rendered:[/bold] {escape(fragments.render())}", soft_wrap=True)
        return True

    def cues(self, source: str) -> bool:
        """
        Functions:
            self._load_document - loads and parses the source.

        Lists every cue with its timing, fragment counts and plain text.
        """
        document = self._load_document(source)
        if document is None:
            return False

        table = Table(title=f"{len(document.cues)} cue(s)")
        table.add_column("#", justify="right")
        table.add_column("Start")
        table.add_column("End")
        table.add_column("Timed", justify="right")
        table.add_column("Text")
        for position, cue in enumerate(document.cues, start=1):
            table.add_row(
                str(position),
                str(cue.start),
                str(cue.end),
                str(len(cue.payload.timed_fragments())),
                escape(" ".join(cue.text.split())),
            )
        self.console.print(table)
        return True

    def words(self, source: str, output_format: str = "table") -> bool:
        """
        Variables:
            • source
                usage: file path or URL of the subtitle file.
            • output_format
                usage: "table" for a Rich table, "tsv" for tab-separated lines on stdout.
            • timings
                usage: word timings computed from every karaoke cue.
        Functions:
            self._load_source - reads raw text from the file or URL.
            self.transcript_converter.word_timings - computes per-segment start and end times.

        Prints karaoke word timings either as a table or as start/end/text tab-separated lines.
        """
        vtt_text = self._load_source(source)
        if vtt_text is None:
            return False
        try:
            timings = self.transcript_converter.word_timings(vtt_text)
        except VttFormatError as error:
            self._report(f"{source} is not a WebVTT file: {error}")
            return False

        if output_format == "tsv":
            for timing in timings:
                click.echo(f"{timing.start}\t{timing.end}\t{timing.text}")
            return True

        table = Table(title=f"{len(timings)} word(s)")
        table.add_column("Cue", justify="right")
        table.add_column("Start")
        table.add_column("End")
        table.add_column("Text")
        for timing in timings:
            table.add_row(str(timing.cue_index + 1), str(timing.start), str(timing.end), escape(timing.text))
        self.console.print(table)
        return True

    def normalize(self, source: str, output: str | None = None) -> bool:
        """
        Functions:
            self._load_document - loads and parses the source.
            self._emit_text - writes the rendered document.

        Re-renders a WebVTT file in canonical form, writing it to a file or stdout.
        """
        document = self._load_document(source)
        if document is None:
            return False
        return self._emit_text(document.render(), output)

    def text(self, source: str, output: str | None = None) -> bool:
        """
        Functions:
            self._load_source - reads raw text from the file or URL.
            self.transcript_converter.to_timestamped_txt - builds timestamped plain text.
            self._emit_text - writes the transcript.

        Converts a WebVTT file into a timestamped plain-text transcript.
        """
        vtt_text = self._load_source(source)
        if vtt_text is None:
            return False
        try:
            transcript = self.transcript_converter.to_timestamped_txt(vtt_text)
        except VttFormatError as error:
            self._report(f"{source} is not a WebVTT file: {error}")
            return False
        return self._emit_text(transcript, output)

    def download(self, url: str, output: str | None = None) -> bool:
        """
        Variables:
            • url
                usage: remote subtitle address.
            • output
                usage: destination path; derived from the last URL path segment when omitted.
        Functions:
            self.download_service.download_file - streams the file to disk with progress.

        Saves a remote subtitle file to disk unchanged.
        """
        if not is_url(url):
            self._report("Invalid URL. Please provide a full http(s) subtitle URL.")
            return False
        if output is None:
            output = url.split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1] or "subtitles.vtt"
        return self.download_service.download_file(url, output)


app = VttPayloadCLI()


def _finish(succeeded: bool) -> None:
    if not succeeded:
        sys.exit(1)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
@click.option(
    "--timeout",
    type=int,
    default=DEFAULT_TIMEOUT,
    show_default=True,
    envvar="VTT_PAYLOAD_TIMEOUT",
    help="Network timeout in seconds for URL sources.",
)
# Entry-point group; its options apply to every subcommand.
def cli(verbose, timeout):
    setup_logging(verbose)
    app.download_service.timeout = timeout
    logger.debug("Network timeout set to %ss", timeout)


@cli.command()
@click.argument("payload")
def inspect(payload):
    """Split one cue payload into plain and timed fragments."""
    _finish(app.inspect(payload))


@cli.command()
@click.argument("source")
def cues(source):
    """List the cues of a WebVTT file or URL."""
    _finish(app.cues(source))


@cli.command()
@click.argument("source")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    default="table",
    show_default=True,
)
def words(source, output_format):
    """Print karaoke word timings."""
    _finish(app.words(source, output_format))


@cli.command()
@click.argument("source")
@click.option("-o", "--output", type=click.Path(dir_okay=False), help="Write to a file instead of stdout.")
def normalize(source, output):
    """Re-render a WebVTT file with canonical karaoke markup."""
    _finish(app.normalize(source, output))


@cli.command()
@click.argument("source")
@click.option("-o", "--output", type=click.Path(dir_okay=False), help="Write to a file instead of stdout.")
def text(source, output):
    """Convert a WebVTT file into a timestamped plain-text transcript."""
    _finish(app.text(source, output))


@cli.command()
@click.argument("url")
@click.option("-o", "--output", type=click.Path(dir_okay=False), help="Destination file.")
def download(url, output):
    """Save a remote WebVTT file unchanged."""
    _finish(app.download(url, output))


if __name__ == "__main__":
    cli()
