"""
Remote WebVTT sources.

Design note:
- Every response is checked for the WEBVTT signature before it reaches the
  parser or the disk, so an HTML error page is never saved as subtitles.
- Failures are reported on the stderr console and turned into None/False.
- fetch_text is also exposed as a module function backed by a shared service.
"""

import logging

import requests
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, DownloadColumn, Progress, TextColumn, TransferSpeedColumn

from vtt_payload.document import has_signature

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120
USER_AGENT = "vtt-payload/0.1"
ACCEPT = "text/vtt, text/plain;q=0.9, */*;q=0.5"
CHUNK_SIZE = 8192
# Enough bytes to hold "WEBVTT" plus a short description.
HEAD_BYTES = 64


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def looks_like_webvtt(text: str) -> bool:
    first_line = text.lstrip("\ufeff").split("\n", 1)[0].rstrip("\r")
    return has_signature(first_line)


def _read_head(chunks) -> bytes:
    head = b""
    for chunk in chunks:
        head += chunk
        if b"\n" in head or len(head) >= HEAD_BYTES:
            break
    return head


class DownloadService:
    """
    Fetch WebVTT files over HTTP, either into memory or onto disk.

    Variables:
    - console
      usage: stderr console for the spinner, progress bar and result messages.
    - timeout
      usage: seconds allowed for connecting and reading; the CLI overrides it from --timeout.
    """

    def __init__(self, console_instance: Console | None = None, timeout: int = DEFAULT_TIMEOUT):
        self.console = console_instance or Console(stderr=True)
        self.timeout = timeout

    @staticmethod
    def request_headers() -> dict[str, str]:
        return {"User-Agent": USER_AGENT, "Accept": ACCEPT}

    def _get(self, url: str, stream: bool = False) -> requests.Response:
        response = requests.get(url, headers=self.request_headers(), timeout=self.timeout, stream=stream)
        response.raise_for_status()
        return response

    def _report(self, message: str) -> None:
        self.console.print(f"[red]{escape(message)}[/red]", soft_wrap=True)

    def fetch_text(self, url: str) -> str | None:
        """
        Variables:
            • url
                usage: http(s) address expected to serve a WebVTT file.
            • response
                usage: completed response; its encoding falls back to UTF-8 when the server names none.
            • text
                usage: decoded body, returned only when it opens with the WEBVTT signature.
        Functions:
            self._get - sends the request and raises on HTTP error statuses.
            looks_like_webvtt - checks the first line of the body.

        Downloads a subtitle file into memory, returning None after reporting a network error or a non-WebVTT body.
        """
        try:
            with self.console.status(f"[cyan]Fetching {escape(url)}[/cyan]", spinner="dots"):
                response = self._get(url)
                response.encoding = response.encoding or "utf-8"
                text = response.text
        except requests.RequestException as error:
            logger.debug("Request for %s failed", url, exc_info=True)
            self._report(f"Could not fetch {url}: {error}")
            return None

        if not looks_like_webvtt(text):
            self._report(f"{url} did not return a WebVTT file")
            return None
        logger.debug("Fetched %d characters from %s", len(text), url)
        return text

    def download_file(self, url: str, dest_path: str) -> bool:
        """
        Variables:
            • url
                usage: http(s) address expected to serve a WebVTT file.
            • dest_path
                usage: file written with the response bytes, unchanged.
            • chunks
                usage: iterator over the streamed body; its first bytes are checked before the file is opened.
            • head
                usage: leading bytes holding at least the first line, written before the remaining chunks.
            • total_size
                usage: content-length for the progress bar, or None when the server omits it.
        Functions:
            _read_head - collects the leading bytes of the stream.
            looks_like_webvtt - rejects bodies without the WEBVTT signature.

        Streams a subtitle file to disk with a progress bar. Nothing is written when the body is not WebVTT.
        """
        try:
            response = self._get(url, stream=True)
            chunks = iter(response.iter_content(chunk_size=CHUNK_SIZE))
            head = _read_head(chunks)
            if not looks_like_webvtt(head.decode("utf-8", errors="replace")):
                self._report(f"{url} did not return a WebVTT file; nothing was saved")
                return False

            total_size = int(response.headers.get("content-length", 0)) or None
            with Progress(
                TextColumn("[bold blue]{task.description}"),
                BarColumn(),
                DownloadColumn(),
                TransferSpeedColumn(),
                console=self.console,
            ) as progress, open(dest_path, "wb") as file:
                task = progress.add_task("Downloading subtitles", total=total_size)
                file.write(head)
                progress.update(task, advance=len(head))
                for chunk in chunks:
                    if chunk:
                        file.write(chunk)
                        progress.update(task, advance=len(chunk))
        except requests.RequestException as error:
            logger.debug("Request for %s failed", url, exc_info=True)
            self._report(f"Could not fetch {url}: {error}")
            return False
        except OSError as error:
            self._report(f"Could not write {dest_path}: {error}")
            return False

        self.console.print(f"[green]✓ Saved subtitles to {escape(dest_path)}[/green]", soft_wrap=True)
        return True


DEFAULT_DOWNLOAD_SERVICE = DownloadService()


def fetch_text(url):
    return DEFAULT_DOWNLOAD_SERVICE.fetch_text(url)
