"""Lazy CSV row sources backed by uploaded files or remote URLs."""

import codecs
import csv
import logging
import re
from typing import BinaryIO, Dict, Iterable, Iterator, List, Optional

import requests

from airport_reviews.etl.pipeline import StructuralIngestionError

logger = logging.getLogger(__name__)
_SESSION = requests.Session()

DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_TIMEOUT = 30
_LINE_END_RE = re.compile(r"\r\n|\r|\n")


def _iter_decoded(chunks: Iterable[bytes], encoding: str) -> Iterator[str]:
    try:
        decoder = codecs.getincrementaldecoder(encoding)(errors="strict")
    except LookupError as exc:
        raise StructuralIngestionError(f"unknown encoding {encoding!r}") from exc

    try:
        for chunk in chunks:
            if chunk:
                yield decoder.decode(chunk)
        yield decoder.decode(b"", final=True)
    except UnicodeDecodeError as exc:
        raise StructuralIngestionError(f"CSV is not valid {encoding}: {exc}") from exc


def iter_text_lines(chunks: Iterable[bytes], encoding: str = "utf-8-sig") -> Iterator[str]:
    """Decode byte chunks and yield complete lines, terminators included.

    Lines end at ``\\r\\n``, ``\\r`` or ``\\n``. Each decoded piece is scanned
    once; an unterminated line is kept as a list of pieces until it ends.
    """
    partial: List[str] = []
    held_cr = False
    for text in _iter_decoded(chunks, encoding):
        if not text:
            continue
        if held_cr:
            # A "\r" that closed the previous piece may pair with a leading "\n".
            held_cr = False
            if text.startswith("\n"):
                partial.append("\r\n")
                text = text[1:]
            else:
                partial.append("\r")
            yield "".join(partial)
            partial = []

        start = 0
        for match in _LINE_END_RE.finditer(text):
            if match.group() == "\r" and match.end() == len(text):
                partial.append(text[start:match.start()])
                held_cr = True
                start = len(text)
                break
            partial.append(text[start:match.end()])
            yield "".join(partial)
            partial = []
            start = match.end()
        if start < len(text):
            partial.append(text[start:])

    if held_cr:
        partial.append("\r")
    line = "".join(partial)
    if line:
        yield line


def iter_csv_rows(lines: Iterable[str]) -> Iterator[Dict[Optional[str], Optional[str]]]:
    """Parse CSV lines into header-keyed rows.

    Broken quoting and rows longer than the header are structural errors.
    """
    reader = csv.DictReader(lines, strict=True)
    try:
        for row in reader:
            if None in row:
                raise StructuralIngestionError(
                    f"line {reader.line_num}: {len(row[None]) + len(reader.fieldnames or [])} values "
                    f"for {len(reader.fieldnames or [])} columns"
                )
            yield row
    except csv.Error as exc:
        raise StructuralIngestionError(f"line {reader.line_num}: {exc}") from exc


def _iter_file_chunks(fileobj: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    try:
        while True:
            chunk = fileobj.read(chunk_size)
            if not chunk:
                return
            yield chunk
    except OSError as exc:
        raise StructuralIngestionError(f"failed to read upload: {exc}") from exc


def rows_from_stream(
    fileobj: BinaryIO,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    encoding: str = "utf-8-sig",
) -> Iterator[Dict[Optional[str], Optional[str]]]:
    return iter_csv_rows(iter_text_lines(_iter_file_chunks(fileobj, chunk_size), encoding))


def _iter_response_chunks(url: str, timeout: int, chunk_size: int) -> Iterator[bytes]:
    try:
        response = _SESSION.get(url, stream=True, timeout=timeout)
    except requests.RequestException as exc:
        logger.error("Failed to fetch CSV from %s: %s", url, exc)
        raise StructuralIngestionError(f"failed to fetch {url}: {exc}") from exc

    try:
        response.raise_for_status()
        yield from response.iter_content(chunk_size=chunk_size)
    except requests.RequestException as exc:
        logger.error("CSV download from %s broke off: %s", url, exc)
        raise StructuralIngestionError(f"failed to fetch {url}: {exc}") from exc
    finally:
        response.close()


def rows_from_url(
    url: str,
    *,
    timeout: int = DEFAULT_TIMEOUT,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    encoding: str = "utf-8-sig",
) -> Iterator[Dict[Optional[str], Optional[str]]]:
    """Stream rows from a remote CSV. Nothing is fetched until iteration starts."""
    return iter_csv_rows(iter_text_lines(_iter_response_chunks(url, timeout, chunk_size), encoding))
