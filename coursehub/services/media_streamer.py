"""
Byte-range aware streaming of lesson media from the uploads directory.

The caller is expected to be authenticated already; this module only deals with
locating the file and partial-content semantics. Replacing a file while a
range read is in flight may serve mixed bytes; that is accepted.
"""
import logging
import os
import re
from dataclasses import dataclass
from typing import Iterator, Optional

from coursehub.core.exceptions import (
    MediaNotFoundError,
    MediaStreamError,
    RangeNotSatisfiableError,
)

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif"}

_RANGE_RE = re.compile(r"^\s*bytes\s*=\s*(\d*)\s*-\s*(\d*)\s*$", re.IGNORECASE)


def content_type_for(filename: str) -> Optional[str]:
    ext = os.path.splitext(filename)[1].lower().lstrip(".")
    if ext == "mp4":
        return "video/mp4"
    if ext == "pdf":
        return "application/pdf"
    if ext in IMAGE_EXTENSIONS:
        return f"image/{ext}"
    return None


def parse_range(header: Optional[str], file_size: int):
    """
    Parses a single `bytes=start-end` range into an inclusive (start, end) pair.

    Returns None when there is no usable range (absent, malformed, or several
    ranges), in which case the whole file is served. Raises
    RangeNotSatisfiableError when the range starts past the end of the file.
    """
    if not header:
        return None
    match = _RANGE_RE.match(header)
    if match is None:
        logger.debug(f"Ignoring unsupported Range header: {header!r}")
        return None

    start_text, end_text = match.groups()
    if not start_text and not end_text:
        return None

    if not start_text:
        # Suffix range: the last N bytes
        length = int(end_text)
        if length == 0 or file_size == 0:
            raise RangeNotSatisfiableError(file_size)
        return max(0, file_size - length), file_size - 1

    start = int(start_text)
    end = int(end_text) if end_text else file_size - 1
    if start >= file_size or end < start:
        raise RangeNotSatisfiableError(file_size)
    return start, min(end, file_size - 1)


@dataclass(frozen=True)
class MediaSlice:
    path: str
    start: int
    end: int  # inclusive
    file_size: int
    content_type: str
    partial: bool

    @property
    def length(self) -> int:
        return self.end - self.start + 1 if self.file_size else 0

    def headers(self) -> dict:
        headers = {
            "Content-Length": str(self.length),
            "Content-Type": self.content_type,
            "Accept-Ranges": "bytes",
        }
        if self.partial:
            headers["Content-Range"] = f"bytes {self.start}-{self.end}/{self.file_size}"
        return headers


class MediaStreamer:
    def __init__(self, root: str, chunk_size: int = 64 * 1024):
        self.root = os.path.realpath(root)
        self.chunk_size = chunk_size

    def resolve_path(self, relative_path: str) -> str:
        """Maps a request path onto the uploads root; anything escaping it is treated as missing."""
        candidate = os.path.realpath(os.path.join(self.root, relative_path.lstrip("/\\")))
        if os.path.commonpath([self.root, candidate]) != self.root:
            logger.warning(f"Rejected media path outside uploads root: {relative_path!r}")
            raise MediaNotFoundError()
        return candidate

    def open(self, relative_path: str, range_header: Optional[str] = None) -> MediaSlice:
        path = self.resolve_path(relative_path)
        content_type = content_type_for(path)
        if content_type is None:
            logger.warning(f"Unsupported media type requested: {relative_path!r}")
            raise MediaNotFoundError()

        try:
            stat = os.stat(path)
        except FileNotFoundError:
            logger.warning(f"Media file missing: {path}")
            raise MediaNotFoundError()
        except OSError as e:
            logger.error(f"File access error for {path}: {e}", exc_info=True)
            raise MediaStreamError() from e
        if not os.path.isfile(path):
            raise MediaNotFoundError()

        file_size = stat.st_size
        byte_range = parse_range(range_header, file_size)
        if byte_range is None:
            return MediaSlice(path, 0, max(file_size - 1, 0), file_size, content_type, partial=False)
        start, end = byte_range
        return MediaSlice(path, start, end, file_size, content_type, partial=True)

    def iter_bytes(self, media: MediaSlice) -> Iterator[bytes]:
        """Yields the slice in chunks. An I/O failure mid-transfer is logged and ends the stream."""
        remaining = media.length
        try:
            with open(media.path, "rb") as fh:
                fh.seek(media.start)
                while remaining > 0:
                    chunk = fh.read(min(self.chunk_size, remaining))
                    if not chunk:
                        # File shrank underneath us (e.g. replaced during the read)
                        logger.warning(f"Media file {media.path} ended {remaining} bytes early.")
                        break
                    remaining -= len(chunk)
                    yield chunk
        except OSError as e:
            logger.error(f"Streaming error for {media.path}: {e}", exc_info=True)
