"""The Document handle: one script held in memory.

All state sits behind a single lock. Readers get copies, and loading parses
outside the lock before swapping the result in, so no caller ever observes a
half-loaded document.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import replace
from pathlib import Path
from typing import Optional, Union

from . import protocol as P
from .errors import ErrorCode, HLTASError
from .read import parse, read_file
from .types import Frame, FrameBulk, Line, Script
from .write import dumps, write_script

logger = logging.getLogger(__name__)


def _check_property(key: str, value: str) -> None:
    if not key or any(c.isspace() for c in key) or key == P.FRAMES_KEYWORD or P.COMMENT_PREFIX in key:
        raise ValueError(f"invalid property key {key!r}")
    if "\n" in value or "\r" in value or P.COMMENT_PREFIX in value or value != value.strip():
        raise ValueError(f"invalid property value {value!r}")


def _as_frame(frame: Union[Frame, Line]) -> Frame:
    return frame if isinstance(frame, Frame) else Frame(frame)


class Document:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._script = Script(P.MAX_SUPPORTED_VERSION)
        self._error_message = ""

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "Document":
        doc = cls()
        doc.open(path)
        return doc

    @classmethod
    def from_string(cls, text: str) -> "Document":
        doc = cls()
        doc.loads(text)
        return doc

    # -- load / save -------------------------------------------------------

    def _load(self, loader, source) -> None:
        try:
            script = loader(source)
        except HLTASError as exc:
            with self._lock:
                self._script = Script(P.MAX_SUPPORTED_VERSION)
                self._error_message = exc.render()
            logger.debug("load failed, document cleared: %s", exc.code.name)
            raise
        with self._lock:
            self._script = script
            self._error_message = ""
        logger.debug("loaded document with %d frames", len(script.frames))

    def open(self, path: Union[str, Path]) -> None:
        """Replace the content with the script at ``path``."""
        self._load(read_file, path)

    def loads(self, text: str) -> None:
        """Replace the content with the parsed ``text``."""
        self._load(parse, text)

    def snapshot(self) -> Script:
        """Return a consistent copy of the whole document."""
        with self._lock:
            s = self._script
            return Script(s.version, dict(s.properties), list(s.frames), s.trailing_comments)

    def dumps(self) -> str:
        return dumps(self.snapshot())

    def save(self, path: Union[str, Path]) -> None:
        script = self.snapshot()
        try:
            fp = open(path, "w", encoding="utf-8", newline="\n")
        except OSError as exc:
            raise HLTASError(ErrorCode.FAILOPEN) from exc
        try:
            with fp:
                write_script(script, fp)
        except OSError as exc:
            raise HLTASError(ErrorCode.FAILWRITE) from exc

    def clear(self) -> None:
        with self._lock:
            self._script = Script(P.MAX_SUPPORTED_VERSION)
            self._error_message = ""

    # -- version -----------------------------------------------------------

    @property
    def version(self) -> int:
        with self._lock:
            return self._script.version

    def set_version(self, version: int) -> None:
        if version not in P.CAPABILITIES:
            raise ValueError(f"unsupported version {version}")
        with self._lock:
            self._script.version = version

    # -- properties --------------------------------------------------------

    def properties(self) -> dict[str, str]:
        with self._lock:
            return dict(self._script.properties)

    def get_property(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            return self._script.properties.get(key, default)

    def set_property(self, key: str, value: str = "") -> None:
        _check_property(key, value)
        with self._lock:
            self._script.properties[key] = value

    def remove_property(self, key: str) -> None:
        with self._lock:
            self._script.properties.pop(key, None)

    def clear_properties(self) -> None:
        with self._lock:
            self._script.properties.clear()

    # -- frames ------------------------------------------------------------

    def __len__(self) -> int:
        with self._lock:
            return len(self._script.frames)

    def frames(self) -> tuple[Frame, ...]:
        with self._lock:
            return tuple(self._script.frames)

    def get_frame(self, index: int) -> Frame:
        with self._lock:
            return self._script.frames[self._index(index)]

    def _index(self, index: int, end_ok: bool = False) -> int:
        size = len(self._script.frames) + (1 if end_ok else 0)
        if not 0 <= index < size:
            raise IndexError(f"frame index {index} out of range")
        return index

    def push_frame(self, frame: Union[Frame, Line]) -> None:
        frame = _as_frame(frame)
        with self._lock:
            self._script.frames.append(frame)

    def insert_frame(self, index: int, frame: Union[Frame, Line]) -> None:
        frame = _as_frame(frame)
        with self._lock:
            self._script.frames.insert(self._index(index, end_ok=True), frame)

    def remove_frame(self, index: int) -> Frame:
        with self._lock:
            return self._script.frames.pop(self._index(index))

    def replace_frame(self, index: int, frame: Union[Frame, Line]) -> Frame:
        frame = _as_frame(frame)
        with self._lock:
            index = self._index(index)
            old = self._script.frames[index]
            self._script.frames[index] = frame
            return old

    def clear_frames(self) -> None:
        with self._lock:
            self._script.frames.clear()

    def split_bulk(self, index: int, offset: int) -> None:
        """Split the bulk at ``index`` into two bulks of ``offset`` and ``repeats - offset`` frames.

        Both halves keep every other field; the comment block stays on the first one.
        """
        with self._lock:
            frame = self._script.frames[self._index(index)]
            if not isinstance(frame.line, FrameBulk):
                raise ValueError(f"frame {index} is not a frame bulk")
            bulk = frame.line
            if not 0 < offset < bulk.repeats:
                raise ValueError(f"split offset {offset} must lie strictly inside 1..{bulk.repeats}")
            first = replace(frame, line=bulk.with_repeats(offset))
            second = Frame(bulk.with_repeats(bulk.repeats - offset))
            self._script.frames[index:index + 1] = [first, second]

    # -- comments and diagnostics -----------------------------------------

    @property
    def trailing_comments(self) -> str:
        with self._lock:
            return self._script.trailing_comments

    def set_trailing_comments(self, comments: str) -> None:
        if comments and not comments.endswith("\n"):
            comments += "\n"
        with self._lock:
            self._script.trailing_comments = comments

    @property
    def error_message(self) -> str:
        with self._lock:
            return self._error_message

    def set_error_message(self, message: str) -> None:
        with self._lock:
            self._error_message = message
