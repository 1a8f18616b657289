#!/usr/bin/env python3
"""Event cursors over the ijson tokenizer, with an optional pointer filter."""
import io, os, logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Tuple

import ijson

from .pointer import FieldPointer

logger = logging.getLogger(__name__)

Event = Tuple[str, Any]

START_EVENTS = ('start_map', 'start_array')
END_EVENTS = ('end_map', 'end_array')


class EventCursor:
    """Pull-based cursor over ``ijson.basic_parse`` events."""

    def __init__(self, fileobj, **parse_options):
        self._events: Iterator[Event] = ijson.basic_parse(fileobj, **parse_options)
        self.events_read = 0

    def next_event(self) -> Optional[Event]:
        """Return the next ``(event, value)`` pair, or None at end of input."""
        event = next(self._events, None)
        if event is not None:
            self.events_read += 1
        return event

    def require_event(self) -> Event:
        event = self.next_event()
        if event is None:
            raise ijson.IncompleteJSONError('Incomplete JSON content')
        return event

    def read_value(self, first: Event) -> Any:
        """Build the complete value that starts with ``first`` as a Python tree."""
        event, value = first
        if event not in START_EVENTS:
            return value
        builder = ijson.ObjectBuilder()
        builder.event(event, value)
        depth = 1
        while depth:
            event, value = self.require_event()
            builder.event(event, value)
            if event in START_EVENTS:
                depth += 1
            elif event in END_EVENTS:
                depth -= 1
        return builder.value

    def skip_value(self, first: Event) -> None:
        """Consume the value that starts with ``first`` without building it."""
        if first[0] not in START_EVENTS:
            return
        depth = 1
        while depth:
            event, _ = self.require_event()
            if event in START_EVENTS:
                depth += 1
            elif event in END_EVENTS:
                depth -= 1


class PathFilter:
    """Wraps a cursor so that its first event is the start of the value at ``pointer``.

    Everything before the target is skipped event by event; siblings of the
    target path are never built. After the target value has been read the
    filter reports end of input.
    """

    def __init__(self, cursor: EventCursor, pointer: FieldPointer):
        self.cursor = cursor
        self.pointer = pointer
        self._seeked = False
        self._depth = 0
        self._exhausted = False

    @property
    def events_read(self):
        return self.cursor.events_read

    def seek(self) -> Optional[Event]:
        """Advance to the target; returns its first event, or None if the path is absent."""
        first = self.cursor.next_event()
        if first is None:
            return None
        found = self._descend(first, 0)
        if found is None:
            logger.debug("pointer %s not present after %s events", self.pointer, self.cursor.events_read)
        return found

    def _descend(self, first: Event, matched: int) -> Optional[Event]:
        # ``first`` starts a value whose path equals the first ``matched`` target segments.
        target = self.pointer.segments
        if matched == len(target):
            return first
        segment = target[matched]
        event = first[0]
        if event == 'start_map':
            while True:
                key_event = self.cursor.require_event()
                if key_event[0] == 'end_map':
                    return None
                child = self.cursor.require_event()
                if segment.matches_member(key_event[1]):
                    found = self._descend(child, matched + 1)
                    if found is not None:
                        return found
                else:
                    self.cursor.skip_value(child)
        elif event == 'start_array':
            position = 0
            while True:
                child = self.cursor.require_event()
                if child[0] == 'end_array':
                    return None
                if segment.matches_index(position):
                    found = self._descend(child, matched + 1)
                    if found is not None:
                        return found
                else:
                    self.cursor.skip_value(child)
                position += 1
        return None

    def next_event(self) -> Optional[Event]:
        if self._exhausted:
            return None
        if not self._seeked:
            self._seeked = True
            event = self.seek()
        else:
            event = self.cursor.next_event()
        if event is None:
            self._exhausted = True
            return None
        if event[0] in START_EVENTS:
            self._depth += 1
        elif event[0] in END_EVENTS:
            self._depth -= 1
        if self._depth == 0:
            self._exhausted = True
        return event

    def read_value(self, first: Event) -> Any:
        value = self.cursor.read_value(first)
        if first[0] in START_EVENTS:
            self._depth -= 1
            if self._depth == 0:
                self._exhausted = True
        return value


def filtered(cursor: EventCursor, pointer: FieldPointer):
    """Return ``cursor`` itself for the root pointer, otherwise a PathFilter over it."""
    if pointer.is_root:
        return cursor
    return PathFilter(cursor, pointer)


class _EncodingReader(io.RawIOBase):
    """Presents a text stream as UTF-8 bytes for the tokenizer."""

    def __init__(self, text_stream, encoding='utf-8'):
        self._text = text_stream
        self._encoding = encoding
        self._pending = b''

    def readable(self):
        return True

    def readinto(self, buffer):
        while len(self._pending) < len(buffer):
            chunk = self._text.read(max(1, len(buffer) // 4))
            if not chunk:
                break
            self._pending += chunk.encode(self._encoding)
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size


@contextmanager
def open_source(source):
    """Yield a binary file object for ``source``; files opened here are always closed."""
    if isinstance(source, (bytes, bytearray)):
        yield io.BytesIO(source)
    elif isinstance(source, str):
        yield io.BytesIO(source.encode('utf-8'))
    elif isinstance(source, os.PathLike):
        with open(source, 'rb') as f:
            yield f
    elif hasattr(source, 'read'):
        if isinstance(source.read(0), str):
            yield io.BufferedReader(_EncodingReader(source))
        else:
            yield source
    else:
        raise TypeError(f"unsupported JSON source: {type(source).__name__}")
