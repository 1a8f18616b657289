#!/usr/bin/env python3
"""Slash-delimited pointers into JSON trees (RFC 6901 addressing)."""
import re
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .errors import MalformedPointer

_INDEX = re.compile(r'0|[1-9][0-9]*')


class _Missing:
    """Result of resolving a pointer that does not exist in a tree."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return 'MISSING'


MISSING = _Missing()


@dataclass(frozen=True)
class PathSegment:
    """One pointer token: a member name, and an array index when the name is numeric."""
    name: str
    index: Optional[int] = None

    @classmethod
    def of(cls, token: str) -> 'PathSegment':
        if _INDEX.fullmatch(token):
            return cls(token, int(token))
        return cls(token)

    def matches_member(self, key: str) -> bool:
        return self.name == key

    def matches_index(self, position: int) -> bool:
        return self.index is not None and self.index == position

    def __str__(self):
        return self.name.replace('~', '~0').replace('/', '~1')


@dataclass(frozen=True)
class FieldPointer:
    segments: Tuple[PathSegment, ...] = ()

    @property
    def is_root(self) -> bool:
        return not self.segments

    @property
    def head(self) -> Optional[PathSegment]:
        return self.segments[0] if self.segments else None

    @property
    def tail(self) -> 'FieldPointer':
        return FieldPointer(self.segments[1:])

    def append(self, token) -> 'FieldPointer':
        if isinstance(token, int):
            if token < 0:
                raise MalformedPointer(f'{self}/{token}', 'array index must be non-negative')
            token = str(token)
        return FieldPointer(self.segments + (PathSegment.of(token),))

    def __truediv__(self, token) -> 'FieldPointer':
        return self.append(token)

    def __len__(self):
        return len(self.segments)

    def __str__(self):
        return ''.join('/' + str(s) for s in self.segments)


ROOT = FieldPointer()


def _unescape(text: str, token: str) -> str:
    out = []
    i = 0
    while i < len(token):
        ch = token[i]
        if ch == '~':
            nxt = token[i + 1:i + 2]
            if nxt == '0':
                out.append('~')
            elif nxt == '1':
                out.append('/')
            else:
                raise MalformedPointer(text, f"invalid escape '~{nxt}' at offset {i}")
            i += 2
            continue
        out.append(ch)
        i += 1
    return ''.join(out)


def compile(text) -> FieldPointer:
    """Parse pointer text such as ``/phone/0/home``; ``""`` is the document root."""
    if isinstance(text, FieldPointer):
        return text
    if not isinstance(text, str):
        raise MalformedPointer(repr(text), 'pointer must be a string')
    if text == '':
        return ROOT
    if not text.startswith('/'):
        raise MalformedPointer(text, "pointer must be empty or start with '/'")
    return FieldPointer(tuple(PathSegment.of(_unescape(text, t)) for t in text[1:].split('/')))


def resolve(node: Any, pointer) -> Any:
    """Walk ``pointer`` from ``node``; returns MISSING when any step is absent."""
    if not isinstance(pointer, FieldPointer):
        pointer = compile(pointer)
    current = node
    for segment in pointer.segments:
        if isinstance(current, dict):
            if segment.name not in current:
                return MISSING
            current = current[segment.name]
        elif isinstance(current, list):
            if segment.index is None or segment.index >= len(current):
                return MISSING
            current = current[segment.index]
        else:
            return MISSING
    return current
