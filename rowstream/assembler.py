#!/usr/bin/env python3
"""Turns matched JSON elements into header-aligned rows and forwards them."""
import logging
from typing import Any, Callable, List, Mapping, Optional, Sequence

from . import defaults
from .errors import ConfigurationError, FieldShapeError, RowShapeMismatch
from .pointer import MISSING, FieldPointer, compile, resolve

logger = logging.getLogger(__name__)

COMPOSITE_POLICIES = ('empty', 'error')


def text_value(value: Any) -> str:
    """Text form of a scalar JSON value; a present null is the text 'null'."""
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, str):
        return value
    return str(value)


def row_converter(fn: Callable[[List[str], List[str]], Any]):
    """Adapt a ``fn(headers, row)`` converter to the element-aware signature."""
    def convert(element, headers, row):
        return fn(headers, row)
    return convert


def compile_field_map(field_map: Mapping[str, Any]) -> dict:
    """Compile pointer text values; ``None`` stays as a declared but unmapped field."""
    compiled = {}
    for name, pointer in field_map.items():
        compiled[name] = None if pointer is None else compile(pointer)
    return compiled


class RowAssembler:
    """Builds one row per matched element and hands it to the converter and consumer."""

    def __init__(self, output_headers: Sequence[str], field_map: Mapping[str, Optional[FieldPointer]],
                 default_values: Mapping[str, str], converter, consumer,
                 composite_policy: str = 'empty'):
        if composite_policy not in COMPOSITE_POLICIES:
            raise ConfigurationError(f"Unknown composite policy: {composite_policy}")
        self.headers = list(output_headers)
        pointers = []
        for header in self.headers:
            if header not in field_map:
                raise ConfigurationError(f"No relative JSONPath mapping found for header: {header}")
            pointer = field_map[header]
            pointers.append(None if pointer is None else compile(pointer))
        self.pointers = pointers
        self.replace_defaults = defaults.build(self.headers, default_values)
        self.converter = converter
        self.consumer = consumer
        self.strict = composite_policy == 'error'
        self.delivered = 0
        self.discarded = 0

    def assemble(self, element: Any) -> List[str]:
        row = [''] * len(self.headers)
        for i, pointer in enumerate(self.pointers):
            if pointer is None:
                continue
            node = resolve(element, pointer)
            if node is MISSING:
                continue
            if isinstance(node, (dict, list)):
                if self.strict:
                    raise FieldShapeError(self.headers[i], str(pointer),
                                          'object' if isinstance(node, dict) else 'array')
                continue
            row[i] = text_value(node)
        row = self.replace_defaults(row)
        if len(row) != len(self.headers):
            raise RowShapeMismatch(self.headers, row)
        return row

    def process(self, element: Any) -> bool:
        """Assemble, convert and deliver one element; False when the converter discarded it."""
        row = self.assemble(element)
        result = self.converter(element, self.headers, row)
        # None from the converter means the row is not sent to the consumer
        if result is None:
            self.discarded += 1
            logger.debug("converter discarded row %s", self.delivered + self.discarded)
            return False
        self.consumer(result)
        self.delivered += 1
        return True
