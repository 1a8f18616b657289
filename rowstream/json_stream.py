#!/usr/bin/env python3
"""Constant-memory extraction of rows from a JSON document.

The document is tokenized with ijson. A pointer filter skips everything
outside the base path; if the base is an array each element is built as its
own tree and turned into a row before the next one is read, if it is an
object it yields exactly one row.
"""
import logging
from typing import Any, Callable, List, Mapping, Optional

import ijson

from .assembler import RowAssembler
from .cursor import EventCursor, filtered, open_source
from .errors import (ConfigurationError, HeaderValidationError, MalformedDocument,
                     PathNotFound, RowStreamError, UnsupportedBaseShape)
from .pointer import ROOT, FieldPointer, compile

logger = logging.getLogger(__name__)

SCALAR_NAMES = {
    'string': 'a string', 'number': 'a number', 'integer': 'a number',
    'double': 'a number', 'boolean': 'a boolean', 'null': 'null',
}


def base_pointer(base_path) -> FieldPointer:
    """Compile the base path; both ``""`` and ``"/"`` mean the document root."""
    if base_path is None or base_path == '/' or (
            isinstance(base_path, FieldPointer) and str(base_path) == '/'):
        return ROOT
    return compile(base_path)


def parse(source, headers_validator: Callable[[List[str]], Any],
          line_converter: Callable[[Any, List[str], List[str]], Any],
          result_consumer: Callable[[Any], Any], base_path,
          field_relative_paths: Mapping[str, Any], default_values: Optional[Mapping[str, str]],
          output_headers: List[str], composite_policy: str = 'empty') -> int:
    """Stream rows from ``source`` into ``result_consumer``; returns the number delivered.

    ``line_converter(element, headers, row)`` returning None discards the row.
    """
    if not field_relative_paths:
        raise ConfigurationError("No field paths were set for json_stream.parse")
    if not output_headers:
        raise ConfigurationError("No output headers were set for json_stream.parse")
    headers = [h.strip() for h in output_headers]
    try:
        headers_validator(headers)
    except Exception as e:
        raise HeaderValidationError("Could not verify substituted headers for json file") from e

    field_map = {name.strip(): pointer for name, pointer in field_relative_paths.items()}
    assembler = RowAssembler(headers, field_map, default_values or {}, line_converter,
                             result_consumer, composite_policy=composite_policy)
    pointer = base_pointer(base_path)

    rows_read = 0
    with open_source(source) as f:
        cursor = filtered(EventCursor(f), pointer)
        try:
            first = cursor.next_event()
            if first is None:
                raise PathNotFound(str(pointer))
            kind = first[0]
            logger.debug("base path '%s' matched %s", pointer, kind)
            if kind == 'start_array':
                while True:
                    event = cursor.next_event()
                    if event is None or event[0] == 'end_array':
                        break
                    element = cursor.read_value(event)
                    rows_read += 1
                    assembler.process(element)
            elif kind == 'start_map':
                element = cursor.read_value(first)
                rows_read += 1
                assembler.process(element)
            else:
                raise UnsupportedBaseShape(str(pointer), SCALAR_NAMES.get(kind, kind))
        except RowStreamError:
            raise
        except (ijson.JSONError, UnicodeDecodeError) as e:
            logger.error(f"stream parse failed at '{pointer}' after {rows_read} elements: {e}")
            raise MalformedDocument(
                f"Could not parse JSON document (path was '{pointer}', "
                f"{rows_read} elements read, {cursor.events_read} tokens): {e}",
                path=str(pointer), rows_read=rows_read) from e

    logger.info("%s rows | %s discarded", assembler.delivered, assembler.discarded)
    return assembler.delivered
