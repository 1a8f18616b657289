#!/usr/bin/env python3
"""Streaming of delimited text through a header validator, line converter and consumer."""
import csv, io, os, logging
from contextlib import contextmanager
from typing import Any, Callable, Iterable, List, Optional, Sequence

from . import defaults
from .errors import (ConfigurationError, CSVWriteError, HeaderValidationError,
                     MalformedDocument, RowShapeMismatch, RowStreamError)

logger = logging.getLogger(__name__)

DEFAULT_HEADER_COUNT = 1
COMMENT_PREFIX = '#'


class RowStreamDialect(csv.Dialect):
    delimiter = ','
    quotechar = '"'
    escapechar = None
    doublequote = True
    skipinitialspace = True
    lineterminator = '\n'
    quoting = csv.QUOTE_MINIMAL


def default_dialect():
    """Dialect used when none is given: comma separated, double quotes, leading spaces skipped."""
    return RowStreamDialect


def make_dialect(delimiter=',', quotechar: Optional[str] = '"', escapechar: Optional[str] = None):
    """Build a dialect variant; a ``quotechar`` of None disables quoting."""
    attrs = {
        'delimiter': delimiter,
        'quotechar': quotechar or '"',
        'escapechar': escapechar,
        'doublequote': escapechar is None or escapechar == quotechar,
        'quoting': csv.QUOTE_NONE if quotechar is None else csv.QUOTE_MINIMAL,
    }
    if escapechar == quotechar:
        attrs['escapechar'] = None
    return type('CustomRowStreamDialect', (RowStreamDialect,), attrs)


@contextmanager
def open_text_source(source):
    """Yield a text stream suitable for ``csv.reader``."""
    if isinstance(source, str):
        yield io.StringIO(source, newline='')
    elif isinstance(source, (bytes, bytearray)):
        yield io.StringIO(bytes(source).decode('utf-8'), newline='')
    elif isinstance(source, os.PathLike):
        with open(source, 'r', encoding='utf-8', newline='') as f:
            yield f
    elif hasattr(source, 'read'):
        if isinstance(source.read(0), bytes):
            wrapper = io.TextIOWrapper(source, encoding='utf-8', newline='')
            try:
                yield wrapper
            finally:
                # leave the caller's binary stream open
                wrapper.detach()
        else:
            yield source
    else:
        raise TypeError(f"unsupported CSV source: {type(source).__name__}")


def _records(reader):
    for record in reader:
        if not record:
            continue
        if record[0].lstrip().startswith(COMMENT_PREFIX):
            continue
        yield [field.strip() for field in record]


def parse(source, headers_validator: Callable[[List[str]], Any],
          line_converter: Callable[[List[str], List[str]], Any],
          result_consumer: Callable[[Any], Any],
          substitute_headers: Optional[Sequence[str]] = None,
          default_values: Sequence[str] = (),
          header_line_count: int = DEFAULT_HEADER_COUNT,
          dialect=None) -> int:
    """Stream a CSV document; returns the number of results delivered to ``result_consumer``.

    With ``substitute_headers`` the first ``header_line_count`` records are
    skipped, otherwise the first record supplies the headers. A converter
    result of None keeps the line away from the consumer.
    """
    if header_line_count < 0:
        raise ConfigurationError("Header line count must be non-negative.")
    if header_line_count < 1 and substitute_headers is None:
        raise ConfigurationError(
            "If there are no header lines, a substitute set of headers must be defined.")

    headers = None
    replace_defaults = None
    if substitute_headers is not None:
        headers = [h.strip() for h in substitute_headers]
        try:
            headers_validator(headers)
        except Exception as e:
            raise HeaderValidationError("Could not verify substituted headers for csv file") from e
        replace_defaults = defaults.build_positional(default_values, len(headers))

    line_count = 0
    delivered = discarded = 0
    with open_text_source(source) as f:
        reader = csv.reader(f, dialect or default_dialect())
        try:
            for line in _records(reader):
                if headers is None:
                    headers = line
                    try:
                        headers_validator(headers)
                    except Exception as e:
                        raise HeaderValidationError("Could not verify headers for csv file") from e
                    replace_defaults = defaults.build_positional(default_values, len(headers))
                elif line_count >= header_line_count:
                    if len(line) != len(headers):
                        raise RowShapeMismatch(headers, line)
                    result = line_converter(headers, replace_defaults(line))
                    if result is None:
                        discarded += 1
                    else:
                        result_consumer(result)
                        delivered += 1
                else:
                    logger.debug("skipping header line %s of %s", line_count + 1, header_line_count)
                line_count += 1
        except csv.Error as e:
            logger.error(f"csv parse failed at line {reader.line_num}: {e}")
            raise MalformedDocument(f"Could not parse CSV document at line {reader.line_num}: {e}",
                                    rows_read=line_count) from e

    if headers is None:
        raise RowStreamError("CSV file did not contain a valid header line")
    logger.info("%s rows | %s discarded", delivered, discarded)
    return delivered


def write(writer, objects: Iterable[Any], headers: Sequence[str],
          object_converter: Callable[[List[str], Any], Sequence[str]],
          write_header: bool = True, dialect=None) -> int:
    """Write one CSV line per object; returns the number of lines written, header excluded."""
    headers = list(headers)
    out = csv.writer(writer, dialect or default_dialect())
    if write_header:
        out.writerow(headers)
    count = 0
    for obj in objects:
        try:
            line = object_converter(headers, obj)
        except Exception as e:
            raise CSVWriteError("Could not write object out") from e
        out.writerow(line)
        count += 1
    return count
