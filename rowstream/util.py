"""JSON helpers for loading, querying and pretty-printing small documents."""
import json, os
from typing import Any

from .assembler import text_value
from .pointer import MISSING, compile, resolve


def load_json(source) -> Any:
    """Load a whole document from a path, text/binary stream, or JSON text."""
    if isinstance(source, (str, bytes, bytearray)):
        return json.loads(source)
    if isinstance(source, os.PathLike):
        with open(source, 'r', encoding='utf-8') as f:
            return json.load(f)
    return json.load(source)


def query_node(node: Any, jpath) -> Any:
    """Value at ``jpath`` below ``node``, or MISSING."""
    return resolve(node, compile(jpath))


def query_node_as_text(node: Any, jpath) -> str:
    value = query_node(node, jpath)
    if value is MISSING:
        return ''
    if isinstance(value, (dict, list)):
        return ''
    return text_value(value)


def query_json(source, jpath) -> str:
    """Load ``source`` and return the text of the value at ``jpath``."""
    return query_node_as_text(load_json(source), jpath)


def to_pretty_print(value: Any, writer=None):
    """Indent ``value`` (a tree or a readable JSON stream); returns the text if no writer is given."""
    if hasattr(value, 'read'):
        value = json.load(value)
    if writer is None:
        return json.dumps(value, indent=2, ensure_ascii=False, default=str)
    json.dump(value, writer, indent=2, ensure_ascii=False, default=str)
    return None
