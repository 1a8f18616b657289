"""Default-value substitution for empty row slots."""
from typing import Callable, List, Mapping, Sequence

from .errors import ConfigurationError

Row = List[str]
RowTransform = Callable[[Row], Row]


def _identity(row: Row) -> Row:
    return row


def _replacer(slot_defaults: Sequence[str]) -> RowTransform:
    def replace(row: Row) -> Row:
        changed = None
        for i, value in enumerate(row):
            if value == '' and i < len(slot_defaults) and slot_defaults[i]:
                if changed is None:
                    changed = list(row)
                changed[i] = slot_defaults[i]
        # untouched rows are passed through without copying
        return row if changed is None else changed
    return replace


def build(output_headers: Sequence[str], default_values: Mapping[str, str]) -> RowTransform:
    """Transform filling empty slots from ``default_values`` keyed by header name."""
    if not default_values:
        return _identity
    slot_defaults = [default_values.get(h) or '' for h in output_headers]
    if not any(slot_defaults):
        return _identity
    return _replacer(slot_defaults)


def build_positional(defaults: Sequence[str], width: int) -> RowTransform:
    """Transform filling empty slots from a list parallel to the headers."""
    if not defaults:
        return _identity
    if len(defaults) != width:
        raise ConfigurationError(
            "Default values list must have the same number of items as the headers: "
            f"expected {width}, found {len(defaults)} defaultValues={list(defaults)}"
        )
    return _replacer([d or '' for d in defaults])
