"""Exception family raised by the row streams."""


class RowStreamError(Exception):
    """Base class for every error raised while extracting rows."""


class ConfigurationError(RowStreamError, ValueError):
    """The caller supplied an invalid mapping before any data was read."""


class MalformedPointer(ConfigurationError):
    """Pointer text could not be compiled."""

    def __init__(self, text, reason):
        super().__init__(f"Malformed pointer '{text}': {reason}")
        self.text = text
        self.reason = reason


class HeaderValidationError(RowStreamError):
    """The header validator rejected the header list."""


class PathNotFound(RowStreamError):
    def __init__(self, path):
        super().__init__(f"Path did not match anything: path='{path}'")
        self.path = path


class UnsupportedBaseShape(RowStreamError):
    def __init__(self, path, found):
        super().__init__(
            "Base pointer must point to either an array or an object: "
            f"instead found {found} (path was '{path}')"
        )
        self.path = path
        self.found = found


class MalformedDocument(RowStreamError):
    """Wraps a tokenizer failure (truncated input, invalid syntax, bad encoding)."""

    def __init__(self, message, path=None, rows_read=0):
        super().__init__(message)
        self.path = path
        self.rows_read = rows_read


class RowShapeMismatch(RowStreamError):
    def __init__(self, headers, row):
        super().__init__(
            f"Line and header sizes were different: expected {len(headers)}, "
            f"found {len(row)} headers={list(headers)} line={list(row)}"
        )
        self.expected = len(headers)
        self.actual = len(row)
        self.headers = list(headers)
        self.row = list(row)


class FieldShapeError(RowStreamError):
    """A field pointer resolved to an object or array under the strict policy."""

    def __init__(self, field, pointer, found):
        super().__init__(
            f"Field relative pointers must point to value nodes: field '{field}' "
            f"with pointer '{pointer}' found {found}"
        )
        self.field = field
        self.pointer = pointer
        self.found = found


class CSVWriteError(RowStreamError):
    """An object could not be converted into a CSV line."""
