"""Stream tabular rows out of JSON and CSV documents using declarative field mappings."""
from .errors import (RowStreamError, ConfigurationError, MalformedPointer, HeaderValidationError,
                     PathNotFound, UnsupportedBaseShape, MalformedDocument, RowShapeMismatch,
                     FieldShapeError, CSVWriteError)
from .pointer import FieldPointer, MISSING, resolve

__version__ = "0.1.0"
