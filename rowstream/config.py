"""Extraction options and environment settings."""
import json, os, pathlib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .assembler import COMPOSITE_POLICIES, compile_field_map
from .errors import ConfigurationError
from .pointer import FieldPointer
from .json_stream import base_pointer

LOG_LEVEL_ENV = 'ROWSTREAM_LOG_LEVEL'
UPLOAD_CHUNK_ENV = 'ROWSTREAM_UPLOAD_CHUNK_MB'


def log_level(default='INFO') -> str:
    return os.environ.get(LOG_LEVEL_ENV, default).upper()


def upload_chunk_bytes() -> int:
    try:
        mb = int(os.environ.get(UPLOAD_CHUNK_ENV, '8'))
    except ValueError:
        raise ConfigurationError(f"{UPLOAD_CHUNK_ENV} must be an integer")
    if mb < 1:
        raise ConfigurationError(f"{UPLOAD_CHUNK_ENV} must be at least 1")
    return mb * 1024 * 1024


@dataclass(frozen=True)
class ExtractionOptions:
    """Everything a JSON extraction needs besides the validator, converter and consumer."""
    base_path: FieldPointer
    field_map: Dict[str, Optional[FieldPointer]]
    output_headers: List[str]
    default_values: Dict[str, str] = field(default_factory=dict)
    composite_policy: str = 'empty'

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], composite_policy: Optional[str] = None):
        """Build options from ``{"basePath", "fields", "headers", "defaults"}``."""
        if not isinstance(mapping, Mapping):
            raise ConfigurationError("Mapping must be a JSON object")
        fields = mapping.get('fields')
        if not fields or not isinstance(fields, Mapping):
            raise ConfigurationError("No field paths were set")
        headers = mapping.get('headers') or list(fields)
        if not isinstance(headers, list) or not all(isinstance(h, str) for h in headers):
            raise ConfigurationError("headers must be a list of strings")
        defaults = mapping.get('defaults') or {}
        if not isinstance(defaults, Mapping):
            raise ConfigurationError("defaults must be an object of strings")
        policy = composite_policy or mapping.get('compositePolicy', 'empty')
        if policy not in COMPOSITE_POLICIES:
            raise ConfigurationError(f"Unknown composite policy: {policy}")
        return cls(
            base_path=base_pointer(mapping.get('basePath', '')),
            field_map=compile_field_map(fields),
            output_headers=list(headers),
            default_values={str(k): str(v) for k, v in defaults.items()},
            composite_policy=policy,
        )

    @classmethod
    def load(cls, path, composite_policy: Optional[str] = None):
        text = pathlib.Path(path).read_text(encoding='utf-8')
        try:
            mapping = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Could not read mapping file {path}: {e}") from e
        return cls.from_mapping(mapping, composite_policy)

    def parse_args(self):
        """Keyword arguments for ``json_stream.parse``."""
        return {
            'base_path': self.base_path,
            'field_relative_paths': self.field_map,
            'default_values': self.default_values,
            'output_headers': self.output_headers,
            'composite_policy': self.composite_policy,
        }
