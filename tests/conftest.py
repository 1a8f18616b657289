#!/usr/bin/env python3
"""Shared pytest fixtures for the rowstream test suite."""

import pytest
import json
import pathlib
import sys
from typing import Any, Dict, List

# Add parent directory to path for imports
sys.path.insert(0, str(pathlib.Path(__file__).parent.parent))

from tests.fixtures.generate_test_data import (
    generate_people_json,
    generate_corrupted_json,
    generate_unicode_json,
    generate_people_csv,
)

from rowstream.pointer import compile


# ============================================================================
# Document Fixtures
# ============================================================================

ALICE_BOB = {
    "base": [
        {"name": "Alice", "phone": [{"home": "1234567890", "mobile": "0001112223"}]},
        {"name": "Bob", "phone": [{"home": "3456789012", "mobile": "4445556677"}]},
    ]
}


@pytest.fixture
def alice_bob_text() -> str:
    """The two-person phone book document."""
    return json.dumps(ALICE_BOB)


@pytest.fixture
def alice_missing_home_text() -> str:
    """Phone book where Alice has no home phone."""
    data = json.loads(json.dumps(ALICE_BOB))
    del data["base"][0]["phone"][0]["home"]
    return json.dumps(data)


@pytest.fixture
def phone_fields() -> Dict[str, Any]:
    """Field pointers for name, home and mobile phone."""
    return {
        "name": compile("/name"),
        "homePhone": compile("/phone/0/home"),
        "mobilePhone": compile("/phone/0/mobile"),
    }


@pytest.fixture
def phone_headers() -> List[str]:
    return ["name", "homePhone", "mobilePhone"]


@pytest.fixture
def people_json_file(tmp_path) -> pathlib.Path:
    """A people document with 50 records."""
    json_file = tmp_path / "people.json"
    generate_people_json(50, str(json_file))
    return json_file


@pytest.fixture
def sparse_people_json_file(tmp_path) -> pathlib.Path:
    """A people document where every third record lacks a home phone."""
    json_file = tmp_path / "sparse.json"
    generate_people_json(30, str(json_file), missing_home_every=3)
    return json_file


@pytest.fixture
def corrupted_json_file(tmp_path) -> pathlib.Path:
    """A truncated people document."""
    json_file = tmp_path / "corrupted.json"
    generate_corrupted_json(40, str(json_file))
    return json_file


@pytest.fixture
def unicode_json_file(tmp_path) -> pathlib.Path:
    json_file = tmp_path / "unicode.json"
    generate_unicode_json(str(json_file))
    return json_file


@pytest.fixture
def people_csv_file(tmp_path) -> pathlib.Path:
    csv_file = tmp_path / "people.csv"
    generate_people_csv(20, str(csv_file))
    return csv_file


@pytest.fixture
def mapping_file(tmp_path) -> pathlib.Path:
    """Mapping file for the people documents."""
    mapping = tmp_path / "mapping.json"
    mapping.write_text(json.dumps({
        "basePath": "/base",
        "fields": {
            "name": "/name",
            "homePhone": "/phone/0/home",
            "mobilePhone": "/phone/0/mobile",
            "note": None,
        },
        "headers": ["name", "homePhone", "mobilePhone", "note"],
        "defaults": {"homePhone": "5551234", "note": "n/a"},
    }))
    return mapping


# ============================================================================
# Collector Fixtures
# ============================================================================

class Collector:
    """Records validator, converter and consumer calls."""

    def __init__(self):
        self.headers = []
        self.rows = []
        self.results = []
        self.elements = []

    def validate(self, headers):
        self.headers.append(list(headers))

    def convert(self, element, headers, row):
        self.elements.append(element)
        self.rows.append(row)
        return row

    def convert_row(self, headers, row):
        self.rows.append(row)
        return row

    def consume(self, result):
        self.results.append(result)


@pytest.fixture
def collector() -> Collector:
    return Collector()


@pytest.fixture
def clean_environment(monkeypatch):
    """Ensure a clean environment for tests."""
    for var in ['ROWSTREAM_LOG_LEVEL', 'ROWSTREAM_UPLOAD_CHUNK_MB', 'PORT']:
        monkeypatch.delenv(var, raising=False)
    yield


# ============================================================================
# Performance Testing Fixtures
# ============================================================================

@pytest.fixture
def memory_profiler():
    """Setup memory profiling for tests."""
    try:
        from memory_profiler import memory_usage

        def profile_memory(func, *args, **kwargs):
            """Profile memory usage of a function."""
            mem_usage = memory_usage((func, args, kwargs), interval=0.01)
            return {
                "min": min(mem_usage),
                "max": max(mem_usage),
                "avg": sum(mem_usage) / len(mem_usage)
            }

        return profile_memory
    except ImportError:
        pytest.skip("memory_profiler not installed")


# ============================================================================
# Test Markers
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")
    config.addinivalue_line("markers", "benchmark: marks benchmark tests")
