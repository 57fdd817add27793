"""Pytest configuration and shared fixtures."""

import json
import shutil
import tempfile
from pathlib import Path

import pytest

from flatfile_parser.config_models import SchemaConfig

EMPLOYEE_SCHEMA = {
    "delimiter": "|",
    "fields": [
        {"name": "id", "type": "integer", "position": 0},
        {"name": "name", "type": "text", "position": 1, "required": True},
        {"name": "salary", "type": "decimal", "position": 2, "decimalPlaces": 2},
        {"name": "dob", "type": "date", "position": 3, "format": "YYYYMMDD"},
        {"name": "active", "type": "boolean", "position": 4},
    ],
}


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def temp_output_dir():
    """Create temporary output directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    # Cleanup
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def employee_schema() -> SchemaConfig:
    """Pipe-delimited employee schema without header."""
    return SchemaConfig.from_dict(EMPLOYEE_SCHEMA)


@pytest.fixture
def stream_schema() -> SchemaConfig:
    """Small three-field schema used by the streaming tests."""
    return SchemaConfig.from_dict({
        "delimiter": "|",
        "fields": [
            {"name": "id", "type": "integer", "position": 0},
            {"name": "name", "type": "text", "position": 1},
            {"name": "active", "type": "boolean", "position": 2},
        ],
    })


@pytest.fixture
def sample_schema_file(tmp_path) -> Path:
    """Write the employee schema to a JSON file."""
    schema_file = tmp_path / "employees_schema.json"
    schema_file.write_text(json.dumps(EMPLOYEE_SCHEMA, indent=2))
    return schema_file


@pytest.fixture
def csv_output_schema_file(tmp_path) -> Path:
    """Comma-delimited output layout with header and CRLF endings."""
    config = {
        "delimiter": ",",
        "hasHeader": True,
        "lineEnding": "CRLF",
        "fields": [
            {"name": "id", "type": "integer", "position": 0},
            {"name": "name", "type": "text", "position": 1},
            {"name": "dob", "type": "date", "position": 2, "format": "DD/MM/YYYY"},
            {"name": "active", "type": "boolean", "position": 3, "trueValue": "Y", "falseValue": "N"},
        ],
    }
    schema_file = tmp_path / "csv_schema.json"
    schema_file.write_text(json.dumps(config, indent=2))
    return schema_file


@pytest.fixture
def sample_pipe_file(tmp_path) -> Path:
    """Create a pipe-delimited employee file with one bad line."""
    content = (
        "1|Alice Smith|75000.50|19850315|1\n"
        "2|Bob Jones|82000.00|19901122|yes\n"
        "x|  |abc|19901322|maybe\n"
    )
    pipe_file = tmp_path / "employees.pipe"
    pipe_file.write_text(content)
    return pipe_file
