"""
Pydantic models for strongly-typed schema validation.

A schema is built once (from a dict or a JSON file), validated eagerly and
then shared read-only by every parse and serialize call.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator

from flatfile_parser.date_formats import validate_date_format


class FieldType(str, Enum):
    """Supported field data types."""
    TEXT = "text"
    INTEGER = "integer"
    DECIMAL = "decimal"
    DATE = "date"
    BOOLEAN = "boolean"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            lowered = value.lower()
            for member in cls:
                if member.value == lowered:
                    return member
            return _FIELD_TYPE_ALIASES.get(lowered)
        return None


# Legacy spellings accepted in schema files
_FIELD_TYPE_ALIASES = {
    "string": FieldType.TEXT,
    "number": FieldType.INTEGER,
    "int": FieldType.INTEGER,
    "bool": FieldType.BOOLEAN,
}


class LineEnding(str, Enum):
    """Line ending policy for whole-document parsing and serialization."""
    LF = "LF"
    CRLF = "CRLF"
    AUTO = "auto"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.lower():
                    return member
        return None


class FieldConfig(BaseModel):
    """Field definition configuration."""
    name: str = Field(..., min_length=1, description="Key of the field in parsed records")
    type: FieldType = Field(..., description="Field data type")
    position: int = Field(..., ge=0, description="0-indexed column position in a line")
    required: bool = Field(False, description="Empty values are reported as errors")

    # Type-specific options
    decimal_places: int = Field(2, alias="decimalPlaces", ge=0, description="Digits after the point for decimals")
    date_format: str = Field("ISO", alias="format", description="ISO, YYYY-MM-DD, YYYYMMDD, DD/MM/YYYY, ...")
    true_value: Optional[str] = Field(None, alias="trueValue", description="Literal for true (default: true/1/y/yes)")
    false_value: Optional[str] = Field(None, alias="falseValue", description="Literal for false (default: false/0/n/no)")

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value):
        """Accept legacy and differently-cased type names."""
        if isinstance(value, str):
            try:
                return FieldType(value)
            except ValueError:
                return value  # let the enum validator report it
        return value

    @field_validator("date_format")
    @classmethod
    def validate_format(cls, value: str) -> str:
        """Reject date formats the positional parser cannot handle."""
        return validate_date_format(value)


class SchemaConfig(BaseModel):
    """Main flat-file schema configuration."""
    delimiter: str = Field(..., min_length=1, description="Field separator, e.g. '|', ',', '\\t'")
    fields: Tuple[FieldConfig, ...] = Field(..., min_length=1, description="Field definitions")
    has_header: bool = Field(False, alias="hasHeader", description="First line is a header row")
    line_ending: LineEnding = Field(LineEnding.AUTO, alias="lineEnding", description="LF, CRLF or auto")

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("line_ending", mode="before")
    @classmethod
    def normalize_line_ending(cls, value):
        """Accept 'Auto', 'lf', ... as well as the canonical spellings."""
        if isinstance(value, str):
            try:
                return LineEnding(value)
            except ValueError:
                return value
        return value

    @field_validator("fields")
    @classmethod
    def validate_unique_fields(cls, fields):
        """Ensure field names and positions are unique, then order by position."""
        field_names = [f.name for f in fields]
        duplicates = [name for name in set(field_names) if field_names.count(name) > 1]
        if duplicates:
            raise ValueError(f"Duplicate field names: {', '.join(sorted(duplicates))}")

        positions = [f.position for f in fields]
        duplicate_positions = [pos for pos in set(positions) if positions.count(pos) > 1]
        if duplicate_positions:
            raise ValueError(
                f"Duplicate field positions: {', '.join(str(p) for p in sorted(duplicate_positions))}"
            )

        return tuple(sorted(fields, key=lambda f: f.position))

    @property
    def field_names(self) -> List[str]:
        """Field names in position order."""
        return [f.name for f in self.fields]

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "SchemaConfig":
        """
        Create SchemaConfig from a dictionary with full validation.

        Args:
            config_dict: Schema dictionary (snake_case names or camelCase aliases)

        Returns:
            Validated SchemaConfig instance

        Raises:
            ValidationError: If the schema is invalid
        """
        return cls.model_validate(config_dict)

    @classmethod
    def from_json_file(cls, config_path: Union[str, Path]) -> "SchemaConfig":
        """
        Load and validate a schema from a JSON file.

        Raises:
            ValidationError: If the schema is invalid
            FileNotFoundError: If file doesn't exist
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Schema file not found: {config_path}")

        with open(path, encoding='utf-8') as f:
            config_dict = json.load(f)

        return cls.from_dict(config_dict)
