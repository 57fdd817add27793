"""
Validation functions for raw field values.
"""

from typing import Optional

from flatfile_parser.config_models import FieldConfig
from flatfile_parser.models import ParseError


def is_missing_required(raw: str, field: FieldConfig) -> bool:
    """True when a required field holds only whitespace."""
    return field.required and not raw.strip()


def validate_field(raw: str, field: FieldConfig, line_number: int) -> Optional[ParseError]:
    """Validate a raw column value against field constraints.

    Runs before casting; when it reports an error the cast is skipped.

    Returns:
        ParseError if validation fails, None otherwise
    """
    if is_missing_required(raw, field):
        return ParseError(
            line=line_number,
            field=field.name,
            position=field.position,
            message=f'Field "{field.name}" at position {field.position} is required but empty',
            raw=raw,
        )
    return None
