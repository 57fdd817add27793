"""
Date format token handling.

A date format is either one of the ISO spellings (``ISO``, ``YYYY-MM-DD``),
which are handed to the general ISO-8601 parser, or a positional layout built
from exactly one ``YYYY``, ``MM`` and ``DD`` token joined by a single uniform
separator character (``DD/MM/YYYY``, ``MM.DD.YYYY``, ...). ``YYYYMMDD`` is the
only separator-less layout.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Pattern, Tuple

ISO_FORMATS = frozenset({"ISO", "YYYY-MM-DD"})

_TOKENS = ("YYYY", "MM", "DD")
_TOKEN_WIDTHS = {"YYYY": 4, "MM": 2, "DD": 2}
_TOKEN_KEYS = {"YYYY": "year", "MM": "month", "DD": "day"}
_TOKEN_RE = re.compile(r"YYYY|MM|DD")


@dataclass(frozen=True)
class DatePattern:
    """Compiled positional date layout."""
    fmt: str
    regex: Pattern
    order: Tuple[str, str, str]  # year/month/day keys, left to right

    def extract(self, value: str) -> Optional[Tuple[int, int, int]]:
        """Return (year, month, day) or None when the value does not fit the layout."""
        match = self.regex.fullmatch(value)
        if not match:
            return None
        parts = dict(zip(self.order, (int(group) for group in match.groups())))
        return parts["year"], parts["month"], parts["day"]


@lru_cache(maxsize=128)
def compile_date_format(fmt: str) -> DatePattern:
    """Compile a token date format into a positional pattern.

    Raises:
        ValueError: If the format is missing or repeats a token, mixes
            separators, or is an unsupported separator-less layout.
    """
    offsets = {}
    for token in _TOKENS:
        pos = fmt.find(token)
        if pos == -1:
            raise ValueError(f"Date format '{fmt}' is missing the {token} token")
        if fmt.find(token, pos + 1) != -1:
            raise ValueError(f"Date format '{fmt}' repeats the {token} token")
        offsets[token] = pos

    ordered = sorted(_TOKENS, key=offsets.__getitem__)
    leftover = _TOKEN_RE.sub("", fmt)

    if not leftover:
        if fmt != "YYYYMMDD":
            raise ValueError(f"Unsupported date format '{fmt}': only YYYYMMDD may omit separators")
        separator = ""
    else:
        separator = leftover[0]
        if separator.isalnum() or fmt != separator.join(ordered):
            raise ValueError(
                f"Unsupported date format '{fmt}': tokens must be joined by one uniform separator"
            )

    pattern = re.escape(separator).join(rf"(\d{{{_TOKEN_WIDTHS[token]}}})" for token in ordered)
    return DatePattern(
        fmt=fmt,
        regex=re.compile(pattern),
        order=tuple(_TOKEN_KEYS[token] for token in ordered),
    )


def validate_date_format(fmt: str) -> str:
    """Return the format unchanged if supported, raise ValueError otherwise."""
    if fmt not in ISO_FORMATS:
        compile_date_format(fmt)
    return fmt
