"""
Data models and structures for the flat-file parser.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Field name -> typed value, or None when the value is absent
Record = Dict[str, Any]


@dataclass(frozen=True)
class ParseError:
    """One failing field on one source line."""
    line: int  # 1-indexed, header line included
    field: str
    position: int
    message: str
    raw: str


@dataclass
class ParseResult:
    """Records and collected field errors of one whole-document parse."""
    records: List[Record] = field(default_factory=list)
    errors: List[ParseError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def error_lines(self) -> List[int]:
        """Sorted source line numbers that produced at least one error."""
        return sorted({e.line for e in self.errors})


@dataclass
class ParsingStats:
    """Parsing statistics."""
    total_rows: int = 0
    success_rows: int = 0
    failed_rows: int = 0  # Records emitted with at least one failed field
    skipped_rows: int = 0  # Blank lines
    field_errors: int = 0
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None

    @property
    def duration(self) -> float:
        """Get parsing duration in seconds."""
        end = self.end_time or time.time()
        return end - self.start_time

    @property
    def rows_per_second(self) -> float:
        """Get processing throughput."""
        duration = self.duration
        return self.total_rows / duration if duration > 0 else 0
