"""
Diagnostics channel for recoverable data problems.

Computation over imported records never raises for bad values. Each problem is
resolved to a sentinel and reported here, so callers get a warnings list next
to the result instead of having to scrape log output.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

UNPARSEABLE_TIMESTAMP = "unparseable_timestamp"
ALLOCATED_EXCEEDS_TOTAL = "allocated_exceeds_total"
NEGATIVE_CAPACITY = "negative_capacity"
END_BEFORE_CREATION = "end_before_creation"
NON_FINITE_VALUE = "non_finite_value"
DATE_OUT_OF_RANGE = "date_out_of_range"


class Diagnostic(BaseModel):
    """
    One recovered data-quality problem.

    Fields:
    - code: machine-readable category (see module constants)
    - message: human-readable description
    - context: identifying details (record id, cluster id, field, value)
    """

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    context: Dict[str, Any] = Field(default_factory=dict)


class Diagnostics:
    """
    Collector passed into computation functions.

    Every warning is also logged, so a caller that passes no collector still
    sees the problem in the log.
    """

    def __init__(self) -> None:
        self._items: List[Diagnostic] = []

    def warn(self, code: str, message: str, **context: Any) -> Diagnostic:
        diagnostic = Diagnostic(code=code, message=message, context=context)
        self._items.append(diagnostic)
        logger.warning(f"{code}: {message}")
        return diagnostic

    def by_code(self, code: str) -> List[Diagnostic]:
        return [d for d in self._items if d.code == code]

    def extend(self, other: "Diagnostics") -> None:
        self._items.extend(other)

    @property
    def items(self) -> List[Diagnostic]:
        return list(self._items)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)


def report(
    diagnostics: Optional[Diagnostics],
    code: str,
    message: str,
    **context: Any,
) -> None:
    """
    Send a warning to the collector if one was given, else only to the log.
    """
    if diagnostics is not None:
        diagnostics.warn(code, message, **context)
    else:
        logger.warning(f"{code}: {message}")
