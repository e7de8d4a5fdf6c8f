from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .config_models import Operation

"""Step result model.

Aggregated outcome of one invocation: the output batch handed back to
the workflow host plus counters used for the SUMMARY line.
"""


@dataclass(frozen=True)
class StepResult:
    operation: Operation
    items: list[dict[str, Any]] = field(default_factory=list)  # 出力バッチ
    input_items: int = 0
    rows_read: int = 0  # data rows decoded from the fetched grid
    records_out: int = 0  # records produced by read / lookup
    ranges_written: int = 0  # ranges in the batch write
    rows_appended: int = 0
    skipped_unmatched: int = 0  # update records whose key was not found
    elapsed_seconds: float = 0.0
