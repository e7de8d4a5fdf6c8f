from __future__ import annotations

from ..models.step_result import StepResult

"""SUMMARY line rendering.

Format:
SUMMARY operation={op} items={n} rows_read={n} records_out={n}
ranges_written={n} rows_appended={n} skipped={n} elapsed_sec={s}
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for tiny values
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: StepResult) -> str:
    """Render the SUMMARY line for one step.

    Examples:
        >>> from sheetrecords.models import Operation, StepResult
        >>> render_summary_line(StepResult(operation=Operation.READ, input_items=1, rows_read=2, records_out=2))
        'SUMMARY operation=read items=1 rows_read=2 records_out=2 ranges_written=0 rows_appended=0 skipped=0 elapsed_sec=0'
    """
    return (
        f"SUMMARY operation={result.operation.value} "
        f"items={result.input_items} "
        f"rows_read={result.rows_read} "
        f"records_out={result.records_out} "
        f"ranges_written={result.ranges_written} "
        f"rows_appended={result.rows_appended} "
        f"skipped={result.skipped_unmatched} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
