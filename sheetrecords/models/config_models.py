from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Config dataclasses for a single workflow step.

These are the typed counterparts of the YAML loaded by
sheetrecords.config.loader. Enum values are the literal strings the
spreadsheet service (and the YAML file) use.
"""


class Operation(Enum):
    """Operation selector; exactly one runs per invocation."""
    APPEND = "append"
    CLEAR = "clear"
    LOOKUP = "lookup"
    READ = "read"
    UPDATE = "update"


class ValueInputMode(Enum):
    """How written values are interpreted by the destination.

    - RAW: stored as-is
    - USER_ENTERED: parsed as if typed into the UI (numbers, dates, ...)
    """
    RAW = "RAW"
    USER_ENTERED = "USER_ENTERED"


class ValueRenderMode(Enum):
    """How read values are rendered in the response."""
    FORMATTED_VALUE = "FORMATTED_VALUE"
    FORMULA = "FORMULA"
    UNFORMATTED_VALUE = "UNFORMATTED_VALUE"


class UnmatchedPolicy(Enum):
    """What a keyed update does with records whose key is not in the sheet."""
    SKIP = "skip"
    APPEND = "append"
    ERROR = "error"


KEYED_OPERATIONS = {Operation.APPEND, Operation.LOOKUP, Operation.READ, Operation.UPDATE}


@dataclass(frozen=True)
class StepConfig:
    """Per-invocation configuration of one step.

    key_row / data_start_row are 0-based grid indexes relative to the
    fetched range (header at key_row, records from data_start_row on).
    """
    operation: Operation
    spreadsheet_id: str
    range: str = "A:F"
    key_row: int = 0
    data_start_row: int = 1
    key: str = "id"  # key field for keyed update
    raw_data: bool = False
    data_property: str = "data"
    lookup_column: str | None = None
    lookup_value: object = None
    lookup_value_field: str | None = None  # take the lookup value from this item field
    return_all_matches: bool = False
    value_input_mode: ValueInputMode = ValueInputMode.RAW
    value_render_mode: ValueRenderMode = ValueRenderMode.UNFORMATTED_VALUE
    unmatched: UnmatchedPolicy = UnmatchedPolicy.SKIP
    timeout_seconds: float = 30.0

    @property
    def uses_header(self) -> bool:
        """True when the operation decodes / encodes through the header row."""
        if self.operation not in KEYED_OPERATIONS:
            return False
        # lookup always works on decoded records
        return self.operation is Operation.LOOKUP or not self.raw_data
