"""Domain models for the spreadsheet record engine.

Cell values, decoded records, lookup criteria, update instructions and
the step configuration used by every operation.
"""

from .cell import Cell, Grid, Row, cell_text, cells_equal, coerce_cell
from .config_models import Operation, StepConfig, UnmatchedPolicy, ValueInputMode, ValueRenderMode
from .keyed_record import KeyedRecord
from .lookup_criterion import LookupCriterion
from .step_result import StepResult
from .update_instruction import UpdateInstruction

__all__ = [
    # Cell variant
    "Cell",
    "Grid",
    "Row",
    "cell_text",
    "cells_equal",
    "coerce_cell",
    # Configuration models
    "Operation",
    "StepConfig",
    "UnmatchedPolicy",
    "ValueInputMode",
    "ValueRenderMode",
    # Processing models
    "KeyedRecord",
    "LookupCriterion",
    "StepResult",
    "UpdateInstruction",
]
