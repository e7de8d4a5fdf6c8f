"""Pure table engine: codec, lookup, keyed reconciliation, raw passthrough."""

from .a1 import RangeError, RangeSpec, column_index, column_letter
from .codec import EncodedTable, decode, encode, trim_trailing_empty
from .lookup import lookup, lookup_many
from .passthrough import ShapeMismatch, validate_grid
from .reconcile import ReconcileResult, UnmatchedKeyError, apply_instructions, plan_update_writes, reconcile_update

__all__ = [
    "EncodedTable",
    "RangeError",
    "RangeSpec",
    "ReconcileResult",
    "ShapeMismatch",
    "UnmatchedKeyError",
    "apply_instructions",
    "column_index",
    "column_letter",
    "decode",
    "encode",
    "lookup",
    "lookup_many",
    "plan_update_writes",
    "reconcile_update",
    "trim_trailing_empty",
    "validate_grid",
]
