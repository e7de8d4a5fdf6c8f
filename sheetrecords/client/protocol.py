from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ..engine.a1 import RangeSpec
from ..models.cell import Grid
from ..models.config_models import ValueInputMode, ValueRenderMode

"""Contract between the operations and the spreadsheet storage.

Every network (or file) access of a step goes through these five calls;
the engine itself is pure.
"""


@runtime_checkable
class GridClient(Protocol):
    def fetch_grid(self, range_spec: RangeSpec, value_render_mode: ValueRenderMode) -> Grid | None:
        """Cell values of the range, or None when the range holds no values."""
        ...

    def write_grid(self, range_spec: RangeSpec, grid: Grid, value_input_mode: ValueInputMode) -> None:
        ...

    def append_grid(self, range_spec: RangeSpec, grid: Grid, value_input_mode: ValueInputMode) -> None:
        ...

    def clear_range(self, range_spec: RangeSpec) -> None:
        ...

    def batch_write(
        self,
        spreadsheet_id: str,
        data: Sequence[tuple[str, Grid]],
        value_input_mode: ValueInputMode,
    ) -> None:
        """Write several (A1 address, grid) pairs in one request."""
        ...
