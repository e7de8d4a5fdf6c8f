"""Grid source / sink collaborators (remote service, memory, local workbook)."""

from .memory import MemorySheetStore
from .protocol import GridClient
from .sheets_api import SheetsApiClient, SheetsApiError, SourceUnavailable
from .workbook import WorkbookStore

__all__ = [
    "GridClient",
    "MemorySheetStore",
    "SheetsApiClient",
    "SheetsApiError",
    "SourceUnavailable",
    "WorkbookStore",
]
