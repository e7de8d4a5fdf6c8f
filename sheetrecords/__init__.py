"""Record-oriented access to spreadsheet cell ranges.

Converts raw cell grids into keyed records via a header row, resolves
lookups against decoded tables and reconciles keyed updates into
targeted range writes.
"""

__version__ = "0.1.0"
