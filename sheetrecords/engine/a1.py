from __future__ import annotations

import re
from dataclasses import dataclass

"""A1 notation helpers.

A range spec is a spreadsheet id plus an A1 address, optionally scoped to
a named sheet: "A:F", "Sheet1!A2:D", "'My Sheet'!B3", "Data".

Grid coordinates used everywhere else are 0-based offsets inside the
fetched range. RangeSpec converts them back into absolute A1 addresses
for targeted writes.
"""

__all__ = [
    "RangeError",
    "RangeSpec",
    "column_letter",
    "column_index",
]

MAX_COLUMN_LETTERS = 3  # ZZZ; anything longer is a sheet name

_SHEET_QUOTED = re.compile(r"^'((?:[^']|'')+)'!(.*)$")
_SHEET_PLAIN = re.compile(r"^([^!']+)!(.*)$")
_ENDPOINT = re.compile(r"^([A-Za-z]*)(\d*)$")
_SAFE_SHEET = re.compile(r"^[A-Za-z0-9_]+$")


class RangeError(ValueError):
    """Raised for malformed A1 range input."""


def column_letter(index: int) -> str:
    """0-based column index -> letters (0 -> A, 25 -> Z, 26 -> AA)."""
    if index < 0:
        raise RangeError(f"negative column index: {index}")
    n = index + 1
    letters = ""
    while n > 0:
        n, r = divmod(n - 1, 26)
        letters = chr(65 + r) + letters
    return letters


def column_index(letters: str) -> int:
    """Letters -> 0-based column index (A -> 0, AA -> 26)."""
    if not letters or not letters.isalpha():
        raise RangeError(f"invalid column letters: {letters!r}")
    n = 0
    for ch in letters.upper():
        n = n * 26 + (ord(ch) - 64)
    return n - 1


def _quote_sheet(name: str) -> str:
    if _SAFE_SHEET.match(name):
        return name
    return "'" + name.replace("'", "''") + "'"


def _parse_endpoint(text: str, source: str) -> tuple[int | None, int | None]:
    m = _ENDPOINT.match(text)
    if m is None:
        raise RangeError(f"invalid A1 reference {text!r} in range {source!r}")
    letters, digits = m.groups()
    if len(letters) > MAX_COLUMN_LETTERS:
        raise RangeError(f"invalid column {letters!r} in range {source!r}")
    col = column_index(letters) if letters else None
    row = int(digits) if digits else None
    if row is not None and row < 1:
        raise RangeError(f"row numbers start at 1 in range {source!r}")
    return col, row


@dataclass(frozen=True)
class RangeSpec:
    """Parsed range: which sheet, and where the range starts / ends.

    start_column is 0-based, start_row is the 1-based sheet row number.
    end_column / end_row are None for open ranges ("A:F" has no end_row).
    """
    spreadsheet_id: str
    a1: str  # address part as given (without sheet)
    sheet_name: str | None = None
    start_column: int = 0
    start_row: int = 1
    end_column: int | None = None
    end_row: int | None = None

    @classmethod
    def parse(cls, spreadsheet_id: str, text: str) -> RangeSpec:
        if not spreadsheet_id or not str(spreadsheet_id).strip():
            raise RangeError("spreadsheet id is empty")
        if text is None or not str(text).strip():
            raise RangeError("range is empty")
        text = str(text).strip()

        sheet: str | None = None
        address = text
        m = _SHEET_QUOTED.match(text)
        if m is not None:
            sheet = m.group(1).replace("''", "'")
            address = m.group(2)
        else:
            m = _SHEET_PLAIN.match(text)
            if m is not None:
                sheet = m.group(1)
                address = m.group(2)

        if sheet is not None and not address:
            raise RangeError(f"missing address after sheet name in range {text!r}")

        if ":" not in address:
            letters_digits = _ENDPOINT.match(address)
            is_cell = (
                letters_digits is not None
                and letters_digits.group(1)
                and letters_digits.group(2)
                and len(letters_digits.group(1)) <= MAX_COLUMN_LETTERS
            )
            if not is_cell:
                if sheet is not None:
                    raise RangeError(f"invalid A1 reference {address!r} in range {text!r}")
                # 単独のシート名 ("Data") はシート全体
                return cls(spreadsheet_id=spreadsheet_id, a1="", sheet_name=address)
            col, row = _parse_endpoint(address, text)
            return cls(
                spreadsheet_id=spreadsheet_id,
                a1=address,
                sheet_name=sheet,
                start_column=col or 0,
                start_row=row or 1,
                end_column=col,
                end_row=row,
            )

        start_text, _, end_text = address.partition(":")
        if ":" in end_text:
            raise RangeError(f"too many ':' in range {text!r}")
        start_col, start_row = _parse_endpoint(start_text, text)
        end_col, end_row = _parse_endpoint(end_text, text)
        if start_col is None and start_row is None:
            raise RangeError(f"range {text!r} has an empty start")
        if end_col is None and end_row is None:
            raise RangeError(f"range {text!r} has an empty end")
        if start_col is not None and end_col is not None and end_col < start_col:
            raise RangeError(f"range {text!r} ends before it starts")
        if start_row is not None and end_row is not None and end_row < start_row:
            raise RangeError(f"range {text!r} ends before it starts")
        return cls(
            spreadsheet_id=spreadsheet_id,
            a1=address,
            sheet_name=sheet,
            start_column=start_col or 0,
            start_row=start_row or 1,
            end_column=end_col,
            end_row=end_row,
        )

    @property
    def width(self) -> int | None:
        if self.end_column is None:
            return None
        return self.end_column - self.start_column + 1

    def _prefix(self) -> str:
        return f"{_quote_sheet(self.sheet_name)}!" if self.sheet_name else ""

    def address(self) -> str:
        """Full address as sent to the service ("Sheet1!A:F", "A:F", "Data")."""
        if not self.a1:
            return _quote_sheet(self.sheet_name or "")
        return f"{self._prefix()}{self.a1}"

    def row_number(self, row_index: int) -> int:
        """Grid row index (0-based, inside the range) -> sheet row number."""
        return self.start_row + row_index

    def cell_address(self, row_index: int, column_offset: int, width: int = 1) -> str:
        """Single-row address covering `width` columns from `column_offset`."""
        row = self.row_number(row_index)
        first = column_letter(self.start_column + column_offset)
        if width <= 1:
            return f"{self._prefix()}{first}{row}"
        last = column_letter(self.start_column + column_offset + width - 1)
        return f"{self._prefix()}{first}{row}:{last}{row}"
