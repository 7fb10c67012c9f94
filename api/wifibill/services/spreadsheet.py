# api/wifibill/services/spreadsheet.py
import csv
import io
import re
import statistics
from io import BytesIO
from typing import Any, Dict, List
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ..errors import UnsupportedImportFile

EXCEL_SUFFIXES = (".xlsx", ".xlsm")
TEXT_SUFFIXES = (".csv", ".txt")
DELIMITERS = (",", ";", "|", "\t")
_QUOTED = re.compile(r'"[^"]*"')


def read_excel_rows(binary: bytes) -> List[List[Any]]:
    wb = load_workbook(filename=BytesIO(binary), read_only=True, data_only=True)
    try:
        # first tab, whichever one was active when the file was saved
        ws = wb.worksheets[0]
        out: List[List[Any]] = []
        for r in ws.iter_rows(values_only=True):
            out.append([("" if v is None else (v.strip() if isinstance(v, str) else v)) for v in r])
        return out
    finally:
        wb.close()

def _per_line_counts(lines: List[str], delim: str) -> List[int]:
    return [_QUOTED.sub("", ln).count(delim) for ln in lines]

def detect_delimiter(sample: str) -> str:
    """csv.Sniffer first; otherwise the delimiter seen most often and most evenly per line."""
    if not sample:
        return ","
    try:
        return csv.Sniffer().sniff(sample, delimiters="".join(DELIMITERS)).delimiter
    except csv.Error:
        pass
    lines = [ln for ln in sample.splitlines() if ln.strip()][:10]
    if not lines:
        return ","
    scored = []
    for delim in DELIMITERS:
        counts = _per_line_counts(lines, delim)
        scored.append((statistics.mean(counts), -statistics.pvariance(counts), delim))
    avg, _, best = max(scored)
    return best if avg >= 1 else ","

def read_csv_rows(raw: bytes) -> List[List[Any]]:
    text = raw.decode("utf-8-sig", errors="replace")
    delim = detect_delimiter(text[:65536])
    reader = csv.reader(io.StringIO(text), delimiter=delim)
    return [[c.strip() for c in r] for r in reader]

def _is_blank_row(row: List[Any]) -> bool:
    return all(c == "" or c is None for c in row)

def rows_to_dicts(rows: List[List[Any]]) -> List[Dict[str, Any]]:
    """First row is the header; returns one header->cell dict per data row."""
    rows = [r for r in rows if not _is_blank_row(r)]
    if not rows:
        return []
    headers = [
        (str(h).strip() if h not in (None, "") else f"Column {i+1}")
        for i, h in enumerate(rows[0])
    ]
    out: List[Dict[str, Any]] = []
    for r in rows[1:]:
        out.append({col: (r[i] if i < len(r) else "") for i, col in enumerate(headers)})
    return out

def rows_from_upload(filename: str, raw: bytes) -> List[Dict[str, Any]]:
    fname = (filename or "").lower()
    if fname.endswith(EXCEL_SUFFIXES):
        try:
            return rows_to_dicts(read_excel_rows(raw))
        except (BadZipFile, InvalidFileException):
            raise UnsupportedImportFile(filename)
    if fname.endswith(TEXT_SUFFIXES) or "." not in fname:
        return rows_to_dicts(read_csv_rows(raw))
    raise UnsupportedImportFile(filename)
