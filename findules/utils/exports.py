import io
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
from fastapi.responses import StreamingResponse

from findules.exceptions import ValidationError

EXCEL_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
EXPORT_FORMATS = ("csv", "excel")


def format_date(value: Optional[Any]) -> str:
    """DD/MM/YYYY, blank for missing dates."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    return str(value)


def build_frame(rows: List[Dict[str, Any]], columns: Sequence[str]) -> pd.DataFrame:
    # Keep the header row even when nothing matched the filters
    return pd.DataFrame(rows, columns=list(columns))


def to_csv_bytes(frame: pd.DataFrame) -> bytes:
    return frame.to_csv(index=False, lineterminator="\r\n").encode("utf-8")


def to_excel_bytes(frame: pd.DataFrame, sheet_name: str) -> bytes:
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        frame.to_excel(writer, index=False, sheet_name=sheet_name)
    return output.getvalue()


def export_response(
    rows: List[Dict[str, Any]],
    columns: Sequence[str],
    kind: str,
    export_format: str = "csv",
    sheet_name: str = "Sheet1",
) -> StreamingResponse:
    """Stream ``rows`` as a CSV or XLSX attachment named ``<kind>_<today>``."""
    export_format = (export_format or "csv").lower()
    if export_format not in EXPORT_FORMATS:
        raise ValidationError(f"Unsupported export format: {export_format}", {"field": "format"})

    frame = build_frame(rows, columns)
    stamp = date.today().isoformat()

    if export_format == "excel":
        content = to_excel_bytes(frame, sheet_name)
        media_type = EXCEL_MEDIA_TYPE
        filename = f"{kind}_{stamp}.xlsx"
    else:
        content = to_csv_bytes(frame)
        media_type = "text/csv"
        filename = f"{kind}_{stamp}.csv"

    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return StreamingResponse(io.BytesIO(content), media_type=media_type, headers=headers)
