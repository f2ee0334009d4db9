"""CSV rendering for admin exports."""

import csv
import io
import json
from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence

from fastapi.responses import Response

from ridetrust.utils.timezone_utils import utc_now


def format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def render_csv(headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(headers)
    for row in rows:
        writer.writerow([format_cell(value) for value in row])
    return buffer.getvalue()


def csv_response(content: str, name: str, today: Optional[date] = None) -> Response:
    """Attachment named "{name}-{YYYY-MM-DD}.csv"."""
    today = today or utc_now().date()
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{name}-{today.isoformat()}.csv"'},
    )
