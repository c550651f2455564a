"""Delimited-text export of the grid view."""

from datetime import date, datetime, timezone
from typing import Any, Iterable, Optional

from pydantic import BaseModel

from datagrid.models.column import ColumnModel, to_text

BOM = "\ufeff"
CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


class ExportPayload(BaseModel):
    """Rendered export file."""

    filename: str
    content: str
    media_type: str = CSV_MEDIA_TYPE

    def encode(self) -> bytes:
        return self.content.encode("utf-8")


class ExportSerializer:
    """Renders rows as comma-separated text.

    With ``escape_quotes`` a cell is quoted when it holds a comma, a double
    quote or a line break, and embedded quotes are doubled. Without it, cells
    are quoted only when they hold a comma and quotes are left untouched.
    """

    def __init__(
        self,
        default_title: str = "table_data",
        escape_quotes: bool = True,
        include_bom: bool = True,
    ):
        self.default_title = default_title
        self.escape_quotes = escape_quotes
        self.include_bom = include_bom

    def format_cell(self, value: Any) -> str:
        text = to_text(value)
        if self.escape_quotes:
            if any(c in text for c in (",", '"', "\n", "\r")):
                return '"' + text.replace('"', '""') + '"'
            return text
        if "," in text:
            return f'"{text}"'
        return text

    def to_delimited_text(self, records: Iterable[Any], columns: ColumnModel) -> str:
        """Header of column titles followed by one line per record."""
        lines = [",".join(self.format_cell(title) for title in columns.titles())]
        for record in records:
            lines.append(
                ",".join(self.format_cell(column.value_of(record)) for column in columns)
            )
        content = "\n".join(lines)
        return BOM + content if self.include_bom else content

    def filename(self, title: Optional[str] = None, today: Optional[date] = None) -> str:
        """``<title>_<YYYY-MM-DD>.csv`` using the UTC date by default."""
        today = today or datetime.now(timezone.utc).date()
        return f"{title or self.default_title}_{today.isoformat()}.csv"

    def export(
        self,
        records: Iterable[Any],
        columns: ColumnModel,
        title: Optional[str] = None,
        today: Optional[date] = None,
    ) -> ExportPayload:
        return ExportPayload(
            filename=self.filename(title, today),
            content=self.to_delimited_text(records, columns),
        )
