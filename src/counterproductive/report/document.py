"""Report Document data model and its HTML rendering.

The document is the data the report exposes: ordered sections of text
lines and the day-by-hour activity grid. to_html() lays that data out as
a styled page; every interpolated string is escaped.
"""

from __future__ import annotations

from datetime import date, datetime
from html import escape
from typing import Optional

from pydantic import BaseModel


class Section(BaseModel):
    key: str
    heading: str
    lines: tuple[str, ...] = ()

    class Config:
        frozen = True


class GridCell(BaseModel):
    hour: int
    count: int
    hot: bool = False
    tooltip: str = ""

    class Config:
        frozen = True


class GridRow(BaseModel):
    day: date
    label: str
    is_weekend: bool
    hot: bool = False
    total: int
    cells: tuple[GridCell, ...]

    class Config:
        frozen = True


class ReportDocument(BaseModel):
    """A rendered report, independent of its markup."""
    title: str = "CounterProductive Log Report"
    generated_at: datetime
    generated_at_text: str
    has_data: bool
    hot_threshold: int
    sections: tuple[Section, ...] = ()
    grid: tuple[GridRow, ...] = ()

    class Config:
        frozen = True

    def section(self, key: str) -> Optional[Section]:
        for s in self.sections:
            if s.key == key:
                return s
        return None

    def to_html(self) -> str:
        parts = [
            "<!DOCTYPE html>",
            '<html lang="en">',
            "<head>",
            '<meta charset="utf-8">',
            f"<title>{escape(self.title)}</title>",
            f"<style>{_STYLE}</style>",
            "</head>",
            "<body>",
            f"<h1>{escape(self.title)}</h1>",
        ]
        for section in self.sections:
            parts.append(f'<div class="stats" id="{escape(section.key)}">')
            parts.append(f"<h2>{escape(section.heading)}</h2>")
            parts.append("<ul>")
            parts.extend(f"<li>{escape(line)}</li>" for line in section.lines)
            parts.append("</ul>")
            parts.append("</div>")

        if self.grid:
            parts.append("<h2>Day Visualization</h2>")
            parts.append('<div class="gap-visualization">')
            parts.append(_grid_header())
            parts.extend(_grid_row(row) for row in self.grid)
            parts.append("</div>")

        parts.append(
            f"<p>Generated on: <strong>{escape(self.generated_at_text)}</strong></p>"
        )
        parts.append("</body>")
        parts.append("</html>")
        return "\n".join(parts)


def _grid_header() -> str:
    hours = "".join(
        f'<div class="hour-box header" title="Hour {h}:00">{h}</div>'
        for h in range(24)
    )
    return (
        '<div class="day-row">'
        '<div class="day-label">Hour</div>'
        f'<div class="day-boxes">{hours}</div>'
        '<div class="day-total header">Total</div>'
        "</div>"
    )


def _grid_row(row: GridRow) -> str:
    classes = ["day-row"]
    if row.is_weekend:
        classes.append("weekend")
    if row.hot:
        classes.append("hot")

    boxes = []
    for cell in row.cells:
        state = "pressed" if cell.count else "gap"
        hot = " hot" if cell.hot else ""
        text = str(cell.count) if cell.count else ""
        boxes.append(
            f'<div class="hour-box {state}{hot}" title="{escape(cell.tooltip)}">'
            f"{text}</div>"
        )
    return (
        f'<div class="{" ".join(classes)}">'
        f'<div class="day-label">{escape(row.label)}</div>'
        f'<div class="day-boxes">{"".join(boxes)}</div>'
        f'<div class="day-total">{row.total}</div>'
        "</div>"
    )


_STYLE = """
body { font-family: Arial, sans-serif; padding: 20px; max-width: 800px; margin: auto; }
h1 { color: #333; }
.stats ul { list-style: none; padding-left: 0; }
.gap-visualization { display: flex; flex-direction: column; gap: 10px; overflow-x: auto; }
.day-row { display: flex; align-items: center; }
.day-row.weekend { background-color: #f0f0f0; }
.day-row.hot .day-total { color: #c0392b; }
.day-label { width: 150px; font-weight: bold; text-align: right; padding-right: 5px; font-family: monospace; }
.day-boxes { display: flex; flex-wrap: nowrap; gap: 2px; flex-grow: 1; }
.day-total { width: 100px; font-weight: bold; text-align: right; padding-left: 5px; }
.hour-box { width: 20px; height: 20px; border-radius: 4px; text-align: center; line-height: 20px;
            font-size: 10px; color: #fff; box-sizing: border-box; }
.hour-box.gap { background-color: #007bff; }
.hour-box.pressed { background-color: #28a745; }
.hour-box.hot { background-color: #dc3545; }
.hour-box.header { background-color: #fff; color: #000; font-weight: bold; border: 1px solid #ccc; }
"""
