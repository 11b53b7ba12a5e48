"""
Report export — CSV and styled XLSX renditions of the analytics reports.

    projects-workload      one row per project (+ compare columns when requested)
    employee-work-hours    one row per employee, summary block on top (xlsx)
"""
import csv
import io
import logging
from datetime import datetime, timezone

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

logger = logging.getLogger(__name__)

HEADER_FILL = PatternFill(start_color="354A5F", end_color="354A5F", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True, size=11)
UNDER_FILL = PatternFill(start_color="F8D7DA", end_color="F8D7DA", fill_type="solid")
OVER_FILL = PatternFill(start_color="FFF3CD", end_color="FFF3CD", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

EXPORT_FORMATS = ("csv", "xlsx")

PROJECT_COLUMNS = [
    ("Project", "project_name"),
    ("Customer", "customer_name"),
    ("Manager", "manager_name"),
    ("Status", "status"),
    ("Contract date", "contract_date"),
    ("Expiration date", "expiration_date"),
    ("Planned days", "total_planned_days"),
    ("Actual hours", "total_actual_hours"),
    ("Employees", "employee_count"),
    ("Progress %", "progress"),
]

EMPLOYEE_COLUMNS = [
    ("Last name", "last_name"),
    ("First name", "first_name"),
    ("Email", "email"),
    ("Role", "role"),
    ("Hours worked", "total_hours_worked"),
    ("Expected hours", "expected_hours"),
    ("Deviation", "deviation"),
    ("Deviation %", "deviation_percentage"),
]


# ── Table shaping ────────────────────────────────────────────────────────


def _projects_table(report: dict) -> tuple[list[str], list[list]]:
    headers = [label for label, _ in PROJECT_COLUMNS]
    compare = {r["project_id"]: r for r in report.get("compare_projects", [])}
    deltas = {d["project_id"]: d for d in report.get("deltas", [])}
    if compare:
        headers += ["Actual hours (compare)", "Progress % (compare)", "Hours delta", "Progress delta"]

    rows = []
    for r in report["projects"]:
        row = [r[key] for _, key in PROJECT_COLUMNS]
        if compare:
            c = compare[r["project_id"]]
            d = deltas[r["project_id"]]
            row += [c["total_actual_hours"], c["progress"], d["actual_hours_delta"], d["progress_delta"]]
        rows.append(row)
    return headers, rows


def _employees_table(report: dict) -> tuple[list[str], list[list]]:
    headers = [label for label, _ in EMPLOYEE_COLUMNS]
    rows = [[r[key] for _, key in EMPLOYEE_COLUMNS] for r in report["employees"]]
    return headers, rows


# ── CSV ──────────────────────────────────────────────────────────────────


def _to_csv(headers: list[str], rows: list[list]) -> bytes:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(headers)
    writer.writerows(rows)
    # BOM so spreadsheet apps detect UTF-8 (Cyrillic names)
    return ("\ufeff" + buf.getvalue()).encode("utf-8")


# ── XLSX ─────────────────────────────────────────────────────────────────


def _apply_header_style(ws, row: int, col_count: int) -> None:
    """Apply dark-header styling to an Excel row (1-indexed)."""
    for col in range(1, col_count + 1):
        cell = ws.cell(row=row, column=col)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.border = THIN_BORDER
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)


def _auto_width(ws) -> None:
    """Auto-size column widths based on content (capped at 60 chars)."""
    for col in ws.columns:
        max_len = 0
        col_letter = get_column_letter(col[0].column)
        for cell in col:
            if cell.value is not None:
                max_len = max(max_len, min(len(str(cell.value)), 60))
        ws.column_dimensions[col_letter].width = max(max_len + 4, 12)


def _to_xlsx(title: str, headers: list[str], rows: list[list], summary: dict,
             row_fill=None) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]

    ws["A1"] = title
    ws["A1"].font = Font(size=14, bold=True)
    ws["A2"] = f"Generated: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M UTC')}"
    ws["A2"].font = Font(size=10, italic=True, color="666666")

    row_idx = 4
    for key, value in summary.items():
        ws.cell(row=row_idx, column=1, value=key.replace("_", " ").capitalize()).font = Font(bold=True)
        ws.cell(row=row_idx, column=2, value=value)
        row_idx += 1

    header_row = row_idx + 1
    for col, header in enumerate(headers, 1):
        ws.cell(row=header_row, column=col, value=header)
    _apply_header_style(ws, header_row, len(headers))

    for offset, values in enumerate(rows, 1):
        fill = row_fill(values) if row_fill else None
        for col, value in enumerate(values, 1):
            cell = ws.cell(row=header_row + offset, column=col, value=value)
            cell.border = THIN_BORDER
            if fill:
                cell.fill = fill

    ws.freeze_panes = ws.cell(row=header_row + 1, column=1)
    _auto_width(ws)

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def _deviation_fill(values: list):
    deviation = values[6]
    if deviation < -8:
        return UNDER_FILL
    if deviation > 8:
        return OVER_FILL
    return None


# ── Public API ───────────────────────────────────────────────────────────


def export_projects_workload(report: dict, fmt: str) -> bytes:
    headers, rows = _projects_table(report)
    if fmt == "csv":
        return _to_csv(headers, rows)
    summary = dict(report["summary"])
    if report.get("date"):
        summary["as_of"] = report["date"]
    if report.get("compare_date"):
        summary["compared_with"] = report["compare_date"]
    return _to_xlsx("Projects workload", headers, rows, summary)


def export_employee_work_hours(report: dict, fmt: str) -> bytes:
    headers, rows = _employees_table(report)
    if fmt == "csv":
        return _to_csv(headers, rows)
    summary = {**report["period"], **report["summary"]}
    return _to_xlsx("Employee work hours", headers, rows, summary, row_fill=_deviation_fill)
