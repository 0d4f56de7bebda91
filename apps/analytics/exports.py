"""
CSV and Excel export of analytics rows.

Rows are dicts or snapshot model instances; all rows share the columns of
the first row unless explicit fields are given.
"""

import csv
import io
from datetime import datetime

from django.db import models
from django.utils import timezone
from openpyxl import Workbook

from .services import serialize_snapshot


def snapshot_rows(rows):
    """Convert model instances to dicts, leaving dicts untouched."""
    return [
        serialize_snapshot(row) if isinstance(row, models.Model) else dict(row)
        for row in rows
    ]


def _columns(rows, fields):
    if fields:
        return list(fields)
    if rows:
        return list(rows[0].keys())
    return []


def to_csv(rows, fields=None):
    """Render rows as CSV text with a header line."""
    rows = snapshot_rows(rows)
    columns = _columns(rows, fields)

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=columns, extrasaction='ignore')
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue()


def _cell_value(value):
    # openpyxl rejects timezone-aware datetimes; cells show local wall time
    if isinstance(value, datetime) and timezone.is_aware(value):
        return timezone.localtime(value).replace(tzinfo=None)
    if isinstance(value, (dict, list)):
        return str(value)
    return value


def to_excel(rows, sheet_name='Sheet1', fields=None):
    """Render rows as an XLSX workbook and return its bytes."""
    rows = snapshot_rows(rows)
    columns = _columns(rows, fields)

    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = sheet_name[:31]

    if columns:
        worksheet.append(columns)
        for row in rows:
            worksheet.append([_cell_value(row.get(column)) for column in columns])

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
