"""
Tests for CSV and Excel export.
"""

import io
from datetime import date, datetime, timezone as dt_timezone

from django.test import TestCase
from openpyxl import load_workbook

from apps.analytics.exports import to_csv, to_excel
from apps.analytics.models import TaskMetrics
from tests.utils import local_datetime, make_department


class ExportTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.department = make_department()
        TaskMetrics.objects.create(
            department=cls.department, date=date(2024, 6, 1), total_tasks=4, completed_tasks=1,
        )
        TaskMetrics.objects.create(
            department=cls.department, date=date(2024, 6, 2), total_tasks=0,
        )

    def test_csv_of_snapshots(self):
        content = to_csv(TaskMetrics.objects.order_by('date'))
        lines = content.splitlines()

        self.assertEqual(
            lines[0],
            'id,department_id,date,total_tasks,completed_tasks,pending_tasks,'
            'overdue_tasks,average_completion_time,completion_rate',
        )
        self.assertEqual(len(lines), 3)
        self.assertTrue(lines[1].endswith(',2024-06-01,4,1,0,0,0.0,25.0'))
        self.assertTrue(lines[2].endswith(',0.0,0.0'))

    def test_csv_with_explicit_fields(self):
        content = to_csv([{'a': 1, 'b': 2}], fields=['b'])
        self.assertEqual(content.splitlines(), ['b', '2'])

    def test_empty_csv(self):
        self.assertEqual(to_csv([]), '\r\n')

    def test_excel_of_rows(self):
        rows = [
            {'date': date(2024, 6, 1), 'when': local_datetime(2024, 6, 1, 9), 'count': 3},
            {'date': date(2024, 6, 2), 'when': local_datetime(2024, 6, 2, 9), 'count': 5},
        ]

        workbook = load_workbook(io.BytesIO(to_excel(rows, 'Department Metrics')))
        sheet = workbook['Department Metrics']

        self.assertEqual([cell.value for cell in sheet[1]], ['date', 'when', 'count'])
        self.assertEqual(sheet.max_row, 3)
        self.assertEqual(sheet['C3'].value, 5)
        self.assertEqual(sheet['B2'].value.hour, 9)

    def test_excel_sheet_name_is_truncated(self):
        workbook = load_workbook(io.BytesIO(to_excel([{'a': 1}], 'x' * 40)))
        self.assertEqual(workbook.sheetnames, ['x' * 31])

    def test_excel_datetimes_use_local_wall_time(self):
        utc_instant = datetime(2024, 6, 1, 3, 30, tzinfo=dt_timezone.utc)

        workbook = load_workbook(io.BytesIO(to_excel([{'when': utc_instant}])))

        self.assertEqual(workbook.active['A2'].value, datetime(2024, 6, 1, 9, 0))
