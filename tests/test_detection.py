"""
Tests for anomaly and trend detection.
"""

from datetime import date, timedelta

from django.test import SimpleTestCase, TestCase

from apps.analytics import services
from apps.analytics.detection import detect_anomalies, detect_trend, DEPARTMENT_ANOMALY_METRICS
from apps.analytics.models import TaskMetrics, UserPerformance
from tests.utils import make_department, make_user


def department_series(completed, overdue=None, total=None):
    start = date(2024, 6, 1)
    overdue = overdue or [0] * len(completed)
    total = total or [10] * len(completed)
    return [
        {
            'date': start + timedelta(days=i),
            'total_tasks': total[i],
            'completed_tasks': completed[i],
            'overdue_tasks': overdue[i],
        }
        for i in range(len(completed))
    ]


class DetectAnomaliesTests(SimpleTestCase):

    def test_flags_large_completed_change(self):
        series = department_series([5, 5, 9], total=[10, 10, 16])

        anomalies = detect_anomalies(series, DEPARTMENT_ANOMALY_METRICS)

        self.assertEqual(len(anomalies), 1)
        anomaly = anomalies[0]
        self.assertEqual(anomaly['date'], date(2024, 6, 3))
        self.assertEqual(anomaly['metric'], 'completed_tasks')
        self.assertEqual((anomaly['previous'], anomaly['current']), (5, 9))
        self.assertEqual(anomaly['message'], 'Significant change in completed tasks: 5 → 9')

    def test_change_of_exactly_half_is_not_flagged(self):
        series = department_series([4, 6, 3])
        self.assertEqual(detect_anomalies(series, DEPARTMENT_ANOMALY_METRICS), [])

    def test_zero_previous_value_is_skipped(self):
        series = department_series([0, 8], overdue=[0, 5])
        self.assertEqual(detect_anomalies(series, DEPARTMENT_ANOMALY_METRICS), [])

    def test_drop_is_flagged(self):
        series = department_series([10, 10], overdue=[6, 2])

        anomalies = detect_anomalies(series, DEPARTMENT_ANOMALY_METRICS)

        self.assertEqual([a['metric'] for a in anomalies], ['overdue_tasks'])

    def test_fewer_than_two_points(self):
        self.assertEqual(detect_anomalies([], DEPARTMENT_ANOMALY_METRICS), [])
        self.assertEqual(detect_anomalies(department_series([5]), DEPARTMENT_ANOMALY_METRICS), [])


class DetectTrendTests(SimpleTestCase):

    def test_increasing(self):
        trend = detect_trend(department_series([5, 5, 9]))
        self.assertEqual(trend, [{
            'metric': 'completed_tasks',
            'direction': 'increasing',
            'from': 5,
            'to': 9,
        }])

    def test_decreasing_and_stable(self):
        self.assertEqual(detect_trend(department_series([9, 3]))[0]['direction'], 'decreasing')
        self.assertEqual(detect_trend(department_series([4, 7, 4]))[0]['direction'], 'stable')

    def test_single_point_has_no_trend(self):
        self.assertEqual(detect_trend(department_series([5])), [])


class StoredSeriesDetectionTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.department = make_department()
        cls.user = make_user(cls.department)
        for i, (total, completed) in enumerate([(10, 5), (10, 5), (16, 9)]):
            TaskMetrics.objects.create(
                department=cls.department,
                date=date(2024, 6, 1) + timedelta(days=i),
                total_tasks=total,
                completed_tasks=completed,
            )
        for i, completed in enumerate([2, 2]):
            UserPerformance.objects.create(
                user=cls.user,
                date=date(2024, 6, 1) + timedelta(days=i),
                tasks_completed=completed,
                tasks_overdue=1 + i,
            )

    def test_department_anomalies(self):
        anomalies = services.detect_task_anomalies(self.department.pk, '2024-06-01', '2024-06-03')
        self.assertEqual(len(anomalies), 1)
        self.assertEqual(anomalies[0]['current'], 9)

    def test_department_trend(self):
        trend = services.detect_department_trends(self.department.pk, '2024-06-01', '2024-06-03')
        self.assertEqual(trend[0]['direction'], 'increasing')

    def test_user_anomalies(self):
        anomalies = services.detect_user_activity_anomalies(self.user.pk, '2024-06-01', '2024-06-03')
        self.assertEqual([a['metric'] for a in anomalies], ['tasks_overdue'])
