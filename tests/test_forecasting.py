"""
Tests for linear forecasting.
"""

from datetime import date, timedelta

from django.test import SimpleTestCase, TestCase

from apps.analytics import services
from apps.analytics.forecasting import forecast, round_half_up
from apps.analytics.models import TaskMetrics, UserPerformance
from tests.utils import make_department, make_user


def series(values, field='completed_tasks'):
    return [
        {'date': date(2024, 6, 1) + timedelta(days=i), field: value}
        for i, value in enumerate(values)
    ]


class ForecastTests(SimpleTestCase):

    def test_projects_seven_days_after_last_point(self):
        predictions = forecast(series([2, 4, 6]), 'completed_tasks')

        self.assertEqual(len(predictions), 7)
        self.assertEqual(predictions[0], {'date': date(2024, 6, 4), 'predicted_value': 8})
        self.assertEqual(predictions[-1], {'date': date(2024, 6, 10), 'predicted_value': 20})

    def test_average_step_uses_first_and_last_points(self):
        predictions = forecast(series([1, 10, 2]), 'completed_tasks')
        # step = (2 - 1) / 2
        self.assertEqual(
            [p['predicted_value'] for p in predictions],
            [3, 3, 4, 4, 5, 5, 6],
        )

    def test_rounds_half_up(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(3.5), 4)
        self.assertEqual(round_half_up(-2.5), -2)
        self.assertEqual(round_half_up(2.49), 2)

    def test_falling_series_projects_negative_values(self):
        predictions = forecast(series([10, 5]), 'completed_tasks')
        self.assertEqual(predictions[0]['predicted_value'], 0)
        self.assertEqual(predictions[-1]['predicted_value'], -30)

    def test_short_series(self):
        self.assertEqual(forecast([], 'completed_tasks'), [])
        self.assertEqual(forecast(series([4]), 'completed_tasks'), [])

    def test_custom_horizon(self):
        self.assertEqual(len(forecast(series([1, 2]), 'completed_tasks', horizon_days=3)), 3)


class StoredSeriesForecastTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.department = make_department()
        cls.user = make_user(cls.department)
        for i, (total, completed) in enumerate([(10, 4), (12, 5), (14, 6)]):
            TaskMetrics.objects.create(
                department=cls.department,
                date=date(2024, 6, 1) + timedelta(days=i),
                total_tasks=total,
                completed_tasks=completed,
            )
        UserPerformance.objects.create(
            user=cls.user, date=date(2024, 6, 1), productivity_score=75.0,
        )

    def test_single_snapshot_user_has_no_forecast(self):
        self.assertEqual(
            services.forecast_user_productivity(self.user.pk, '2024-06-01', '2024-06-07'),
            [],
        )

    def test_task_completion_forecast(self):
        predictions = services.forecast_task_completion(
            self.department.pk, '2024-06-01', '2024-06-03'
        )
        self.assertEqual(predictions[0], {'date': date(2024, 6, 4), 'predicted_value': 7})

    def test_workload_forecast(self):
        predictions = services.forecast_department_workload(
            self.department.pk, '2024-06-01', '2024-06-03'
        )
        self.assertEqual(predictions[-1]['predicted_value'], 28)
