"""
Linear forecasting over ordered snapshot series.

The projection uses the average step between the first and last snapshot,
not a regression. Predictions are not clamped: a falling series can project
negative values.
"""

import math
from datetime import timedelta

from .detection import snapshot_value

FORECAST_HORIZON_DAYS = 7


def round_half_up(value):
    return int(math.floor(value + 0.5))


def forecast(series, field, horizon_days=FORECAST_HORIZON_DAYS):
    """
    Project a snapshot field forward one day at a time.

    Args:
        series: Snapshots ordered by date ascending
        field: Snapshot attribute to project
        horizon_days: Number of future days to predict

    Returns:
        [] for fewer than two points, else a list of
        {date, predicted_value} starting the day after the last snapshot
    """
    points = list(series)
    if len(points) < 2:
        return []

    first = snapshot_value(points[0], field)
    last_point = points[-1]
    last = snapshot_value(last_point, field)
    last_date = snapshot_value(last_point, 'date')
    avg_step = (last - first) / (len(points) - 1)

    return [
        {
            'date': last_date + timedelta(days=i),
            'predicted_value': round_half_up(last + avg_step * i),
        }
        for i in range(1, horizon_days + 1)
    ]
