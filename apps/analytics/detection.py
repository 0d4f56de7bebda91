"""
Trend and anomaly detection over ordered snapshot series.

A series is a list of snapshots (model instances or mappings) ordered by
date ascending. Fewer than two points yields an empty result, never an
error.
"""

ANOMALY_THRESHOLD = 0.5

DEPARTMENT_ANOMALY_METRICS = ('completed_tasks', 'overdue_tasks')
USER_ANOMALY_METRICS = ('tasks_completed', 'tasks_overdue')

METRIC_LABELS = {
    'completed_tasks': 'completed tasks',
    'overdue_tasks': 'overdue tasks',
    'tasks_completed': 'tasks completed',
    'tasks_overdue': 'overdue tasks',
}


def snapshot_value(snapshot, field):
    """Read a field from a snapshot model instance or a mapping."""
    if isinstance(snapshot, dict):
        return snapshot[field]
    return getattr(snapshot, field)


def detect_anomalies(series, metrics):
    """
    Flag abrupt relative changes between consecutive snapshots.

    A change is anomalous when the previous value is positive and
    |current - previous| / previous > ANOMALY_THRESHOLD.

    Returns:
        list of {date, metric, previous, current, message}
    """
    points = list(series)
    if len(points) < 2:
        return []

    anomalies = []
    for prev, curr in zip(points, points[1:]):
        for metric in metrics:
            previous = snapshot_value(prev, metric)
            current = snapshot_value(curr, metric)
            if previous <= 0:
                continue
            if abs(current - previous) / previous > ANOMALY_THRESHOLD:
                label = METRIC_LABELS.get(metric, metric.replace('_', ' '))
                anomalies.append({
                    'date': snapshot_value(curr, 'date'),
                    'metric': metric,
                    'previous': previous,
                    'current': current,
                    'message': f'Significant change in {label}: {previous} → {current}',
                })
    return anomalies


def detect_trend(series, metric='completed_tasks'):
    """
    Direction of a metric between the first and last snapshot.

    Returns:
        [] for fewer than two points, else
        [{metric, direction, from, to}] with direction one of
        'increasing', 'decreasing' or 'stable'
    """
    points = list(series)
    if len(points) < 2:
        return []

    first = snapshot_value(points[0], metric)
    last = snapshot_value(points[-1], metric)
    delta = last - first
    if delta > 0:
        direction = 'increasing'
    elif delta < 0:
        direction = 'decreasing'
    else:
        direction = 'stable'

    return [{
        'metric': metric,
        'direction': direction,
        'from': first,
        'to': last,
    }]
