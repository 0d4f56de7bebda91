"""
URL configuration for analytics app.
"""

from django.urls import path
from . import views

app_name = 'analytics'

urlpatterns = [
    path('department/<int:department_id>/metrics/', views.department_metrics, name='department_metrics'),
    path('department/<int:department_id>/metrics/export/', views.department_metrics_export, name='department_metrics_export'),
    path('department/<int:department_id>/analytics/', views.department_analytics, name='department_analytics'),
    path('department/<int:department_id>/trends/', views.department_task_trends, name='department_task_trends'),
    path('user/<int:user_id>/performance/', views.user_performance, name='user_performance'),
    path('user/<int:user_id>/performance/export/', views.user_performance_export, name='user_performance_export'),
    path('user/<int:user_id>/activity/', views.user_activity, name='user_activity'),
    path('update-metrics/', views.update_metrics, name='update_metrics'),

    # Dashboard
    path('dashboard/task-distribution/', views.task_distribution, name='task_distribution'),
    path('dashboard/performance-trends/', views.performance_trends, name='performance_trends'),
    path('dashboard/department-comparison/', views.department_comparison, name='department_comparison'),
    path('dashboard/priority-metrics/', views.priority_metrics, name='priority_metrics'),
    path('dashboard/user-activity/', views.user_activity_metrics, name='user_activity_metrics'),
    path('dashboard/department/<int:department_id>/anomalies/', views.department_anomalies, name='department_anomalies'),
    path('dashboard/user/<int:user_id>/anomalies/', views.user_anomalies, name='user_anomalies'),
    path('dashboard/department/<int:department_id>/trends/', views.department_trend, name='department_trend'),
    path('dashboard/department/<int:department_id>/forecast/task-completion/', views.forecast_task_completion, name='forecast_task_completion'),
    path('dashboard/user/<int:user_id>/forecast/productivity/', views.forecast_user_productivity, name='forecast_user_productivity'),
    path('dashboard/department/<int:department_id>/forecast/workload/', views.forecast_department_workload, name='forecast_department_workload'),
]
