"""
URL configuration for reports app.
"""

from django.urls import path
from . import views

app_name = 'reports'

urlpatterns = [
    path('<int:report_id>/', views.report_detail, name='detail'),
    path('<int:report_id>/export/', views.report_export, name='export'),
    path('<int:report_id>/schedule/', views.report_schedule, name='schedule'),
]
