"""
URL configuration for the ticket analytics project.
"""

from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),

    # App URLs
    path('analytics/', include('apps.analytics.urls', namespace='analytics')),
    path('reports/', include('apps.reports.urls', namespace='reports')),
]

# Admin site customization
admin.site.site_header = 'Ticket Analytics Administration'
admin.site.site_title = 'Ticket Analytics Admin'
admin.site.index_title = 'Welcome to Ticket Analytics Admin'
