"""
URL configuration for maintenance endpoints.
"""

from django.urls import path

from api.v1.maintenance import views

app_name = "maintenance"

urlpatterns = [
    path("cleanup", views.CleanupView.as_view(), name="cleanup"),
]
