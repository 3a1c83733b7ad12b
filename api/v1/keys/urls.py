"""
URL configuration for license key endpoints.
"""

from django.urls import path

from api.v1.keys import views

app_name = "keys"

urlpatterns = [
    path("activate", views.ActivateLicenseView.as_view(), name="activate"),
    path("deactivate", views.DeactivateLicenseView.as_view(), name="deactivate"),
    path("validate", views.ValidateLicenseView.as_view(), name="validate"),
    path("generate", views.GenerateLicenseKeyView.as_view(), name="generate"),
]
