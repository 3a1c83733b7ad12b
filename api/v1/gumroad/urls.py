"""
URL configuration for Gumroad endpoints.
"""

from django.urls import path

from api.v1.gumroad import views

app_name = "gumroad"

urlpatterns = [
    path("webhook", views.GumroadWebhookView.as_view(), name="webhook"),
    path("verify", views.VerifyLicenseView.as_view(), name="verify"),
]
