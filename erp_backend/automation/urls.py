# automation/urls.py

from django.urls import path

from automation.views import AutomationEventWebhookView

urlpatterns = [
    path("events/", AutomationEventWebhookView.as_view(), name="automation-events"),
]
