# automation/apps.py

from django.apps import AppConfig


class AutomationConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "automation"
    verbose_name = "Automation"

    def ready(self):
        # Connect document save signals (dispatch gated by AUTOMATION["DISPATCH_ON_SAVE"])
        from automation import signals

        signals.connect_document_signals()
