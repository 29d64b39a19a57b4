# automation/admin.py

from django.contrib import admin

from automation.models import ProcessedEvent, QuarantinedEvent

# ============================================================
# PROCESSED EVENTS (READ-ONLY IDEMPOTENCY LEDGER)
# ============================================================


@admin.register(ProcessedEvent)
class ProcessedEventAdmin(admin.ModelAdmin):
    list_display = ("event_id", "handler", "collection", "document_id", "outcome", "processed_at")
    list_filter = ("handler", "outcome", "collection")
    search_fields = ("event_id", "document_id")
    ordering = ("-processed_at",)
    readonly_fields = (
        "event_id",
        "handler",
        "collection",
        "event_type",
        "document_id",
        "outcome",
        "detail",
        "processed_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# QUARANTINE
# ============================================================


@admin.register(QuarantinedEvent)
class QuarantinedEventAdmin(admin.ModelAdmin):
    list_display = ("event_id", "collection", "event_type", "document_id", "is_resolved", "created_at")
    list_filter = ("collection", "is_resolved")
    search_fields = ("event_id", "document_id")
    readonly_fields = (
        "event_id",
        "collection",
        "event_type",
        "document_id",
        "payload",
        "errors",
        "created_at",
        "updated_at",
    )
