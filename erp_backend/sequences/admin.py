# sequences/admin.py

from django.contrib import admin

from sequences.models import CounterShard

# ============================================================
# COUNTER SHARDS (READ-ONLY)
# ============================================================


@admin.register(CounterShard)
class CounterShardAdmin(admin.ModelAdmin):
    list_display = (
        "counter_name",
        "shard_index",
        "count",
        "updated_at",
    )
    list_filter = ("counter_name",)
    search_fields = ("counter_name",)
    ordering = ("counter_name", "shard_index")
    readonly_fields = ("counter_name", "shard_index", "count", "created_at", "updated_at")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
