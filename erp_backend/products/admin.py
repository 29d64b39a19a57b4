# products/admin.py

from django.contrib import admin

from products.models import Product, WorkOrder


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "category", "unit_price", "cost_price", "inventory_account", "is_active")
    list_filter = ("category", "is_active")
    search_fields = ("id", "sku", "name")
    ordering = ("name",)
    readonly_fields = ("created_at", "updated_at")


@admin.register(WorkOrder)
class WorkOrderAdmin(admin.ModelAdmin):
    list_display = ("work_order_number", "product", "quantity", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("work_order_number",)
    readonly_fields = ("work_order_number", "created_at", "updated_at")
