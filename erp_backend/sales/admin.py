# sales/admin.py

from django.contrib import admin

from sales.models import (
    CreditNote,
    DebitNote,
    InvoiceItem,
    Order,
    OrderItem,
    Party,
    Quotation,
    SalesInvoice,
)

# Document numbers are assigned by automation; admins can read them only.

# ============================================================
# PARTIES
# ============================================================


@admin.register(Party)
class PartyAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "party_type", "email", "ledger_account")
    list_filter = ("party_type",)
    search_fields = ("id", "name", "email")
    readonly_fields = ("ledger_account", "created_at", "updated_at")


# ============================================================
# ORDERS
# ============================================================


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "order_number",
        "customer_name",
        "status",
        "grand_total",
        "payment_received",
        "commission",
        "assigned_partner",
        "date",
    )
    list_filter = ("status", "date")
    search_fields = ("order_number", "customer_name", "customer_id")
    ordering = ("-created_at",)
    readonly_fields = ("order_number", "commission", "created_at", "updated_at")
    inlines = [OrderItemInline]


# ============================================================
# INVOICES
# ============================================================


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0


@admin.register(SalesInvoice)
class SalesInvoiceAdmin(admin.ModelAdmin):
    list_display = (
        "invoice_number",
        "customer_name",
        "taxable_amount",
        "cgst",
        "sgst",
        "igst",
        "grand_total",
        "date",
    )
    list_filter = ("date",)
    search_fields = ("invoice_number", "customer_name", "customer_id")
    ordering = ("-date",)
    readonly_fields = ("invoice_number", "created_at", "updated_at")
    inlines = [InvoiceItemInline]


# ============================================================
# QUOTATIONS / NOTES
# ============================================================


@admin.register(Quotation)
class QuotationAdmin(admin.ModelAdmin):
    list_display = ("quotation_number", "customer_name", "grand_total", "date")
    search_fields = ("quotation_number", "customer_name")
    readonly_fields = ("quotation_number", "created_at", "updated_at")


@admin.register(CreditNote)
class CreditNoteAdmin(admin.ModelAdmin):
    list_display = ("credit_note_number", "party_name", "amount", "date")
    search_fields = ("credit_note_number", "party_name", "party_id")
    readonly_fields = ("credit_note_number", "created_at", "updated_at")


@admin.register(DebitNote)
class DebitNoteAdmin(admin.ModelAdmin):
    list_display = ("debit_note_number", "party_name", "amount", "date")
    search_fields = ("debit_note_number", "party_name", "party_id")
    readonly_fields = ("debit_note_number", "created_at", "updated_at")
