# accounting/admin.py

from django.contrib import admin

from accounting.models import (
    AccountGroup,
    CompanyProfile,
    LedgerAccount,
    Voucher,
    VoucherEntry,
)

# ============================================================
# ACCOUNT GROUPS
# ============================================================


@admin.register(AccountGroup)
class AccountGroupAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "nature", "parent", "is_system")
    list_filter = ("nature", "is_system")
    search_fields = ("code", "name")
    ordering = ("code",)
    readonly_fields = ("created_at", "updated_at")


# ============================================================
# LEDGER ACCOUNTS
# ============================================================


@admin.register(LedgerAccount)
class LedgerAccountAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "name",
        "group",
        "nature",
        "account_type",
        "status",
    )
    list_filter = ("nature", "account_type", "status", "group")
    search_fields = ("code", "name", "upi_id")
    ordering = ("code",)
    readonly_fields = ("created_at", "updated_at")

    fieldsets = (
        (
            "Ledger Identity",
            {
                "fields": ("code", "name", "group", "nature", "account_type"),
            },
        ),
        (
            "Posting",
            {
                "fields": (
                    "normal_balance",
                    "is_posting",
                    "allow_manual_journal",
                    "is_system",
                    "status",
                ),
            },
        ),
        (
            "Opening Balance",
            {
                "fields": ("opening_balance", "opening_balance_side"),
            },
        ),
        (
            "Bank",
            {
                "fields": ("upi_id",),
            },
        ),
        (
            "System Fields",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )


# ============================================================
# VOUCHERS (READ-ONLY)
# ============================================================


class VoucherEntryInline(admin.TabularInline):
    model = VoucherEntry
    extra = 0
    can_delete = False
    fields = ("line_no", "account", "debit", "credit")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Voucher)
class VoucherAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "date",
        "voucher_type",
        "narration",
        "source_type",
        "source_id",
        "created_at",
    )
    list_filter = ("voucher_type", "date")
    search_fields = ("narration", "source_id")
    ordering = ("-date", "-created_at")
    inlines = [VoucherEntryInline]

    readonly_fields = (
        "date",
        "narration",
        "voucher_type",
        "source_type",
        "source_id",
        "created_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# COMPANY PROFILE
# ============================================================


@admin.register(CompanyProfile)
class CompanyProfileAdmin(admin.ModelAdmin):
    list_display = ("name", "gstin", "primary_upi_id", "updated_at")
    readonly_fields = ("updated_at",)

    def has_add_permission(self, request):
        return not CompanyProfile.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False
