# partners/admin.py

from django.contrib import admin

from partners.models import CommissionRule, Partner, PartnerWallet


class CommissionRuleInline(admin.TabularInline):
    model = CommissionRule
    extra = 0


@admin.register(Partner)
class PartnerAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "email")
    inlines = [CommissionRuleInline]


# ============================================================
# WALLETS (READ-ONLY: balances move through commission accrual)
# ============================================================


@admin.register(PartnerWallet)
class PartnerWalletAdmin(admin.ModelAdmin):
    list_display = ("partner", "commission_payable", "updated_at")
    search_fields = ("partner__name",)
    readonly_fields = ("partner", "commission_payable", "updated_at")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
