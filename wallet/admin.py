# Django Imports
from django.contrib import admin

# 3rd-party Imports
from import_export import resources
from import_export.admin import ExportMixin
from simple_history.admin import SimpleHistoryAdmin
from unfold.admin import ModelAdmin

# Local Imports
from .models import Transaction, WalletAddRequest, WithdrawalRequest

# --- Resources for django-import-export ---


class TransactionResource(resources.ModelResource):
    class Meta:
        model = Transaction
        fields = ("id", "user__username", "amount", "balance_after", "kind", "description", "timestamp")


class WalletAddRequestResource(resources.ModelResource):
    class Meta:
        model = WalletAddRequest
        fields = ("id", "user__username", "amount", "utr", "status", "created_at", "resolved_at")


class WithdrawalRequestResource(resources.ModelResource):
    class Meta:
        model = WithdrawalRequest
        fields = ("id", "user__username", "amount", "upi_id", "status", "created_at", "resolved_at")


# --- ModelAdmins ---
# The ledger and request states only change through wallet.services, so these
# admins are export-only and read-only.


class ReadOnlyAdminMixin:
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Transaction)
class TransactionAdmin(ReadOnlyAdminMixin, ExportMixin, ModelAdmin):
    resource_class = TransactionResource
    list_display = ("user", "kind", "amount", "balance_after", "timestamp")
    list_filter = ("kind", "timestamp")
    search_fields = ("user__username", "description")


@admin.register(WalletAddRequest)
class WalletAddRequestAdmin(ReadOnlyAdminMixin, ExportMixin, SimpleHistoryAdmin, ModelAdmin):
    resource_class = WalletAddRequestResource
    list_display = ("user", "amount", "utr", "status", "created_at", "resolved_by")
    list_filter = ("status",)
    search_fields = ("user__username", "utr")


@admin.register(WithdrawalRequest)
class WithdrawalRequestAdmin(ReadOnlyAdminMixin, ExportMixin, SimpleHistoryAdmin, ModelAdmin):
    resource_class = WithdrawalRequestResource
    list_display = ("user", "amount", "upi_id", "status", "created_at", "resolved_by")
    list_filter = ("status",)
    search_fields = ("user__username", "upi_id")
