from django.contrib import admin
from unfold.admin import ModelAdmin

from .models import GlobalConfig


@admin.register(GlobalConfig)
class GlobalConfigAdmin(ModelAdmin):
    list_display = ("upi_id", "chat_disabled", "auto_payment_enabled", "updated_at")
    readonly_fields = ("updated_at",)

    def has_add_permission(self, request):
        return not GlobalConfig.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False
