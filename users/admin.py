# Django Imports
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

# 3rd-party Imports
from import_export import resources
from import_export.admin import ExportMixin
from unfold.admin import ModelAdmin

# Local Imports
from .models import User


# --- Resources for django-import-export ---

class UserResource(resources.ModelResource):
    class Meta:
        model = User
        fields = (
            "id",
            "username",
            "role",
            "wallet_balance",
            "is_blocked",
            "is_chat_blocked",
            "last_tx_at",
            "date_joined",
        )


# --- ModelAdmins ---

@admin.register(User)
class UserAdmin(ExportMixin, BaseUserAdmin, ModelAdmin):
    resource_class = UserResource
    list_display = ("username", "role", "wallet_balance", "is_blocked", "is_chat_blocked", "last_tx_at")
    search_fields = ("username",)
    list_filter = ("role", "is_blocked", "is_chat_blocked", "is_staff")
    # Balance only moves through wallet.services.adjust_balance.
    readonly_fields = ("wallet_balance", "last_tx_at", "last_login", "date_joined")

    fieldsets = (
        (None, {"fields": ("username", "password")}),
        ("Arena", {"fields": ("role", "wallet_balance", "last_tx_at"), "classes": ("tab",)}),
        (
            "Restrictions",
            {"fields": ("is_active", "is_blocked", "is_chat_blocked"), "classes": ("tab",)},
        ),
        (
            "Permissions",
            {"fields": ("is_staff", "is_superuser", "groups", "user_permissions"), "classes": ("tab",)},
        ),
        ("Important dates", {"fields": ("last_login", "date_joined"), "classes": ("tab",)}),
    )
