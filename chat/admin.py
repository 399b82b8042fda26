# Django Imports
from django.contrib import admin

# 3rd-party Imports
from import_export import resources
from import_export.admin import ImportExportModelAdmin
from unfold.admin import ModelAdmin

# Local Imports
from .models import Message


# --- Resources for django-import-export ---

class MessageResource(resources.ModelResource):
    class Meta:
        model = Message
        fields = ("id", "sender__username", "receiver__username", "text", "timestamp", "is_read")


# --- ModelAdmins ---

@admin.register(Message)
class MessageAdmin(ImportExportModelAdmin, ModelAdmin):
    resource_class = MessageResource
    list_display = ("sender", "receiver", "timestamp", "is_read")
    list_filter = ("is_read", "timestamp")
    search_fields = ("sender__username", "receiver__username", "text")
    raw_id_fields = ("sender", "receiver")
