# Django Imports
from django.contrib import admin

# 3rd-party Imports
from import_export import resources
from import_export.admin import ExportMixin
from simple_history.admin import SimpleHistoryAdmin
from unfold.admin import ModelAdmin, TabularInline

# Local Imports
from .models import JoinRequest, Participant, Tournament


# --- Resources for django-import-export ---

class ParticipantResource(resources.ModelResource):
    class Meta:
        model = Participant
        fields = ("id", "tournament__name", "user__username", "ff_name", "ff_uid", "slot_no", "joined_at")


# --- Inlines ---

class ParticipantInline(TabularInline):
    model = Participant
    extra = 0
    fields = ("slot_no", "user", "ff_name", "ff_uid", "joined_at")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


# --- ModelAdmins ---

@admin.register(Tournament)
class TournamentAdmin(ModelAdmin):
    list_display = ("name", "game_name", "date", "status", "entry_fee", "prize_pool", "max_slots", "winner")
    list_filter = ("status", "game_name", "mode")
    search_fields = ("name",)
    # Status, winner and prizes change through the go-live / set-winner workflows.
    readonly_fields = ("status", "winner", "created_at")
    inlines = [ParticipantInline]

    fieldsets = (
        ("Details", {"fields": ("name", "game_name", "mode", "rules", "banner_url"), "classes": ("tab",)}),
        ("Schedule", {"fields": ("date", "time", "day"), "classes": ("tab",)}),
        ("Money", {"fields": ("entry_fee", "prize_pool", "max_slots"), "classes": ("tab",)}),
        ("Match", {"fields": ("status", "room_id", "room_password", "winner", "created_at"), "classes": ("tab",)}),
    )


@admin.register(Participant)
class ParticipantAdmin(ExportMixin, ModelAdmin):
    resource_class = ParticipantResource
    list_display = ("tournament", "slot_no", "user", "ff_name", "ff_uid", "joined_at")
    list_filter = ("tournament",)
    search_fields = ("user__username", "ff_name", "ff_uid")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(JoinRequest)
class JoinRequestAdmin(SimpleHistoryAdmin, ModelAdmin):
    list_display = ("tournament", "user", "utr_number", "status", "created_at", "resolved_by")
    list_filter = ("status", "tournament")
    search_fields = ("user__username", "utr_number")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
