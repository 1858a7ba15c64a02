from django.contrib import admin

from .models import Ticket, TicketMessage


class TicketMessageInline(admin.TabularInline):
    model = TicketMessage
    extra = 0
    fields = ("sender", "body", "is_internal", "created_at")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ("ticket_number", "applicant", "subject", "priority", "status", "assigned_to", "created_at")
    list_filter = ("status", "priority")
    search_fields = ("ticket_number", "subject", "applicant__email")
    readonly_fields = ("ticket_number", "created_at", "updated_at")
    inlines = [TicketMessageInline]
