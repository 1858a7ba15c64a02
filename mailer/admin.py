from django.contrib import admin
from .models import EmailEvent, MessageLog


@admin.register(EmailEvent)
class EmailEventAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "kind", "event", "email", "timestamp")
    list_filter = ("event", "kind")


@admin.register(MessageLog)
class MessageLogAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "kind", "subject", "sent_at", "provider_id")
    list_filter = ("kind",)
    search_fields = ("user__email", "ref", "provider_id")
