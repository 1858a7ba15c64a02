from django.contrib import admin

from .models import Application, ApplicationDocument


class ApplicationDocumentInline(admin.TabularInline):
    model = ApplicationDocument
    extra = 0
    fields = ("document_type", "file", "file_size", "status", "staff_notes", "verified_by", "verified_at")
    readonly_fields = ("file_size", "verified_by", "verified_at")


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ("application_number", "applicant", "university", "program", "status", "submission_date")
    list_filter = ("status", "university")
    search_fields = ("application_number", "applicant__email", "applicant__profile__full_name")
    readonly_fields = ("application_number", "created_at", "updated_at")
    inlines = [ApplicationDocumentInline]
