from django.contrib import admin
from .models import University, Program, DocumentType, ProgramDocument


class ProgramInline(admin.TabularInline):
    model = Program
    extra = 0
    fields = ("name", "degree", "duration_years", "application_fee", "total_fees")


@admin.register(University)
class UniversityAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "city", "state", "rank")
    search_fields = ("name", "code", "city")
    inlines = [ProgramInline]


class ProgramDocumentInline(admin.TabularInline):
    model = ProgramDocument
    extra = 0


@admin.register(Program)
class ProgramAdmin(admin.ModelAdmin):
    list_display = ("name", "degree", "university", "application_fee")
    list_filter = ("degree",)
    search_fields = ("name", "university__name")
    inlines = [ProgramDocumentInline]


@admin.register(DocumentType)
class DocumentTypeAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "is_required", "max_size_mb")
    search_fields = ("name", "code")
