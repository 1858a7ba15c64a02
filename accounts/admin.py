from django.contrib import admin
from .models import User, Profile, EmailPreference


class ProfileInline(admin.StackedInline):
    model = Profile
    can_delete = False


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ("id", "email", "role", "is_active", "date_joined")
    list_filter = ("role", "is_active")
    search_fields = ("email", "profile__full_name")
    inlines = [ProfileInline]


@admin.register(EmailPreference)
class EmailPreferenceAdmin(admin.ModelAdmin):
    list_display = ("user", "notify_by_email", "consent_source", "consent_timestamp")
