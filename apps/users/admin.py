from django.contrib import admin

from apps.users.models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(admin.ModelAdmin):
    ordering = ("mc_username",)
    list_display = ("mc_username", "email", "is_active", "is_staff", "date_joined")
    list_filter = ("is_active", "is_staff")
    search_fields = ("mc_username", "email")
    readonly_fields = ("last_login", "date_joined")
    exclude = ("password", "groups", "user_permissions")
