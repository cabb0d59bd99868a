from django.contrib import admin

from apps.requests.request_base.models import Request


@admin.register(Request)
class RequestAdmin(admin.ModelAdmin):
    list_display = ("title", "request_type", "status", "requester", "suggested_price", "currency", "created_at")
    list_filter = ("status", "request_type", "currency")
    search_fields = ("title", "description", "requester__mc_username")
    raw_id_fields = ("requester", "item")
    # statuses only change through the lifecycle controller
    readonly_fields = ("status", "completed_at", "created_at", "updated_at")
