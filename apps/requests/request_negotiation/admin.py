from django.contrib import admin

from apps.requests.request_negotiation.models import NegotiationMessage, RequestNegotiation


class NegotiationMessageInline(admin.TabularInline):
    model = NegotiationMessage
    extra = 0
    can_delete = False
    fields = ("sequence", "sender", "message_type", "content", "price_offer", "currency", "created_at")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(RequestNegotiation)
class RequestNegotiationAdmin(admin.ModelAdmin):
    list_display = ("request", "accepted_offer", "status", "current_price", "current_currency", "created_at")
    list_filter = ("status",)
    inlines = [NegotiationMessageInline]
    readonly_fields = (
        "request",
        "accepted_offer",
        "status",
        "completed_at",
        "current_price",
        "current_currency",
        "pivot_message",
        "requester_accepted",
        "offerer_accepted",
        "message_count",
    )
