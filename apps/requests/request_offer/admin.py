from django.contrib import admin

from apps.requests.request_offer.models import RequestOffer


@admin.register(RequestOffer)
class RequestOfferAdmin(admin.ModelAdmin):
    list_display = ("request", "offerer", "offered_price", "currency", "status", "created_at")
    list_filter = ("status", "currency")
    search_fields = ("offerer__mc_username", "request__title")
    raw_id_fields = ("request", "offerer")
    readonly_fields = ("status", "created_at", "updated_at")
