from django.contrib import admin

from apps.items.models import MinecraftItem


@admin.register(MinecraftItem)
class MinecraftItemAdmin(admin.ModelAdmin):
    list_display = ("id", "name_en", "name_de", "filename")
    search_fields = ("id", "name_en", "name_de")
