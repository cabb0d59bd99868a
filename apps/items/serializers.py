from rest_framework import serializers

from apps.items.models import MinecraftItem


class ItemShortSerializer(serializers.ModelSerializer):
    class Meta:
        model = MinecraftItem
        fields = ["id", "name_en", "filename"]
