from django.db import models

from apps.core.models import BaseModel


class MinecraftItem(BaseModel):
    """
    Catalogue entry for an in-game item. Rows are loaded by the admin import
    tool; the request board only reads them.
    """

    id = models.CharField(primary_key=True, max_length=120)
    name_en = models.CharField(max_length=200)
    name_de = models.CharField(max_length=200, blank=True)
    filename = models.CharField(max_length=255)

    class Meta:
        db_table = "minecraft_items"
        ordering = ["name_en"]
        indexes = [models.Index(fields=["name_en"])]

    def __str__(self):
        return self.name_en
