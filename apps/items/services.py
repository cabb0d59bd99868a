from apps.items.models import MinecraftItem


class ItemCatalog:
    """Read-only lookups against the item catalogue."""

    @staticmethod
    def item_exists(item_id) -> bool:
        if not item_id:
            return False
        return MinecraftItem.objects.filter(id=item_id).exists()
