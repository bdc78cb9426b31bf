"""Product icon lookup backed by Django's default storage."""

from django.core.files.storage import default_storage

from .domain import CartItem

PRODUCTS_FOLDER = "products"


def resolve_icon_url(item: CartItem) -> str:
    """Return the public URL of the item's product image, or "" if it has none."""
    if not item.product_image:
        return ""
    parts = [PRODUCTS_FOLDER]
    if item.product_id is not None:
        parts.append(str(item.product_id))
    parts.append(item.product_image)
    return default_storage.url("/".join(parts))
