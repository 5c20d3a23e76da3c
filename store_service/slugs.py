# store_service/slugs.py

"""URL keys for products."""
from slugify import slugify


def to_slug(title: str) -> str:
    """
    Turn a display title into a lowercase, URL-safe key.

    Accents are transliterated ("Áo thun đỏ" -> "ao-thun-do"), every run of
    other characters becomes a single "-", and no "-" is left at either end.
    Running the result through again returns it unchanged.
    """
    return slugify(title or "")
