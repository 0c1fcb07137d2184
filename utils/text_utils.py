"""
Text utilities for building URL-safe slugs and storage keys.

Product names and categories may contain accents ("Colección Ñandú"), so
slugs strip them the same way for every caller.
"""

import hashlib
import re
import unicodedata
from typing import Optional

from models.save_target import SaveTarget


# Rotated per SKU so stored filenames do not all repeat one phrase
SEO_KEYWORDS = (
    "handcrafted-jewelry",
    "custom-gold-jewelry",
    "fine-jewelry",
    "handmade-ring",
    "artisan-jewelry",
    "bespoke-jewelry",
    "solid-gold-jewelry",
    "luxury-jewelry",
)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def strip_accents(text: str) -> str:
    """
    Remove accent marks, keeping the base characters.

    - "Decoración" → "Decoracion"
    - "Ñandú" → "Nandu"
    """
    # NFD separates base chars from combining marks (category 'Mn')
    normalized = unicodedata.normalize('NFD', text)
    return ''.join(
        c for c in normalized
        if unicodedata.category(c) != 'Mn'
    )


def slugify(text: Optional[str], fallback: str = "item") -> str:
    """
    Turn free text into a lowercase, hyphen-separated, URL-safe slug.

    - "Custom Gold Ring" → "custom-gold-ring"
    - "  ABC_123 / Rose Gold " → "abc-123-rose-gold"
    - "Anillos & Argollas" → "anillos-argollas"

    Args:
        text: Any text (may be empty or None)
        fallback: Slug returned when nothing usable remains

    Returns:
        Slug containing only [a-z0-9-], never empty
    """
    if not text:
        return fallback

    ascii_text = strip_accents(text).lower()
    slug = _NON_ALNUM.sub("-", ascii_text).strip("-")

    return slug or fallback


def seo_keyword(sku: str) -> str:
    """
    Pick an SEO keyword for a SKU.

    The choice depends only on the normalized SKU, so repeated saves for the
    same product always produce the same keyword.
    """
    normalized = sku.strip().upper().encode("utf-8")
    digest = hashlib.sha256(normalized).digest()
    return SEO_KEYWORDS[int.from_bytes(digest[:4], "big") % len(SEO_KEYWORDS)]


def build_storage_key(
    category: Optional[str],
    sku: str,
    target: SaveTarget,
    extension: str = "webp"
) -> str:
    """
    Build the object storage key for a product image.

    Format: <category>/<sku>-<keyword>-<stage phrase>.<ext>
    e.g. "rings/abc-123-fine-jewelry-wax-prototype.webp"

    Args:
        category: Product category (None → "uncategorized")
        sku: Product SKU
        target: Image save target
        extension: File extension without dot

    Returns:
        Deterministic, human-readable key
    """
    phrase = target.phrase or target.value
    filename = "-".join([
        slugify(sku, fallback="product"),
        seo_keyword(sku),
        slugify(phrase),
    ])
    return f"{slugify(category, fallback='uncategorized')}/{filename}.{extension.lstrip('.')}"
