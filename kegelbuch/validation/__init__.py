"""Input coercion package."""

from kegelbuch.validation.coercion import (
    coerce_amount,
    coerce_count,
    slugify_label,
)

__all__ = ["coerce_amount", "coerce_count", "slugify_label"]
