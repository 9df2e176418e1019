"""Small helpers: UTC datetimes and id generation."""

from taskboard.shared.utils.datetime import ensure_utc, utc_now
from taskboard.shared.utils.generators import generate_cuid

__all__ = ["ensure_utc", "generate_cuid", "utc_now"]
