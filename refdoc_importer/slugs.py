"""
Slug normalization for record names and file paths
"""

import re
import unicodedata


def sanitize_title(value: str) -> str:
    """
    Normalize a name into a lowercase, URL-safe slug.

    Accents are folded to ASCII, dots and whitespace become hyphens,
    anything other than letters, digits, underscores and hyphens is dropped
    and runs of hyphens collapse to one.

    Args:
        value: Raw name, e.g. "WP_Query::get_posts" or "wp-includes_post.php"

    Returns:
        Slug such as "wp_queryget_posts" or "wp-includes_post-php"
    """
    if not value:
        return ""
    value = unicodedata.normalize("NFKD", value)
    value = value.encode("ascii", "ignore").decode("ascii")
    value = value.lower().replace(".", "-")
    value = re.sub(r"[^\w\s-]", "", value).strip()
    value = re.sub(r"[-\s]+", "-", value)
    return value.strip("-")


def file_slug(path: str) -> str:
    """Slug for a source file's grouping record: slashes become underscores first"""
    return sanitize_title(path.replace("/", "_"))
