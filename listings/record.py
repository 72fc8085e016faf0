"""Row mapping shared by the listing queries."""
from typing import Dict, Any, Mapping

# Columns returned for every listing read, in table order
LISTING_COLUMNS = (
    'id',
    'seller_id',
    'name',
    'location',
    'price',
    'description',
    'image_url',
    'category',
    'condition',
    'created_at'
)

LISTING_SELECT = ', '.join(LISTING_COLUMNS)


def listing_from_row(row: Mapping[str, Any], prefix: str = '') -> Dict[str, Any]:
    """Convert a listing row (optionally with prefixed column aliases) to a dict."""
    return {column: row[f"{prefix}{column}"] for column in LISTING_COLUMNS}
