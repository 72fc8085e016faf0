"""Schema v1 - Initial storefront schema.

This version includes tables for:
- Listings in the four storefront categories
- Per-session shopping carts
"""

schema = {
    'version': 1,
    'tables': [
        {
            'name': 'listings',
            'columns': [
                {'name': 'id', 'type': 'UUID', 'primary_key': True, 'default': 'gen_random_uuid()'},
                {'name': 'name', 'type': 'TEXT', 'nullable': False},
                {'name': 'location', 'type': 'TEXT', 'nullable': False},
                {'name': 'price', 'type': 'DECIMAL', 'nullable': False, 'check': 'price >= 0'},
                {'name': 'description', 'type': 'TEXT', 'nullable': False},
                {'name': 'image_url', 'type': 'TEXT', 'nullable': False},
                {'name': 'category', 'type': 'TEXT', 'nullable': False},
                {'name': 'condition', 'type': 'TEXT', 'nullable': False},
                {'name': 'created_at', 'type': 'TIMESTAMP', 'nullable': False, 'default': 'now()'}
            ],
            'indexes': [
                {'name': 'idx_listings_category', 'columns': ['category', 'created_at']}
            ]
        },
        {
            'name': 'cart_items',
            'columns': [
                {'name': 'owner_id', 'type': 'TEXT', 'nullable': False},
                {'name': 'listing_id', 'type': 'UUID', 'nullable': False},
                {'name': 'quantity', 'type': 'INT8', 'nullable': False, 'default': '1', 'check': 'quantity > 0'},
                {'name': 'added_at', 'type': 'TIMESTAMP', 'nullable': False, 'default': 'now()'}
            ],
            'primary_key': ['owner_id', 'listing_id'],
            'foreign_keys': [
                {'columns': ['listing_id'], 'references': 'listings(id)'}
            ]
        }
    ]
}
