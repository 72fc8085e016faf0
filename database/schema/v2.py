"""Schema v2 - Accounts and orders.

This version adds:
- Users with unique email and stored password hash
- A direct seller reference on listings
- Orders with shipping details and their line items
"""

schema = {
    'version': 2,
    'tables': [
        {
            'name': 'users',
            'columns': [
                {'name': 'id', 'type': 'UUID', 'primary_key': True, 'default': 'gen_random_uuid()'},
                {'name': 'email', 'type': 'TEXT', 'nullable': False, 'unique': True},
                {'name': 'password_hash', 'type': 'TEXT', 'nullable': False},
                {'name': 'created_at', 'type': 'TIMESTAMP', 'nullable': False, 'default': 'now()'}
            ]
        },
        {
            'name': 'listings',
            'columns': [
                {'name': 'id', 'type': 'UUID', 'primary_key': True, 'default': 'gen_random_uuid()'},
                {'name': 'seller_id', 'type': 'UUID'},
                {'name': 'name', 'type': 'TEXT', 'nullable': False},
                {'name': 'location', 'type': 'TEXT', 'nullable': False},
                {'name': 'price', 'type': 'DECIMAL', 'nullable': False, 'check': 'price >= 0'},
                {'name': 'description', 'type': 'TEXT', 'nullable': False},
                {'name': 'image_url', 'type': 'TEXT', 'nullable': False},
                {'name': 'category', 'type': 'TEXT', 'nullable': False},
                {'name': 'condition', 'type': 'TEXT', 'nullable': False},
                {'name': 'created_at', 'type': 'TIMESTAMP', 'nullable': False, 'default': 'now()'}
            ],
            'foreign_keys': [
                {'columns': ['seller_id'], 'references': 'users(id)'}
            ],
            'indexes': [
                {'name': 'idx_listings_category', 'columns': ['category', 'created_at']},
                {'name': 'idx_listings_seller', 'columns': ['seller_id']}
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
        },
        {
            'name': 'orders',
            'columns': [
                {'name': 'id', 'type': 'UUID', 'primary_key': True, 'default': 'gen_random_uuid()'},
                {'name': 'buyer_id', 'type': 'UUID', 'nullable': False},
                {'name': 'cart_owner_id', 'type': 'TEXT', 'nullable': False},
                {'name': 'total', 'type': 'DECIMAL', 'nullable': False, 'check': 'total >= 0'},
                {'name': 'shipping_name', 'type': 'TEXT'},
                {'name': 'shipping_address', 'type': 'TEXT'},
                {'name': 'shipping_city', 'type': 'TEXT'},
                {'name': 'shipping_state', 'type': 'TEXT'},
                {'name': 'shipping_zip', 'type': 'TEXT'},
                {'name': 'created_at', 'type': 'TIMESTAMP', 'nullable': False, 'default': 'clock_timestamp()'}
            ],
            'foreign_keys': [
                {'columns': ['buyer_id'], 'references': 'users(id)'}
            ],
            'indexes': [
                {'name': 'idx_orders_buyer', 'columns': ['buyer_id', 'created_at']}
            ]
        },
        {
            'name': 'order_items',
            'columns': [
                {'name': 'order_id', 'type': 'UUID', 'nullable': False},
                {'name': 'position', 'type': 'INT8', 'nullable': False},
                {'name': 'listing_id', 'type': 'UUID', 'nullable': False},
                {'name': 'quantity', 'type': 'INT8', 'nullable': False, 'check': 'quantity > 0'},
                {'name': 'price_at_purchase', 'type': 'DECIMAL', 'nullable': False, 'check': 'price_at_purchase >= 0'}
            ],
            'primary_key': ['order_id', 'position'],
            'foreign_keys': [
                {'columns': ['order_id'], 'references': 'orders(id)'},
                {'columns': ['listing_id'], 'references': 'listings(id)'}
            ]
        }
    ],
    'migrations': [
        '''
        CREATE TABLE IF NOT EXISTS users (
            id UUID DEFAULT gen_random_uuid(),
            email TEXT NOT NULL,
            password_hash TEXT NOT NULL,
            created_at TIMESTAMP NOT NULL DEFAULT now(),
            PRIMARY KEY (id),
            UNIQUE (email)
        );
        ''',
        '''
        ALTER TABLE listings
        ADD COLUMN IF NOT EXISTS seller_id UUID REFERENCES users(id);
        ''',
        '''
        CREATE INDEX IF NOT EXISTS idx_listings_seller ON listings(seller_id);
        ''',
        '''
        CREATE TABLE IF NOT EXISTS orders (
            id UUID DEFAULT gen_random_uuid(),
            buyer_id UUID NOT NULL REFERENCES users(id),
            cart_owner_id TEXT NOT NULL,
            total DECIMAL NOT NULL CHECK (total >= 0),
            shipping_name TEXT,
            shipping_address TEXT,
            shipping_city TEXT,
            shipping_state TEXT,
            shipping_zip TEXT,
            created_at TIMESTAMP NOT NULL DEFAULT clock_timestamp(),
            PRIMARY KEY (id)
        );
        ''',
        '''
        CREATE INDEX IF NOT EXISTS idx_orders_buyer ON orders(buyer_id, created_at);
        ''',
        '''
        CREATE TABLE IF NOT EXISTS order_items (
            order_id UUID NOT NULL REFERENCES orders(id),
            position INT8 NOT NULL,
            listing_id UUID NOT NULL REFERENCES listings(id),
            quantity INT8 NOT NULL CHECK (quantity > 0),
            price_at_purchase DECIMAL NOT NULL CHECK (price_at_purchase >= 0),
            PRIMARY KEY (order_id, position)
        );
        '''
    ]
}
