"""
Frame storefront backend.

Storefront (catalogue, cart, wishlist, checkout, order tracking) and admin
console APIs for a photo-frame e-commerce brand.
"""

__version__ = "1.0.0"
