"""ShopVibe storefront client core: cart, checkout and API collaborators."""

__version__ = "1.0.0"
