"""Orders app package.

Per-user carts and the checkout that turns a cart into one order per
merchant and store.
"""
