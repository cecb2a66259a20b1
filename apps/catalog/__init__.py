"""Catalog app package.

Merchant stores and the products that carts and orders reference.
"""
