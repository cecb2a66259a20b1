"""Subscriptions app package.

Recurring access grants to fields, the merchant-defined plans that price
them and the renewal/expiry lifecycle that keeps their status current.
"""
