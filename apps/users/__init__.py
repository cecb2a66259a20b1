"""Users app package.

Defines the custom user model with platform roles and the merchant
profile that owns fields, products and stores. Use
``apps.users.models.CustomUser`` as the AUTH_USER_MODEL throughout
the project.
"""
