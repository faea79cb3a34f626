"""Users app package.

Defines the resort account model with customer and staff roles and the
JWT authentication endpoints. Use ``apps.users.models.CustomUser`` as the
AUTH_USER_MODEL throughout the project.
"""
