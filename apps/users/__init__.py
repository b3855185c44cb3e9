"""Users app package.

Defines the custom user model with the three platform roles (user,
manager, admin). Use ``apps.users.models.CustomUser`` as the
AUTH_USER_MODEL throughout the project.
"""
