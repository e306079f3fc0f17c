"""
Application package initializer.

The project is organised by domain: membership and chat for groups
(parties, guilds and the tavern), the hall of heroes for privileged
administration, and users for registration and login.  Each domain
exposes a router defined in ``api/v1/endpoints`` backed by a service
class in ``services``.
"""

from .main import app  # noqa: F401
