"""
API routers
"""

from porchboard.api import auth, cities, events, subscriptions, users

__all__ = ["auth", "cities", "events", "subscriptions", "users"]
