"""
Repository layer for database operations.

One module per aggregate. Functions take the request's ``AsyncSession`` as
their first argument, commit their own writes and translate storage-level
uniqueness violations into ``ConflictError``.
"""
from app.db.repositories import users, events, participants, invitations, notifications, discussions

__all__ = ["users", "events", "participants", "invitations", "notifications", "discussions"]
