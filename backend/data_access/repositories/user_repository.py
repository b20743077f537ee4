"""
User repository for accounts and login sessions.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .base import BaseRepository


class UserRepository(BaseRepository):
    """
    Repository for users and session tokens.
    """

    # -------------------------------------------------------------------------
    # Query operations
    # -------------------------------------------------------------------------

    def get_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        with self.read() as store:
            user = store.users.get(user_id)
            return dict(user) if user else None

    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """
        Get a user by email (case-insensitive).

        Args:
            email: The email to look up

        Returns:
            User dictionary or None if not found
        """
        email = email.strip().lower()
        with self.read() as store:
            for user in store.users.values():
                if user["email"].lower() == email:
                    return dict(user)
        return None

    def get_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        with self.read() as store:
            for user in store.users.values():
                if user["username"] == username:
                    return dict(user)
        return None

    def get_password_hash(self, user_id: str) -> Optional[str]:
        with self.read() as store:
            return store.password_hashes.get(user_id)

    def get_user_for_token(self, token: str) -> Optional[Dict[str, Any]]:
        with self.read() as store:
            user_id = store.sessions.get(token)
            if user_id is None:
                return None
            user = store.users.get(user_id)
            return dict(user) if user else None

    # -------------------------------------------------------------------------
    # Write operations
    # -------------------------------------------------------------------------

    def create(
        self,
        username: str,
        email: str,
        password_hash: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Insert a new user. Ids are sequential strings, like the demo data.

        Raises:
            ValueError: If the username or email is already taken.
        """
        with self.transaction() as store:
            for user in store.users.values():
                if user["email"].lower() == email.lower() or user["username"] == username:
                    raise ValueError("User already exists")

            user_id = str(len(store.users) + 1)
            while user_id in store.users:
                user_id = str(int(user_id) + 1)

            user = {
                "id": user_id,
                "username": username,
                "email": email,
                "created_at": datetime.now(timezone.utc),
            }
            store.users[user_id] = user
            if password_hash:
                store.password_hashes[user_id] = password_hash
            return dict(user)

    def create_session(self, token: str, user_id: str) -> None:
        with self.transaction() as store:
            if user_id not in store.users:
                raise ValueError(f"Unknown user '{user_id}'")
            store.sessions[token] = user_id

    def delete_session(self, token: str) -> bool:
        """Remove a session token. Returns False if it did not exist."""
        with self.transaction() as store:
            return store.sessions.pop(token, None) is not None
