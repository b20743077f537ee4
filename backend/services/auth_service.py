"""
Mock authentication: signup, login, logout and session lookup.

Accounts live in the in-memory store. Demo accounts have no password hash
and accept any password; accounts created through signup are checked.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from data_access.repositories import UserRepository
from .errors import AuthError

logger = logging.getLogger(__name__)


class AuthService:
    """
    Wraps the user repository with the login/session rules.
    """

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    def signup(self, username: str, email: str, password: str) -> Dict[str, Any]:
        """
        Create an account and log it in.

        Returns:
            {"user": user_dict, "token": session_token}

        Raises:
            ValueError: If a field is missing, empty or not a string.
            AuthError: If the username or email is taken.
        """
        if not all(isinstance(field, str) for field in (username, email, password)):
            raise ValueError("Username, email and password are required")

        username = username.strip()
        email = email.strip()
        if not username or not email or not password:
            raise ValueError("Username, email and password are required")

        try:
            user = self.user_repo.create(
                username=username,
                email=email,
                password_hash=generate_password_hash(password),
            )
        except ValueError as e:
            raise AuthError(str(e)) from e

        logger.info(f"Created user {user['username']} (id={user['id']})")
        return self._open_session(user)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Log in by email.

        Raises:
            AuthError: If the email is unknown or the password does not match.
        """
        if not isinstance(email, str) or (password is not None and not isinstance(password, str)):
            raise AuthError("Invalid email or password")

        user = self.user_repo.get_by_email(email)
        if user is None:
            raise AuthError("Invalid email or password")

        password_hash = self.user_repo.get_password_hash(user["id"])
        if password_hash and not check_password_hash(password_hash, password or ""):
            raise AuthError("Invalid email or password")

        logger.info(f"User {user['username']} logged in")
        return self._open_session(user)

    def logout(self, token: Optional[str]) -> None:
        if token:
            self.user_repo.delete_session(token)

    def get_current_user(self, token: Optional[str]) -> Optional[Dict[str, Any]]:
        if not token:
            return None
        return self.user_repo.get_user_for_token(token)

    def require_user(self, token: Optional[str], message: str = "Not logged in") -> Dict[str, Any]:
        user = self.get_current_user(token)
        if user is None:
            raise AuthError(message)
        return user

    def _open_session(self, user: Dict[str, Any]) -> Dict[str, Any]:
        token = uuid.uuid4().hex
        self.user_repo.create_session(token, user["id"])
        return {"user": user, "token": token}
