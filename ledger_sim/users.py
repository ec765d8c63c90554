"""
User Management Module

Users own accounts. The ledger core only reads a user's identity; this module
covers creation, credential validation, lookup and authentication.
"""

import hashlib
import re
import secrets
import threading
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .errors import UserNotFoundError, ValidationError
from .logging_config import get_logger, log_action

EMAIL_PATTERN = re.compile(r'^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+$')
USERNAME_PATTERN = re.compile(r'^[a-zA-Z0-9_]+$')
MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 4


def hash_password(password: str, salt: str) -> str:
    """Hash password with salt using scrypt"""
    return hashlib.scrypt(
        password.encode(),
        salt=salt.encode(),
        n=16384, r=8, p=1
    ).hex()


def generate_user_id() -> str:
    return f"USR-{uuid.uuid4().hex[:8].upper()}"


@dataclass(eq=False)
class User:
    """Account owner. Equality is by id only."""
    id: str
    username: str
    email: str
    password_hash: str = field(repr=False)
    password_salt: str = field(repr=False)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored salted hash"""
        if not self.password_hash or not self.password_salt:
            return False
        candidate = hash_password(password, self.password_salt)
        return secrets.compare_digest(candidate, self.password_hash)

    def __eq__(self, other) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


class UserManager:
    """
    Creates and stores users, enforcing username, password and email rules
    """

    def __init__(self, id_factory: Callable[[], str] = generate_user_id):
        self._users: Dict[str, User] = {}
        self._id_factory = id_factory
        self._lock = threading.RLock()
        self.logger = get_logger("ledger_sim.users")

    def create_user(self, username: str, password: str, email: str) -> User:
        """
        Create a new user with a generated id

        Args:
            username: Letters, digits and underscores, at least 3 characters
            password: At least 4 characters
            email: Contact address

        Returns:
            Created User

        Raises:
            ValidationError: If any field is invalid or the username is taken
        """
        return self._create(self._id_factory(), username, password, email)

    def create_user_with_id(self, user_id: str, username: str, password: str, email: str) -> User:
        """Create a user with a caller-supplied id"""
        if not user_id or not user_id.strip():
            raise ValidationError("User id cannot be empty")
        return self._create(user_id, username, password, email)

    def create_simple_user(self, username: str, password: str) -> User:
        """Create a user with a placeholder email address"""
        return self.create_user(username, password, f"{username}@default.com")

    def _create(self, user_id: str, username: str, password: str, email: str) -> User:
        self._validate_username(username)
        self._validate_password(password)
        self._validate_email(email)

        with self._lock:
            if user_id in self._users:
                raise ValidationError(f"A user with id {user_id} already exists")
            if self._find_by_username(username):
                raise ValidationError(f"A user named {username} already exists")

            salt = secrets.token_hex(16)
            user = User(
                id=user_id,
                username=username,
                email=email,
                password_hash=hash_password(password, salt),
                password_salt=salt,
            )
            self._users[user.id] = user

        log_action(
            self.logger, "info", f"User created: {username}",
            user_id=user.id, action="create_user", resource=f"user:{user.id}"
        )
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        """Get user by ID"""
        with self._lock:
            return self._users.get(user_id)

    def require_user(self, user_id: str) -> User:
        """Get user by ID or raise UserNotFoundError"""
        user = self.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def get_user_by_username(self, username: str) -> Optional[User]:
        """Get user by username"""
        with self._lock:
            return self._find_by_username(username)

    def authenticate(self, username: str, password: str) -> Optional[User]:
        """Return the user if the credentials match, else None"""
        user = self.get_user_by_username(username)
        if user is not None and user.check_password(password):
            return user

        log_action(
            self.logger, "warning", "Authentication failed",
            action="authenticate", resource=f"user:{username}"
        )
        return None

    def list_users(self) -> List[User]:
        with self._lock:
            return list(self._users.values())

    def count(self) -> int:
        with self._lock:
            return len(self._users)

    def _find_by_username(self, username: str) -> Optional[User]:
        for user in self._users.values():
            if user.username == username:
                return user
        return None

    @staticmethod
    def _validate_username(username: str) -> None:
        if not username or not username.strip():
            raise ValidationError("Username cannot be empty")
        if len(username) < MIN_USERNAME_LENGTH:
            raise ValidationError(
                f"Username must be at least {MIN_USERNAME_LENGTH} characters"
            )
        if not USERNAME_PATTERN.match(username):
            raise ValidationError(
                "Username may only contain letters, digits and underscores"
            )

    @staticmethod
    def _validate_password(password: str) -> None:
        if not password:
            raise ValidationError("Password cannot be empty")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

    @staticmethod
    def _validate_email(email: str) -> None:
        if not email or not email.strip():
            raise ValidationError("Email cannot be empty")
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Invalid email format")
