"""
Authentication service for CulinariaLegacy application.

Handles password hashing, registration, login sessions, and the explicit
AuthContext that pages hand to every workflow call.
"""

import re
import secrets
import logging
from datetime import datetime, timedelta
from typing import Optional, List

import bcrypt

from models import User, UserSession, AuthState
from utils.config import get_config
from .database_service import DatabaseService, get_database_service, parse_timestamp
from .errors import (
    AlreadyExistsError, InvalidInputError, UnauthorizedError, NotFoundError
)

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


class AuthService:
    """
    Authentication service handling all security operations.
    Provides password hashing, user registration and session management.
    """

    def __init__(self, database_service: Optional[DatabaseService] = None,
                 session_duration_hours: Optional[int] = None,
                 password_min_length: Optional[int] = None):
        config = get_config()
        self.db = database_service or get_database_service()
        self.session_duration_hours = session_duration_hours or config.session_duration_hours
        self.password_min_length = password_min_length or config.password_min_length

    # Password Management

    def hash_password(self, password: str) -> str:
        """Hash password using bcrypt"""
        salt = bcrypt.gensalt()
        hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
        return hashed.decode('utf-8')

    def verify_password(self, password: str, password_hash: str) -> bool:
        """Verify password against hash"""
        try:
            return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
        except ValueError as e:
            logger.error(f"Password verification error: {e}")
            return False

    # User Registration and Authentication

    def register_user(self, email: str, password: str, full_name: str = "") -> User:
        """Register a new user with password hashing"""
        email = (email or "").lower().strip()
        if not EMAIL_PATTERN.match(email):
            raise InvalidInputError("Adresse e-mail invalide")

        feedback = self.get_password_strength_feedback(password)
        if feedback:
            raise InvalidInputError(feedback[0])

        if self.db.select_one('users', {'email': email}):
            logger.warning(f"User registration failed - email already exists: {email}")
            raise AlreadyExistsError("Un compte existe déjà pour cette adresse e-mail")

        row = self.db.insert('users', {
            'email': email,
            'password_hash': self.hash_password(password),
            'full_name': (full_name or "").strip(),
            'is_active': True,
            'created_at': datetime.now(),
        })
        logger.info(f"User registered successfully: {email}")
        return self._row_to_user(row)

    def authenticate_user(self, email: str, password: str) -> User:
        """Authenticate user with email and password"""
        email = (email or "").lower().strip()
        row = self.db.select_one('users', {'email': email, 'is_active': True})
        if not row:
            logger.warning(f"Authentication failed - user not found: {email}")
            raise UnauthorizedError("Email ou mot de passe incorrect")

        if not self.verify_password(password or "", row['password_hash']):
            logger.warning(f"Authentication failed - invalid password: {email}")
            raise UnauthorizedError("Email ou mot de passe incorrect")

        now = datetime.now()
        self.db.update('users', {'last_login': now}, {'id': row['id']})
        row['last_login'] = now

        logger.info(f"User authenticated successfully: {email}")
        return self._row_to_user(row)

    def get_user(self, user_id: str) -> User:
        row = self.db.select_one('users', {'id': user_id})
        if not row:
            raise NotFoundError(f"User {user_id} not found")
        return self._row_to_user(row)

    # Session Management

    def create_session(self, user: User) -> UserSession:
        """Create a new user session"""
        now = datetime.now()
        session = UserSession(
            user_id=user.id,
            email=user.email,
            session_token=secrets.token_urlsafe(32),
            created_at=now,
            expires_at=now + timedelta(hours=self.session_duration_hours),
            last_activity=now
        )
        self.db.insert('user_sessions', {
            'user_id': session.user_id,
            'session_token': session.session_token,
            'created_at': session.created_at,
            'expires_at': session.expires_at,
            'last_activity': session.last_activity,
        })
        logger.info(f"Session created for user: {user.email}")
        return session

    def validate_session(self, session_token: str, now: Optional[datetime] = None) -> Optional[UserSession]:
        """Validate session token and return session info"""
        row = self.db.select_one('user_sessions', {'session_token': session_token})
        if not row:
            return None

        user_row = self.db.select_one('users', {'id': row['user_id']})
        session = UserSession(
            user_id=row['user_id'],
            email=user_row['email'] if user_row else "",
            session_token=row['session_token'],
            created_at=parse_timestamp(row['created_at']),
            expires_at=parse_timestamp(row['expires_at']),
            last_activity=parse_timestamp(row['last_activity'])
        )

        if session.is_expired(now) or not user_row:
            logger.info(f"Expired session removed: {session.email}")
            self.db.delete('user_sessions', {'session_token': session_token})
            return None

        session.refresh_activity()
        self.db.update('user_sessions', {'last_activity': session.last_activity},
                       {'session_token': session_token})
        return session

    def logout_user(self, session_token: str) -> bool:
        """Logout user by deleting session"""
        deleted = self.db.delete('user_sessions', {'session_token': session_token})
        if deleted:
            logger.info("User logged out successfully")
        return deleted > 0

    def cleanup_expired_sessions(self) -> int:
        """Clean up expired sessions"""
        expired = self.db.select('user_sessions', lte={'expires_at': datetime.now()})
        if not expired:
            return 0
        deleted = self.db.delete('user_sessions', {'id': [row['id'] for row in expired]})
        logger.info(f"Cleaned up {deleted} expired sessions")
        return deleted

    # Utility Methods

    def get_password_strength_feedback(self, password: str) -> List[str]:
        """Problems with a password, empty when it is strong enough"""
        password = password or ""
        feedback = []

        if len(password) < self.password_min_length:
            feedback.append(f"Le mot de passe doit contenir au moins {self.password_min_length} caractères")

        if not any(c.isupper() for c in password):
            feedback.append("Le mot de passe doit contenir au moins une majuscule")

        if not any(c.islower() for c in password):
            feedback.append("Le mot de passe doit contenir au moins une minuscule")

        if not any(c.isdigit() for c in password):
            feedback.append("Le mot de passe doit contenir au moins un chiffre")

        return feedback

    def _row_to_user(self, row) -> User:
        """Convert database row to User object"""
        return User(
            id=row['id'],
            email=row['email'],
            password_hash=row['password_hash'],
            full_name=row.get('full_name') or '',
            is_active=bool(row.get('is_active', True)),
            created_at=parse_timestamp(row.get('created_at')) or datetime.now(),
            last_login=parse_timestamp(row.get('last_login'))
        )


class AuthContext:
    """
    Authentication state handed to every workflow call.

    Starts signed out; sign_in / sign_up move it to signed in, sign_out and
    an expired session (detected by refresh) move it back.
    """

    def __init__(self, auth_service: Optional[AuthService] = None,
                 user: Optional[User] = None, session: Optional[UserSession] = None):
        self.auth_service = auth_service
        self.user = user
        self.session = session

    @classmethod
    def signed_in(cls, user: User, auth_service: Optional[AuthService] = None) -> 'AuthContext':
        """Context for an already authenticated user"""
        return cls(auth_service=auth_service, user=user)

    @property
    def state(self) -> AuthState:
        return AuthState.SIGNED_IN if self.user is not None else AuthState.SIGNED_OUT

    @property
    def is_signed_in(self) -> bool:
        return self.state == AuthState.SIGNED_IN

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user else None

    def require_user(self) -> User:
        """Current user, or UnauthorizedError when signed out"""
        if self.user is None:
            raise UnauthorizedError("Veuillez vous connecter")
        return self.user

    def sign_in(self, email: str, password: str) -> User:
        user = self._service().authenticate_user(email, password)
        self._start(user)
        return user

    def sign_up(self, email: str, password: str, full_name: str = "") -> User:
        user = self._service().register_user(email, password, full_name)
        self._start(user)
        return user

    def sign_out(self):
        if self.session and self.auth_service:
            self.auth_service.logout_user(self.session.session_token)
        self.user = None
        self.session = None

    def refresh(self, now: Optional[datetime] = None) -> AuthState:
        """Drop to signed out when the session has expired"""
        if self.session is not None and self.auth_service is not None:
            if self.auth_service.validate_session(self.session.session_token, now) is None:
                logger.info("Session expired, signing out")
                self.user = None
                self.session = None
        return self.state

    def _start(self, user: User):
        self.user = user
        self.session = self._service().create_session(user)

    def _service(self) -> AuthService:
        if self.auth_service is None:
            self.auth_service = AuthService()
        return self.auth_service
