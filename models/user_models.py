"""
User and session models for the CulinariaLegacy application.

Handles user accounts, login sessions and the signed-in/signed-out state
that every workflow call receives.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class AuthState(Enum):
    """Lifecycle of an authentication context"""
    SIGNED_OUT = "signed_out"
    SIGNED_IN = "signed_in"


@dataclass
class User:
    """User model for authentication and account management."""
    id: str
    email: str
    password_hash: str
    full_name: str = ""
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.now)
    last_login: Optional[datetime] = None

    def get_display_name(self) -> str:
        """Get user's display name"""
        if self.full_name:
            return self.full_name
        return self.email.split('@')[0]


@dataclass
class UserSession:
    """Session data for logged-in users"""
    user_id: str
    email: str
    session_token: str
    created_at: datetime = field(default_factory=datetime.now)
    expires_at: Optional[datetime] = None
    last_activity: datetime = field(default_factory=datetime.now)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if session has expired"""
        if not self.expires_at:
            return False
        return (now or datetime.now()) > self.expires_at

    def refresh_activity(self):
        """Update last activity timestamp"""
        self.last_activity = datetime.now()
