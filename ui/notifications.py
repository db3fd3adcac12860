"""
User-facing notifications for CulinariaLegacy application.

Turns service errors into short French messages shown as toasts.
"""

from typing import Optional, Tuple

import streamlit as st

from services.errors import ErrorKind, ServiceError
from utils import get_logger

logger = get_logger(__name__)

# Context of the action that failed; only joining a group has its own wording
JOIN_CONTEXT = "join"

_TITLES = {
    ErrorKind.EXPIRED: "Code expiré",
    ErrorKind.UNAUTHORIZED: "Non connecté",
    ErrorKind.INVALID: "Information manquante",
}

_JOIN_TITLES = {
    ErrorKind.NOT_FOUND: "Code invalide",
    ErrorKind.EXPIRED: "Code expiré",
    ErrorKind.ALREADY_EXISTS: "Déjà membre",
}

_JOIN_DESCRIPTIONS = {
    ErrorKind.NOT_FOUND: "Le code d'invitation n'existe pas",
    ErrorKind.EXPIRED: "Cette invitation a expiré",
    ErrorKind.ALREADY_EXISTS: "Vous êtes déjà membre de ce groupe familial",
}

DEFAULT_TITLE = "Erreur"
DEFAULT_DESCRIPTION = "Une erreur est survenue. Veuillez réessayer."


def describe_error(error: Exception, context: Optional[str] = None) -> Tuple[str, str]:
    """(title, description) for an error raised by a page action"""
    if not isinstance(error, ServiceError):
        return DEFAULT_TITLE, DEFAULT_DESCRIPTION

    kind = error.kind
    if context == JOIN_CONTEXT and kind in _JOIN_TITLES:
        return _JOIN_TITLES[kind], _JOIN_DESCRIPTIONS[kind]

    if kind == ErrorKind.UNAUTHORIZED:
        return _TITLES[kind], error.message or "Veuillez vous connecter"

    if kind in _TITLES:
        return _TITLES[kind], error.message or DEFAULT_DESCRIPTION

    return DEFAULT_TITLE, error.message or DEFAULT_DESCRIPTION


def notify_error(error: Exception, context: Optional[str] = None):
    """Log the failure and show it to the user"""
    title, description = describe_error(error, context)
    logger.warning(f"Action failed ({context or 'page'}): {error!r}")
    st.error(f"**{title}** : {description}")


def notify_success(title: str, description: str = ""):
    message = f"{title} : {description}" if description else title
    st.toast(message, icon="✅")


FLASH_KEY = "flash"


def flash(message: str):
    """Queue a success message for the next run, for actions followed by st.rerun()"""
    st.session_state[FLASH_KEY] = message


def show_flash():
    message = st.session_state.pop(FLASH_KEY, None)
    if message:
        st.toast(message, icon="✅")
