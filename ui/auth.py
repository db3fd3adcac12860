"""
User authentication UI for CulinariaLegacy application.

Provides the sign-in and sign-up forms and keeps the AuthContext in
Streamlit session state so every page hands the same context to services.
"""

import streamlit as st
from typing import Optional

from models import User
from services import AuthService, AuthContext, ServiceError
from utils import get_logger
from .notifications import notify_error, flash

logger = get_logger(__name__)


class AuthenticationInterface:
    """
    User authentication interface.

    Renders login/registration forms and owns the session's AuthContext.
    """

    def __init__(self, auth_service: Optional[AuthService] = None):
        self.auth = auth_service or AuthService()

        # Session state keys
        self.CONTEXT_KEY = "auth_context"
        self.AUTH_TAB_KEY = "auth_tab"

    def get_context(self) -> AuthContext:
        """The session's auth context, created signed out on first use"""
        if self.CONTEXT_KEY not in st.session_state:
            st.session_state[self.CONTEXT_KEY] = AuthContext(auth_service=self.auth)

        ctx = st.session_state[self.CONTEXT_KEY]
        ctx.refresh()
        return ctx

    def get_current_user(self) -> Optional[User]:
        return self.get_context().user

    def logout(self):
        """Logout current user and clear session"""
        self.get_context().sign_out()
        logger.info("User logged out")

    def require_auth(self) -> Optional[User]:
        """Current user, or a sign-in prompt that stops the page"""
        user = self.get_current_user()
        if not user:
            st.warning("🔒 Veuillez vous connecter pour accéder à cette page.")
            if st.button("🔑 Se connecter", key="require_auth_login"):
                st.query_params["page"] = "/auth"
                st.rerun()
            st.stop()
        return user

    def render_auth_sidebar(self) -> Optional[User]:
        """Account block in the sidebar"""
        user = self.get_current_user()

        if user:
            st.sidebar.markdown("### 👤 Compte")
            st.sidebar.write(f"**{user.get_display_name()}**")
            st.sidebar.caption(user.email)
            if st.sidebar.button("🚪 Se déconnecter"):
                self.logout()
                st.rerun()
        else:
            st.sidebar.markdown("### 🔑 Compte")
            if st.sidebar.button("Se connecter / S'inscrire"):
                st.query_params["page"] = "/auth"
                st.rerun()

        return user

    def render_auth_page(self) -> Optional[User]:
        """Full sign-in / sign-up page"""
        st.title("🔐 Bienvenue sur CulinariaLegacy")
        st.markdown("*Préservez et partagez les recettes de votre famille*")

        user = self.get_current_user()
        if user:
            st.success(f"✅ Connecté en tant que {user.get_display_name()}")
            if st.button("🚪 Se déconnecter"):
                self.logout()
                st.rerun()
            return user

        tab1, tab2 = st.tabs(["🔑 Connexion", "📝 Inscription"])

        with tab1:
            self._render_login_form()

        with tab2:
            self._render_registration_form()

        return None

    def _render_login_form(self):
        """Render main login form"""
        with st.form("login_form"):
            email = st.text_input("📧 Adresse e-mail", placeholder="vous@exemple.com")
            password = st.text_input("🔒 Mot de passe", type="password")

            if st.form_submit_button("Se connecter", type="primary"):
                if not email or not password:
                    st.error("Veuillez saisir votre e-mail et votre mot de passe.")
                    return

                try:
                    user = self.get_context().sign_in(email, password)
                except ServiceError as e:
                    notify_error(e, "login")
                    return

                flash(f"Bon retour, {user.get_display_name()} !")
                st.query_params["page"] = "/"
                st.rerun()

    def _render_registration_form(self):
        """Render user registration form"""
        with st.form("registration_form"):
            full_name = st.text_input("Nom complet")
            email = st.text_input("📧 Adresse e-mail", placeholder="vous@exemple.com")
            password = st.text_input("🔒 Mot de passe", type="password",
                                     help=f"Au moins {self.auth.password_min_length} caractères, "
                                          "avec majuscule, minuscule et chiffre")
            confirm_password = st.text_input("🔒 Confirmer le mot de passe", type="password")

            if st.form_submit_button("Créer mon compte", type="primary"):
                if password != confirm_password:
                    st.error("Les mots de passe ne correspondent pas.")
                    return

                try:
                    user = self.get_context().sign_up(email, password, full_name)
                except ServiceError as e:
                    notify_error(e, "register")
                    return

                flash(f"Bienvenue, {user.get_display_name()} !")
                st.query_params["page"] = "/"
                st.rerun()


def create_auth_interface(auth_service: Optional[AuthService] = None) -> AuthenticationInterface:
    """Factory function to create authentication interface"""
    return AuthenticationInterface(auth_service)
