"""
Family page for CulinariaLegacy application.

Lists the family recipe books the user belongs to with their member and
recipe counts, and hosts the create / join / invite workflows.
"""

import streamlit as st
from datetime import datetime
from typing import Optional

from models import FamilyGroupSummary, ROLE_ADMIN
from services import AuthContext, FamilyService, ServiceError, get_family_service
from utils import get_logger
from .notifications import notify_error, flash, JOIN_CONTEXT
from .routes import recipe_path

logger = get_logger(__name__)


class FamilyInterface:
    """
    Family recipe books: listing, creation, joining with a code and
    invite management for group admins.
    """

    def __init__(self, family_service: Optional[FamilyService] = None):
        self.family_service = family_service or get_family_service()

        # Session state keys
        self.SEARCH_KEY = "family_search"
        self.LAST_INVITE_KEY = "family_last_invite"

    def render_family_page(self, ctx: AuthContext) -> None:
        st.title("👪 Livres de recettes familiaux")
        st.markdown("*Partagez vos recettes avec ceux qui comptent*")

        tab1, tab2, tab3 = st.tabs(["📖 Mes familles", "➕ Créer", "🔑 Rejoindre"])

        with tab1:
            self._render_group_list(ctx)

        with tab2:
            self._render_create_form(ctx)

        with tab3:
            self._render_join_form(ctx)

    def _render_group_list(self, ctx: AuthContext) -> None:
        search = st.text_input("🔍 Rechercher une famille", key=self.SEARCH_KEY)
        try:
            groups = self.family_service.list_user_groups(ctx, search)
        except ServiceError as e:
            notify_error(e, "family")
            return

        if not groups:
            if search:
                st.info("Aucune famille ne correspond à votre recherche.")
            else:
                st.info("Vous ne faites partie d'aucune famille. Créez-en une ou rejoignez-en une avec un code.")
            return

        for summary in groups:
            self._render_group_card(ctx, summary)

    def _render_group_card(self, ctx: AuthContext, summary: FamilyGroupSummary) -> None:
        with st.container(border=True):
            col1, col2, col3 = st.columns([3, 1, 1])
            with col1:
                badge = " 👑" if summary.role == ROLE_ADMIN else ""
                st.markdown(f"### {summary.name}{badge}")
                if summary.group.description:
                    st.markdown(f"*{summary.group.description}*")
            with col2:
                st.metric("Membres", summary.member_count)
            with col3:
                st.metric("Recettes", summary.recipe_count)

            with st.expander("Voir les recettes"):
                self._render_group_recipes(ctx, summary)

            if summary.role == ROLE_ADMIN:
                with st.expander("✉️ Invitations"):
                    self._render_invites(ctx, summary)

    def _render_group_recipes(self, ctx: AuthContext, summary: FamilyGroupSummary) -> None:
        try:
            recipes = self.family_service.get_group_recipes(ctx, summary.id)
        except ServiceError as e:
            notify_error(e, "family")
            return

        if not recipes:
            st.caption("Aucune recette partagée pour le moment.")
            return

        for recipe in recipes:
            if st.button(f"📄 {recipe.title}", key=f"group_{summary.id}_recipe_{recipe.id}"):
                st.query_params["page"] = recipe_path(recipe.id)
                st.rerun()

    def _render_invites(self, ctx: AuthContext, summary: FamilyGroupSummary) -> None:
        invite_key = f"{self.LAST_INVITE_KEY}_{summary.id}"
        if st.button("Générer un code d'invitation", key=f"invite_{summary.id}"):
            try:
                invite = self.family_service.generate_invite(ctx, summary.id)
            except ServiceError as e:
                notify_error(e, "invite")
            else:
                st.session_state[invite_key] = invite.code

        if st.session_state.get(invite_key):
            st.success("Partagez ce code avec votre famille :")
            st.code(st.session_state[invite_key])

        try:
            invites = self.family_service.list_invites(ctx, summary.id)
        except ServiceError as e:
            notify_error(e, "invite")
            return

        now = datetime.now()
        for invite in invites:
            col1, col2 = st.columns([3, 1])
            with col1:
                if invite.is_expired(now):
                    status = "expiré"
                elif invite.expiry_date:
                    status = f"valide jusqu'au {invite.expiry_date.strftime('%d/%m/%Y')}"
                else:
                    status = "sans expiration"
                st.write(f"`{invite.code}` · {status}")
            with col2:
                if st.button("Révoquer", key=f"revoke_{invite.id}"):
                    try:
                        self.family_service.revoke_invite(ctx, invite.id)
                    except ServiceError as e:
                        notify_error(e, "invite")
                        return
                    if st.session_state.get(invite_key) == invite.code:
                        st.session_state.pop(invite_key, None)
                    flash(f"Invitation {invite.code} révoquée")
                    st.rerun()

    def _render_create_form(self, ctx: AuthContext) -> None:
        with st.form("create_family_form", clear_on_submit=True):
            name = st.text_input("Nom du livre de famille *", placeholder="Ex. : Famille Martin")
            description = st.text_area("Description")

            if st.form_submit_button("Créer", type="primary"):
                try:
                    group = self.family_service.create_group(ctx, name, description)
                except ServiceError as e:
                    notify_error(e, "create_group")
                    return
                flash(f"Livre de famille créé : {group.name}")
                st.rerun()

    def _render_join_form(self, ctx: AuthContext) -> None:
        with st.form("join_family_form", clear_on_submit=True):
            code = st.text_input("Code d'invitation", placeholder="Ex. : AB12CD34")

            if st.form_submit_button("Rejoindre", type="primary"):
                try:
                    self.family_service.redeem_invite(ctx, code)
                except ServiceError as e:
                    notify_error(e, JOIN_CONTEXT)
                    return
                flash("Bienvenue ! Vous avez rejoint le livre de famille")
                st.rerun()


def create_family_interface(family_service: Optional[FamilyService] = None) -> FamilyInterface:
    """Factory function to create family interface"""
    return FamilyInterface(family_service)
