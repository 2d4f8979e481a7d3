"""
Hide product category archives.

Adds a per-category setting that turns a category's archive page into a
301 redirect (to the shop page, or back to the referring page under the
referrer-aware policy) while its products stay reachable elsewhere.
"""

import logging
import re
from typing import Iterable, List, Optional

from flask import Response, g, redirect, render_template, url_for
from markupsafe import Markup
from sqlalchemy.exc import SQLAlchemyError

from hidden_archives.context import RequestContext
from hidden_archives.errors import StorageError
from hidden_archives.extensions import db
from hidden_archives.hooks import HookRegistry
from hidden_archives.models import Category
from hidden_archives.routing import ArchiveRouter
from hidden_archives.security.nonces import NonceManager
from hidden_archives.security.permissions import MANAGE_PRODUCT_TERMS
from hidden_archives.services.flag_store import FlagStore, SweepResult
from hidden_archives.services.redirect_resolver import RedirectPolicy, RedirectResolver
from hidden_archives.utils.urls import add_query_arg

logger = logging.getLogger(__name__)

EXTENSION_KEY = "hidden_archives"

FIELD_NAME = "hpc_hide_archive"
NONCE_KEY = "hpc_hide_archive_nonce"
NONCE_ACTION = "hpc_hide_archive_save"
TOGGLE_ACTION = "hpc_hide_archive_toggle"
COLUMN_KEY = "hpc_hidden_archive"
BULK_HIDE = "hpc_hide_archives"
BULK_UNHIDE = "hpc_unhide_archives"
UPDATED_ARG = "hpc_updated"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def permanent_redirect(location: str) -> Response:
    """301 with a Location header and no body."""
    response = Response(status=301)
    response.headers["Location"] = location
    return response


def toggle_action(category_id: int) -> str:
    return f"{TOGGLE_ACTION}_{category_id}"


def to_int(value) -> int:
    """Leading integer of a query value, 0 when there is none: "3abc" -> 3, "abc" -> 0."""
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


class HiddenArchivesPlugin:
    def __init__(self, store: FlagStore, resolver: RedirectResolver, nonces: NonceManager):
        self.store = store
        self.resolver = resolver
        self.nonces = nonces

    def register(self, hooks: HookRegistry) -> None:
        # Admin UI fields
        hooks.add_action("product_cat_add_form_fields", self.add_term_field)
        hooks.add_action("product_cat_edit_form_fields", self.edit_term_field)

        # Save
        hooks.add_action("created_product_cat", self.save_term_meta)
        hooks.add_action("edited_product_cat", self.save_term_meta)

        # Redirect hidden archives
        hooks.add_action("template_redirect", self.maybe_redirect_hidden_archive, priority=1)

        # Plugins page Settings link
        hooks.add_filter("plugin_action_links", self.plugin_action_links)

        # Categories list column + toggle + bulk actions
        hooks.add_filter("manage_edit-product_cat_columns", self.add_admin_column)
        hooks.add_action("product_cat_list_rows", self.load_column_flags)
        hooks.add_filter("manage_product_cat_custom_column", self.render_admin_column)
        hooks.add_action("admin_init", self.handle_admin_toggle)
        hooks.add_filter("bulk_actions-edit-product_cat", self.register_bulk_actions)
        hooks.add_filter("handle_bulk_actions-edit-product_cat", self.handle_bulk_actions)

    # Term fields

    def add_term_field(self, ctx: RequestContext) -> Markup:
        return Markup(render_template(
            "hidden_archives/add_term_field.html",
            field_name=FIELD_NAME,
            nonce_key=NONCE_KEY,
            nonce=self.nonces.create(NONCE_ACTION, ctx.actor.user_id),
        ))

    def edit_term_field(self, category: Category, taxonomy: str, ctx: RequestContext) -> Markup:
        return Markup(render_template(
            "hidden_archives/edit_term_field.html",
            field_name=FIELD_NAME,
            checked=self.store.get(category.id),
            nonce_key=NONCE_KEY,
            nonce=self.nonces.create(NONCE_ACTION, ctx.actor.user_id),
        ))

    def save_term_meta(self, term_id: int, ctx: RequestContext) -> None:
        if not ctx.actor.can(MANAGE_PRODUCT_TERMS):
            logger.warning("Archive flag not saved: missing capability", extra={"category_id": term_id})
            return

        if not self.nonces.verify(ctx.form.get(NONCE_KEY), NONCE_ACTION, ctx.actor.user_id):
            logger.warning("Archive flag not saved: invalid token", extra={"category_id": term_id})
            return

        self.store.set(term_id, FIELD_NAME in ctx.form)

    # Frontend redirect

    def maybe_redirect_hidden_archive(self, ctx: RequestContext) -> Optional[Response]:
        decision = self.resolver.resolve(ctx)
        if not decision.should_redirect:
            return None

        logger.info(
            f"Redirecting hidden category archive {ctx.path} -> {decision.destination}",
            extra={"category_id": decision.category_id, "destination": decision.destination},
        )
        return permanent_redirect(decision.destination)

    # Plugins page "Settings" link

    def plugin_action_links(self, links: List[dict]) -> List[dict]:
        return [{"label": "Settings", "url": url_for("admin.categories")}] + list(links)

    # Admin column + quick toggle

    def add_admin_column(self, columns: dict) -> dict:
        columns = dict(columns)
        columns[COLUMN_KEY] = "Hidden archive"
        return columns

    def load_column_flags(self, term_ids: Iterable[int], ctx: RequestContext) -> None:
        """Read the flags of every listed category in one query."""
        term_ids = list(term_ids)
        hidden = self.store.hidden_ids(term_ids)
        g.hpc_column_flags = {term_id: term_id in hidden for term_id in term_ids}

    def render_admin_column(self, content, column_name: str, term_id: int, ctx: RequestContext):
        if column_name != COLUMN_KEY:
            return content

        flags = g.get("hpc_column_flags") or {}
        hidden = flags[term_id] if term_id in flags else self.store.get(term_id)
        toggle_url = url_for(
            "admin.categories",
            action="toggle",
            entity_id=term_id,
            new_value=0 if hidden else 1,
            _token=self.nonces.create(toggle_action(term_id), ctx.actor.user_id),
        )
        return Markup(render_template(
            "hidden_archives/admin_column.html",
            hidden=hidden,
            toggle_url=toggle_url,
        ))

    def handle_admin_toggle(self, ctx: RequestContext) -> Optional[Response]:
        if not ctx.is_admin:
            return None

        args = ctx.args
        if args.get("action") != "toggle" or "entity_id" not in args or "new_value" not in args:
            return None

        if not ctx.actor.can(MANAGE_PRODUCT_TERMS):
            logger.warning("Archive toggle ignored: missing capability")
            return None

        term_id = abs(to_int(args["entity_id"]))
        new_value = to_int(args["new_value"])

        if not self.nonces.verify(args.get("_token"), toggle_action(term_id), ctx.actor.user_id):
            logger.warning("Archive toggle ignored: invalid token", extra={"category_id": term_id})
            return None

        if db.session.get(Category, term_id) is None:
            return None

        self.store.set(term_id, bool(new_value))

        # Back to categories list (clean URL)
        return redirect(url_for("admin.categories"))

    # Bulk actions

    def register_bulk_actions(self, actions: dict) -> dict:
        actions = dict(actions)
        actions[BULK_HIDE] = "Hide archives"
        actions[BULK_UNHIDE] = "Unhide archives"
        return actions

    def handle_bulk_actions(self, redirect_to: str, action: str, ids: Iterable[int], ctx: RequestContext) -> str:
        if action not in (BULK_HIDE, BULK_UNHIDE):
            return redirect_to

        if not ctx.actor.can(MANAGE_PRODUCT_TERMS):
            logger.warning("Bulk archive update ignored: missing capability")
            return redirect_to

        updated = self.bulk_update(ids, action == BULK_HIDE)
        return add_query_arg(redirect_to, **{UPDATED_ARG: updated})

    def bulk_update(self, ids: Iterable[int], hidden: bool) -> int:
        """Set the flag on every existing category in ``ids``; returns how many changed."""
        wanted = list(dict.fromkeys(int(term_id) for term_id in ids))
        known = Category.existing_ids(wanted)
        updated = 0
        for term_id in wanted:
            if term_id not in known:
                continue
            try:
                self.store.set(term_id, hidden)
            except StorageError as exc:
                logger.error(f"Bulk archive update failed for category {term_id}: {exc}")
                continue
            updated += 1
        return updated

    # Uninstall

    def uninstall(self) -> SweepResult:
        """Delete the stored flag of every product category."""
        try:
            term_ids = Category.ids_in_taxonomy()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StorageError("Could not enumerate product categories") from exc

        result = self.store.delete_all(term_ids)
        logger.info(
            f"Uninstall sweep removed {result.removed} archive flags",
            extra={"categories": len(term_ids), "failed": result.failed},
        )
        return result


def lookup_category_id(slug: str) -> Optional[int]:
    category = Category.find_by_slug(slug)
    return category.id if category else None


def init_app(app, hooks: HookRegistry, nonces: NonceManager) -> HiddenArchivesPlugin:
    store = FlagStore(db.session)
    resolver = RedirectResolver(
        store=store,
        router=ArchiveRouter(app.url_map, lookup_category_id),
        policy=RedirectPolicy.from_config(app.config.get("HPC_REDIRECT_POLICY", "always_fallback")),
        fallback_path=app.config.get("HPC_SHOP_PAGE_PATH", "/shop/"),
        allowed_hosts=app.config.get("ALLOWED_REDIRECT_HOSTS", ()),
    )
    plugin = HiddenArchivesPlugin(store, resolver, nonces)
    plugin.register(hooks)
    app.extensions[EXTENSION_KEY] = plugin
    logger.info(f"Hidden archives plugin registered (policy={resolver.policy.value})")
    return plugin


def get_plugin(app) -> HiddenArchivesPlugin:
    return app.extensions[EXTENSION_KEY]
