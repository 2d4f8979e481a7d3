from flask import Blueprint, abort, current_app, g, jsonify, redirect, render_template, request, url_for
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request
from markupsafe import Markup

from hidden_archives.context import Actor, RequestContext
from hidden_archives.extensions import db
from hidden_archives.models import TAXONOMY, Category, slugify
from hidden_archives.security.permissions import MANAGE_PRODUCT_TERMS

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")

BULK_TOKEN_ACTION = "bulk-categories"
UPDATED_ARG = "hpc_updated"

BUILTIN_COLUMNS = {
    "name": "Name",
    "slug": "Slug",
    "description": "Description",
}


def _hooks():
    return current_app.extensions["hooks"]


def _nonces():
    return current_app.extensions["nonces"]


def _context() -> RequestContext:
    return g.request_context


def _require_capability():
    if not _context().actor.can(MANAGE_PRODUCT_TERMS):
        abort(403, "You are not allowed to manage product categories")


@admin_bp.before_request
def admin_init():
    """
    Authenticate the actor, refuse actors who cannot manage product
    categories, then give admin_init handlers the chance to answer the
    request.
    """
    verify_jwt_in_request()
    actor = Actor(user_id=str(get_jwt_identity()), role=get_jwt().get("role"))
    g.request_context = RequestContext.from_request(request, actor=actor)
    _require_capability()
    return _hooks().dispatch_until("admin_init", g.request_context)


@admin_bp.route("/categories", methods=["GET"])
def categories():
    """Category list with plugin columns and bulk actions"""
    ctx = _context()
    hooks = _hooks()

    columns = hooks.apply_filters("manage_edit-product_cat_columns", dict(BUILTIN_COLUMNS))
    bulk_actions = hooks.apply_filters("bulk_actions-edit-product_cat", {})

    listed = Category.query.filter_by(taxonomy=TAXONOMY).order_by(Category.name).all()
    hooks.do_action("product_cat_list_rows", [category.id for category in listed], ctx)

    rows = []
    for category in listed:
        cells = {}
        for key in columns:
            if key in BUILTIN_COLUMNS:
                cells[key] = getattr(category, key) or ""
            else:
                cells[key] = hooks.apply_filters("manage_product_cat_custom_column", "", key, category.id, ctx)
        rows.append({"id": category.id, "cells": cells})

    notice = None
    updated = request.args.get(UPDATED_ARG, type=int)
    if updated is not None:
        notice = f"{updated} category archive{'s' if updated != 1 else ''} updated."

    return render_template(
        "admin/categories.html",
        columns=columns,
        rows=rows,
        bulk_actions=bulk_actions,
        bulk_token=_nonces().create(BULK_TOKEN_ACTION, ctx.actor.user_id),
        notice=notice,
    )


@admin_bp.route("/categories/new", methods=["GET"])
def new_category():
    ctx = _context()
    extra = _hooks().collect("product_cat_add_form_fields", ctx)
    return render_template(
        "admin/category_form.html",
        category=None,
        action=url_for("admin.create_category"),
        extra_fields=Markup("").join(extra),
    )


@admin_bp.route("/categories", methods=["POST"])
def create_category():
    name = (request.form.get("name") or "").strip()
    if not name:
        abort(400, "Category name is required")

    slug = slugify(request.form.get("slug") or name)
    if not slug or Category.find_by_slug(slug):
        abort(409, f"A category with slug '{slug}' already exists")

    category = Category(name=name, slug=slug, description=request.form.get("description", ""))
    db.session.add(category)
    db.session.commit()

    _hooks().do_action("created_product_cat", category.id, _context())
    return redirect(url_for("admin.categories"))


@admin_bp.route("/categories/<int:category_id>/edit", methods=["GET"])
def edit_category(category_id):
    category = db.get_or_404(Category, category_id)
    extra = _hooks().collect("product_cat_edit_form_fields", category, TAXONOMY, _context())
    return render_template(
        "admin/category_form.html",
        category=category,
        action=url_for("admin.update_category", category_id=category.id),
        extra_fields=Markup("").join(extra),
    )


@admin_bp.route("/categories/<int:category_id>", methods=["POST"])
def update_category(category_id):
    category = db.get_or_404(Category, category_id)

    name = (request.form.get("name") or "").strip()
    if name:
        category.name = name
    if request.form.get("slug"):
        slug = slugify(request.form["slug"])
        existing = Category.find_by_slug(slug)
        if not slug or (existing and existing.id != category.id):
            abort(409, f"A category with slug '{slug}' already exists")
        category.slug = slug
    if "description" in request.form:
        category.description = request.form["description"]
    db.session.commit()

    _hooks().do_action("edited_product_cat", category.id, _context())
    return redirect(url_for("admin.categories"))


@admin_bp.route("/categories/bulk", methods=["POST"])
def bulk_categories():
    """Dispatch a bulk action over the checked categories"""
    ctx = _context()
    if not _nonces().verify(request.form.get("_token"), BULK_TOKEN_ACTION, ctx.actor.user_id):
        abort(403, "The link you followed has expired")

    action = request.form.get("action", "")
    ids = request.form.getlist("ids", type=int)
    sendback = url_for("admin.categories")
    sendback = _hooks().apply_filters("handle_bulk_actions-edit-product_cat", sendback, action, ids, ctx)
    return redirect(sendback)


@admin_bp.route("/plugins", methods=["GET"])
def plugins():
    """Installed plugins and their action links"""
    links = _hooks().apply_filters("plugin_action_links", [])
    return jsonify({
        "status": "success",
        "data": [{
            "name": "Hide Product Category Archives",
            "version": current_app.config.get("APP_VERSION"),
            "links": links,
        }],
    }), 200
