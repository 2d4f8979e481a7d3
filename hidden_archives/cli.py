"""
``flask hpc`` commands: hide|unhide|status|list|uninstall.

    flask hpc hide dekit
    flask hpc unhide dekit
    flask hpc status dekit
    flask hpc list
"""

import click
from flask import current_app
from flask.cli import AppGroup

from hidden_archives.errors import CategoryNotFound, StorageError
from hidden_archives.models import Category
from hidden_archives.plugin import get_plugin

hpc_cli = AppGroup("hpc", help="Manage hidden product category archives.")


def _category_or_fail(slug):
    category = Category.find_by_slug(slug)
    if category is None:
        raise click.ClickException(str(CategoryNotFound(slug)))
    return category


def _success(message):
    click.echo(f"Success: {message}")


def _status_line(category, hidden):
    return f"{category.name} ({category.slug}) => hidden_archive={'yes' if hidden else 'no'}"


def _set_hidden(slug, hidden):
    category = _category_or_fail(slug)
    try:
        get_plugin(current_app).store.set(category.id, hidden)
    except StorageError as exc:
        raise click.ClickException(str(exc)) from exc
    _success(_status_line(category, hidden))


@hpc_cli.command("hide")
@click.argument("slug")
def hide(slug):
    """Hide a product category archive (redirect to Shop)."""
    _set_hidden(slug, True)


@hpc_cli.command("unhide")
@click.argument("slug")
def unhide(slug):
    """Unhide a product category archive."""
    _set_hidden(slug, False)


@hpc_cli.command("status")
@click.argument("slug")
def status(slug):
    """Show hidden status for a product category slug."""
    category = _category_or_fail(slug)
    try:
        hidden = get_plugin(current_app).store.get(category.id)
    except StorageError as exc:
        raise click.ClickException(str(exc)) from exc
    _success(_status_line(category, hidden))


def format_table(rows, fields):
    widths = {name: max([len(name)] + [len(str(row[name])) for row in rows]) for name in fields}
    border = "+" + "+".join("-" * (widths[name] + 2) for name in fields) + "+"
    lines = [border, "| " + " | ".join(name.ljust(widths[name]) for name in fields) + " |", border]
    for row in rows:
        lines.append("| " + " | ".join(str(row[name]).ljust(widths[name]) for name in fields) + " |")
    lines.append(border)
    return "\n".join(lines)


@hpc_cli.command("list")
def list_hidden():
    """List all hidden product category archives."""
    try:
        hidden = get_plugin(current_app).store.hidden_ids()
    except StorageError as exc:
        raise click.ClickException(str(exc)) from exc

    categories = []
    if hidden:
        categories = Category.query.filter(Category.id.in_(hidden)).order_by(Category.id).all()

    if not categories:
        _success("No hidden category archives found.")
        return

    rows = [{"id": c.id, "slug": c.slug, "name": c.name} for c in categories]
    click.echo(format_table(rows, ["id", "slug", "name"]))


@hpc_cli.command("uninstall")
@click.confirmation_option(prompt="Delete the hidden-archive flag of every product category?")
def uninstall():
    """Remove every stored hidden-archive flag."""
    try:
        result = get_plugin(current_app).uninstall()
    except StorageError as exc:
        raise click.ClickException(str(exc)) from exc

    if result.failed:
        failed = ", ".join(str(term_id) for term_id in result.failed)
        raise click.ClickException(
            f"Removed {result.removed} flags; could not remove flags for categories: {failed}"
        )
    _success(f"Removed {result.removed} hidden archive flags.")
