"""Management script for the database and local admin tokens"""

from datetime import timedelta

import click
from flask.cli import FlaskGroup, with_appcontext
from flask_jwt_extended import create_access_token

from hidden_archives import create_app
from hidden_archives.extensions import db
from hidden_archives.models import Category, slugify
from hidden_archives.security.permissions import ROLE_CAPABILITIES

cli = FlaskGroup(create_app=create_app)

SAMPLE_CATEGORIES = [
    ("DE Kit", "dekit", "Diatomaceous earth starter kits"),
    ("Filters", "filters", "Replacement filters"),
    ("Accessories", "accessories", "Hoses, clamps and fittings"),
    ("Clearance", "clearance", "Discontinued items"),
    ("Gift Cards", "gift-cards", "Store gift cards"),
]


@cli.command("init-db")
@with_appcontext
def init_db():
    """Initialize the database"""
    db.create_all()
    print("✅ Database initialized successfully!")


@cli.command("drop-db")
@with_appcontext
def drop_db():
    """Drop all database tables"""
    confirmation = input("⚠️  Are you sure you want to drop all tables? (yes/no): ").lower()

    if confirmation == "yes":
        db.drop_all()
        print("✅ Database dropped successfully!")
    else:
        print("❌ Operation cancelled.")


@cli.command("seed-db")
@with_appcontext
def seed_db():
    """Seed the database with sample product categories"""
    created = 0
    for name, slug, description in SAMPLE_CATEGORIES:
        if Category.find_by_slug(slug):
            continue
        db.session.add(Category(name=name, slug=slugify(slug), description=description))
        created += 1

    db.session.commit()
    if created:
        print(f"✅ {created} sample categories created.")
    else:
        print("⚠️  Sample categories already exist. Skipping.")


@cli.command("issue-token")
@click.option("--user-id", required=True, help="Identity stored in the token subject")
@click.option("--role", default="shop_manager", type=click.Choice(sorted(ROLE_CAPABILITIES)), show_default=True)
@click.option("--hours", default=8, show_default=True, help="Token lifetime in hours")
@with_appcontext
def issue_token(user_id, role, hours):
    """Mint an admin access token for local use"""
    token = create_access_token(
        identity=str(user_id),
        additional_claims={"role": role},
        expires_delta=timedelta(hours=hours),
    )
    print(token)


if __name__ == "__main__":
    cli()
