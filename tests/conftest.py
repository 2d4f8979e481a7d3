import pytest
from faker import Faker
from flask_jwt_extended import create_access_token

from hidden_archives import create_app
from hidden_archives.extensions import db
from hidden_archives.models import Category, slugify
from hidden_archives.plugin import get_plugin

# Initialize Faker for generating test data
fake = Faker()


# Custom pytest marks for organizing tests
def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "db: mark test as database-intensive"
    )
    config.addinivalue_line(
        "markers",
        "redirect: mark test as exercising the archive redirect"
    )
    config.addinivalue_line(
        "markers",
        "cli: mark test as a command-line test"
    )


def build_app(**overrides):
    """Testing app with a fresh in-memory database, pushed app context."""
    app = create_app("testing", overrides=overrides or None)
    ctx = app.app_context()
    ctx.push()
    db.create_all()
    return app, ctx


def teardown_app(ctx):
    db.session.remove()
    db.drop_all()
    ctx.pop()


@pytest.fixture()
def app():
    """Create application for testing"""
    app, ctx = build_app()
    yield app
    teardown_app(ctx)


@pytest.fixture()
def make_app():
    """Build extra apps with config overrides; torn down after the test"""
    contexts = []

    def _make(**overrides):
        app, ctx = build_app(**overrides)
        contexts.append(ctx)
        return app

    yield _make
    for ctx in reversed(contexts):
        teardown_app(ctx)


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def runner(app):
    return app.test_cli_runner()


@pytest.fixture()
def plugin(app):
    return get_plugin(app)


@pytest.fixture()
def store(plugin):
    return plugin.store


@pytest.fixture()
def nonces(app):
    return app.extensions["nonces"]


@pytest.fixture()
def make_category(app):
    """Factory for persisted product categories"""

    def _make(name=None, slug=None, description=""):
        name = name or f"{fake.unique.word().title()} Range"
        category = Category(name=name, slug=slug or slugify(name), description=description)
        db.session.add(category)
        db.session.commit()
        return category

    return _make


@pytest.fixture()
def dekit(make_category):
    return make_category("DE Kit", "dekit", "Diatomaceous earth starter kits")


@pytest.fixture()
def token_for(app):
    """Mint an access token for an actor with the given role"""

    def _token(user_id="1", role="shop_manager"):
        return create_access_token(identity=str(user_id), additional_claims={"role": role})

    return _token


@pytest.fixture()
def auth_headers(token_for):
    return {"Authorization": f"Bearer {token_for('1', 'administrator')}"}


@pytest.fixture()
def customer_headers(token_for):
    return {"Authorization": f"Bearer {token_for('42', 'customer')}"}
