import os
from pathlib import Path

import pytest

# Directory name under tests/logistics -> marker applied to every test in it
_LAYER_MARKERS = {
    "domain": "domain",
    "application": "application",
    "integration": "integration",
    "bdd": "bdd",
}


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="PROTEAN_ENV overlay to load from domain.toml",
    )


def pytest_sessionstart(session):
    """Initialize the logistics domain once and keep its context active.

    Tests, route handlers and event handlers all reach the domain through
    ``current_domain``.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env

    import logistics.api  # noqa: F401  -- load the API package before traversal, as app.py does
    from logistics.domain import logistics

    logistics.init()
    logistics.domain_context().push()


def pytest_collection_modifyitems(config, items):
    for item in items:
        parts = Path(item.fspath).parts
        for directory, marker in _LAYER_MARKERS.items():
            if directory in parts:
                item.add_marker(getattr(pytest.mark, marker))
                break
        if "integration" in parts and not any(m.name == "fast" for m in item.iter_markers()):
            item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session", autouse=True)
def logistics_schema():
    from logistics.domain import logistics
    from logistics.utils.db import drop_db, setup_db

    setup_db(logistics)
    yield
    drop_db(logistics)


@pytest.fixture(autouse=True)
def reset_logistics_state():
    """Wipe repositories, the event store and bus subscribers after each test."""
    yield

    from protean import current_domain

    from logistics.signals import reset_bus

    for provider in current_domain.providers.values():
        provider._data_reset()
    current_domain.event_store.store._data_reset()
    reset_bus()
