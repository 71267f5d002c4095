import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]

TESTS = "tests/logistics"

# psycopg2 ships a compiled extension; a cached wheel can target another interpreter
_REBUILD_PER_INTERPRETER = ["psycopg2-binary"]


def _install(session: nox.Session) -> None:
    session.run("poetry", "install", "--with", "test", "--all-extras", external=True)
    session.run("pip", "install", "--force-reinstall", "--no-cache-dir", *_REBUILD_PER_INTERPRETER)


def _pytest(session: nox.Session, *layers: str) -> None:
    _install(session)
    session.run("pytest", *(f"{TESTS}/{layer}/" for layer in layers), *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Whole logistics suite on every supported interpreter."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Domain model and command handler tests; in-memory adapters only."""
    _pytest(session, "domain", "application")


@nox.session(python=PYTHON_VERSIONS)
def tests_api(session: nox.Session) -> None:
    """HTTP routers through TestClient plus the BDD scenarios."""
    _pytest(session, "integration", "bdd")
