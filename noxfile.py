import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]


def _install(session: nox.Session, *extras: str) -> None:
    """Install the project with the given extras into the nox virtualenv."""
    session.install("-e", f".[{','.join(('test', *extras))}]")


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run full test suite across Python versions."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Run service-level tests only (no HTTP layer)."""
    _install(session)
    session.run("pytest", "-m", "domain and not slow")


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_concurrency(session: nox.Session) -> None:
    """Run the cart/checkout race tests on their own."""
    _install(session)
    session.run("pytest", "-m", "slow", "-v")


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_postgresql(session: nox.Session) -> None:
    """Run the suite against PostgreSQL (needs SHOPCART_TEST_DATABASE_URL)."""
    _install(session, "postgresql")
    session.run("pytest", *session.posargs)
