# noxfile.py
from nox_poetry import Session, session

PY_VERSIONS = ["3.11", "3.12"]
TARGETS = ["src", "tests", "noxfile.py"]


@session(python=PY_VERSIONS[0])
def format(session: Session) -> None:
    """Rewrite imports and layout in place."""
    session.install("black", "isort")
    session.run("isort", *TARGETS)
    session.run("black", *TARGETS)


@session(python=PY_VERSIONS[0])
def lint(session: Session) -> None:
    session.install("ruff", "black", "isort")
    session.run("ruff", "check", *TARGETS)
    session.run("isort", "--check-only", *TARGETS)
    session.run("black", "--check", *TARGETS)


@session(python=PY_VERSIONS[0])
def typecheck_mypy(session: Session) -> None:
    session.install("mypy", "pytest", "pandas-stubs~=2.2")
    session.install(".")
    session.run("mypy", "--config-file", "pyproject.toml")


@session(python=PY_VERSIONS)
def tests(session: Session) -> None:
    """Constraint, engine and reporting suites against the installed package."""
    session.install(".", "pytest")
    session.run("pytest", *session.posargs)
