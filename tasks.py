"""Invoke tasks for building, testing, and running thumbtree through uv."""

from __future__ import annotations

import shlex
import shutil
from collections.abc import Sequence
from pathlib import Path

from invoke import Collection, Context, task

PROJECT_ROOT = Path(__file__).parent
DIST_DIR = PROJECT_ROOT / "dist"


def _uv(ctx: Context, args: Sequence[str], *, echo: bool = True) -> None:
    """Run ``uv`` with ``args`` from the project root."""
    with ctx.cd(str(PROJECT_ROOT)):
        ctx.run(shlex.join(("uv", *args)), echo=echo, pty=True)


@task(help={"dev": "Install the dev extra (pytest, ruff, mypy)."})
def sync(ctx: Context, dev: bool = True) -> None:
    """Synchronize the virtual environment with pyproject.toml."""
    args = ["sync"]
    if dev:
        args.extend(["--extra", "dev"])
    _uv(ctx, args)


@task(help={"clean": "Remove existing artifacts from dist/ before building."})
def build(ctx: Context, clean: bool = False) -> None:
    """Build the sdist and wheel into ``dist/``."""
    if clean and DIST_DIR.exists():
        shutil.rmtree(DIST_DIR)
    _uv(ctx, ["build"])


@task(
    help={
        "k": "pytest -k expression for test selection.",
        "path": "Path or module to test (defaults to tests/).",
        "options": "Additional flags forwarded verbatim to pytest.",
    }
)
def tests(ctx: Context, k: str = "", path: str = "tests", options: str = "") -> None:
    """Run the pytest suite, including the doctests in the imaging package."""
    args: list[str] = ["run", "pytest"]
    if k:
        args.extend(["-k", k])
    if options:
        args.extend(shlex.split(options))
    args.append(path)
    _uv(ctx, args)
    if not k and path == "tests":
        _uv(ctx, ["run", "pytest", "--doctest-modules", "src/thumbtree/imaging"])


@task(help={"fix": "Apply ruff auto-fixes where possible."})
def lint(ctx: Context, fix: bool = False) -> None:
    """Check formatting and lint rules with ruff."""
    _uv(ctx, ["run", "ruff", "format", "--check", "src", "tests", "tasks.py"])
    args = ["run", "ruff", "check", "src", "tests", "tasks.py"]
    if fix:
        args.append("--fix")
    _uv(ctx, args)


@task
def mypy(ctx: Context) -> None:
    """Type-check the package."""
    _uv(ctx, ["run", "mypy", "src"])


@task(
    help={
        "inpath": "Photo collection to process.",
        "outpath": "Directory receiving thumbnails and manifests.",
        "no_thumbs": "Only refresh manifests.",
    }
)
def generate(ctx: Context, inpath: str, outpath: str, no_thumbs: bool = False) -> None:
    """Run ``thumbtree generate`` from the project environment."""
    args = ["run", "thumbtree", "generate", inpath, outpath]
    if no_thumbs:
        args.append("--no-thumbs")
    _uv(ctx, args)


@task
def ci(ctx: Context) -> None:
    """Run lint, type checks, and tests in the order CI does."""
    lint(ctx)
    mypy(ctx)
    tests(ctx)


namespace = Collection(sync, build, tests, lint, mypy, generate, ci)
