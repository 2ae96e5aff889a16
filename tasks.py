from invoke import task


@task
def lint(c):
    c.run("ruff check src tests tasks.py")


@task
def fmt(c):
    c.run("ruff format src tests tasks.py")
    c.run("ruff check --fix src tests tasks.py")


@task
def format_check(c):
    c.run("ruff format --check src tests tasks.py")


@task(help={"keyword": "Only run tests matching this expression"})
def test(c, keyword=None):
    cmd = "pytest"
    if keyword:
        cmd += f" -k {keyword!r}"
    c.run(cmd)


@task
def smoke(c):
    """Populate the catalog from the built-in listing and print it."""
    c.run("playground-pricing refresh-models --dry-run")
    c.run("playground-pricing models")


@task
def seed(c):
    c.run("python scripts/seed_demo_sessions.py")


@task
def ci(c):
    lint(c)
    format_check(c)
    test(c)
