import pytest


ISOLATED_VARIABLES = (
    "CHANGELOG_COMMIT_TYPES",
    "CHANGELOG_TEMPLATE_PATH",
    "CHANGELOG_PATH",
    "GITHUB_WORKSPACE",
    "GITHUB_REPOSITORY",
    "GITHUB_TOKEN",
    "GITHUB_API_URL",
)


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Remove changelog and GitHub Actions variables from the environment.

    Tests that exercise environment handling set the variables they need
    explicitly; everything else must not be affected by the environment
    the suite happens to run in (for example a CI runner).
    """
    for name in ISOLATED_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    yield
