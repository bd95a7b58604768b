"""Shared fixtures and helpers for tests."""

from pathlib import Path

import pytest

from gen_block.cache import InMemoryTransformCache, reset_default_cache

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------

PROGRAM_SOURCE = """\
import { Effect } from "effect"

const program = gen {
  user <- getUser(id)
  [posts, likes] <- Effect.all([getPosts(user), getLikes(user)]);
  const label = `${user.name} {${posts.length}}`
  if (user.admin) {
    audit <- logAccess(user)
  }
  posts.forEach((post) => {
    seen <- markSeen(post)
  })
  return { user, posts, likes, label }
}
"""


@pytest.fixture
def cache() -> InMemoryTransformCache:
    """Return an isolated transform cache."""
    return InMemoryTransformCache()


@pytest.fixture(autouse=True)
def _fresh_default_cache() -> None:
    reset_default_cache()


@pytest.fixture
def program_source() -> str:
    """A file with one gen block exercising binds, destructuring, scopes and templates."""
    return PROGRAM_SOURCE


@pytest.fixture
def program_file(tmp_path: Path) -> Path:
    path = tmp_path / "program.ts"
    path.write_text(PROGRAM_SOURCE, encoding="utf-8")
    return path
