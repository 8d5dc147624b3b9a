"""Shared pytest fixtures for JDL tests."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from jdl.core.api import convert_text_to_entities
from jdl.core.ir.entities import ResolvedEntity

SHOP_JDL = """\
/**
 * The shop owner
 */
entity Owner (shop_owner) {
  /** Login name */
  login String required minlength(3) maxlength(MAX_LOGIN),
  picture ImageBlob,
  notes TextBlob
}

entity Product {
  name String required pattern(/^[A-Z].*$/),
  status Status
}

entity Tag

enum Status {
  DRAFT,
  PUBLISHED
}

MAX_LOGIN = 50

relationship OneToMany {
  Owner{product} to Product
}

relationship ManyToMany {
  Product{tag(name)} to Tag{product}
}

dto * with mapstruct except Tag
service Product with serviceImpl
filter Owner, Product
paginate Product with pagination
"""

CREATION_TIME = datetime(2020, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def shop_jdl() -> str:
    """Return a small JDL document exercising most constructs."""
    return SHOP_JDL


@pytest.fixture
def shop_file(tmp_path: Path) -> Path:
    """Write the shop document to a .jdl file."""
    path = tmp_path / "shop.jdl"
    path.write_text(SHOP_JDL, encoding="utf-8")
    return path


@pytest.fixture
def creation_time() -> datetime:
    """Return a fixed base for change-log timestamps."""
    return CREATION_TIME


@pytest.fixture
def resolve():
    """Return a helper resolving JDL text at a fixed creation time."""

    def _resolve(
        text: str, database_type: str = "sql", application_type: str | None = None
    ) -> dict[str, ResolvedEntity]:
        return convert_text_to_entities(
            text, database_type, application_type, creation_time=CREATION_TIME
        )

    return _resolve
