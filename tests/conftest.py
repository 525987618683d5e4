from datetime import datetime, timezone

import pytest
import pytest_asyncio

from model_expires.core.config import Settings
from model_expires.core.database import Database

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        log_format="console",
    )


@pytest_asyncio.fixture
async def database(settings):
    db = Database(settings)
    await db.startup()
    yield db
    await db.shutdown()
