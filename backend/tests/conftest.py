import pytest

from app.core.config import Settings
from app.core.database import ConnectionProvider, QueryExecutor


class CountingProvider(ConnectionProvider):
    """Provider that records dedicated connection checkouts and releases."""

    def __init__(self, settings: Settings) -> None:
        super().__init__(settings)
        self.acquired = 0
        self.released = 0

    async def connect_dedicated(self):
        conn = await super().connect_dedicated()
        self.acquired += 1
        return conn

    async def release(self, conn) -> None:
        self.released += 1
        await super().release(conn)


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'gallery.db'}"


@pytest.fixture
def test_settings(database_url) -> Settings:
    return Settings(POSTGRES_URL=database_url, _env_file=None)


@pytest.fixture
def unconfigured_settings() -> Settings:
    return Settings(POSTGRES_URL=None, POSTGRES_URL_NON_POOLING=None, _env_file=None)


@pytest.fixture
async def provider(test_settings):
    provider = CountingProvider(test_settings)
    yield provider
    await provider.dispose()


@pytest.fixture
def executor(provider) -> QueryExecutor:
    return QueryExecutor(provider)
