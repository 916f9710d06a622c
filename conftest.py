import pytest

from chancery.local_store import LocalStore
from chancery.remote import InMemoryRemote
from chancery.sync_engine import SyncEngine

# Short enough to keep tests fast, long enough to coalesce a burst of calls
TEST_SAVE_DELAY = 0.05


@pytest.fixture
def local_store(tmp_path) -> LocalStore:
    return LocalStore(tmp_path / "data")


@pytest.fixture
def remote() -> InMemoryRemote:
    return InMemoryRemote(available=True)


@pytest.fixture
async def engine(local_store, remote):
    """A started engine over a temp data dir and an in-memory remote."""
    eng = SyncEngine(local_store, remote, save_delay=TEST_SAVE_DELAY)
    await eng.start()
    await eng.wait_idle()
    yield eng
    await eng.close()
