import sys
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture()
def tmp_db_path(tmp_path, monkeypatch):
    path = tmp_path / "quotes_test.db"
    # Point quotebot to this temp DB
    monkeypatch.setenv("QUOTEBOT_DB_PATH", str(path))
    return str(path)


@pytest.fixture()
def store(tmp_db_path):
    from quotebot.services.quote_store import QuoteStore
    s = QuoteStore(tmp_db_path)
    yield s
    s.close()


@pytest.fixture()
def client(tmp_db_path):
    # Import app after DB path is set so startup hooks use it
    from quotebot.api import app
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c


@pytest.fixture(autouse=True)
def _reset_process_store():
    yield
    from quotebot.services import quote_svc
    quote_svc.close_store()
