"""
Shared fixtures: packaged vocabulary, demo catalog, and an orchestrator
driven by a controllable clock.
"""
import pytest

from erp_intent.catalog import CatalogRegistry, load_catalog_dir
from erp_intent.memory import SessionStore
from erp_intent.orchestration import SessionOrchestrator
from erp_intent.schemas import InterpretRequest
from erp_intent.vocabulary import VocabularyIndex, load_vocabulary_config

ALL_MODULES = ["CLINICO", "VENTAS", "INVENTARIO", "COMPRAS"]
ALL_ACTIONS = ["CREATE", "READ", "UPDATE", "DELETE"]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="session")
def vocabulary_config():
    return load_vocabulary_config()


@pytest.fixture(scope="session")
def index(vocabulary_config):
    return VocabularyIndex(vocabulary_config)


@pytest.fixture(scope="session")
def catalogs():
    return CatalogRegistry(load_catalog_dir())


@pytest.fixture
def demo_catalog(catalogs):
    return catalogs.get("demo")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return SessionStore(ttl_seconds=15 * 60, clock=clock)


@pytest.fixture
def orchestrator(index, catalogs, store):
    return SessionOrchestrator(index, catalogs, store=store)


@pytest.fixture
def make_request():
    """Build an InterpretRequest for the demo ERP."""

    def _make(message, session_id=None, modules=None, actions=None, module=None, erp_id="demo"):
        body = {
            "message": message,
            "context": {
                "erpId": erp_id,
                "permissions": {
                    "modules": ALL_MODULES if modules is None else modules,
                    "actions": ALL_ACTIONS if actions is None else actions,
                },
            },
        }
        if session_id:
            body["sessionId"] = session_id
        if module:
            body["module"] = module
        return InterpretRequest.parse(body)

    return _make
