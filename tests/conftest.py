"""
Root conftest.py - sys.path, env vars, shared fixtures.

Every upstream call goes through an httpx.MockTransport backed by
FakeSocrata (tests/factories/socrata_factories.py).
"""

import os
import sys
import httpx
import pytest

# Add project root to sys.path so 'socrata_features', 'services', 'util_logger' import
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from services.socrata_client import SocrataClient  # noqa: E402
from socrata_features.config import SocrataConfig, reset_socrata_config  # noqa: E402
from socrata_features.service import SocrataFeatureService  # noqa: E402
from tests.factories.socrata_factories import FakeSocrata, HOST, ORGANIZATION  # noqa: E402


@pytest.fixture(autouse=True)
def clean_socrata_env(monkeypatch):
    """Keep the developer's SOCRATA_* variables out of the tests."""
    for key in list(os.environ):
        if key.startswith("SOCRATA_"):
            monkeypatch.delenv(key, raising=False)
    reset_socrata_config()
    yield
    reset_socrata_config()


@pytest.fixture
def upstream():
    return FakeSocrata()


@pytest.fixture
def client(upstream):
    socrata_client = SocrataClient(transport=httpx.MockTransport(upstream.handler))
    yield socrata_client
    socrata_client.close()


@pytest.fixture
def config():
    return SocrataConfig(default_host=HOST, organization=ORGANIZATION)


@pytest.fixture
def service(config, client):
    svc = SocrataFeatureService(config=config, client=client)
    yield svc
    svc.close()


@pytest.fixture
def capture():
    """Callback recorder for get_data."""
    class Capture:
        def __init__(self):
            self.calls = []

        def __call__(self, err, result):
            self.calls.append((err, result))

        @property
        def only(self):
            assert len(self.calls) == 1
            return self.calls[0]

    return Capture()
