"""Test configuration and fixtures."""

import os

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestClient, TestServer

from registry_dashboard import DashboardConfig, create_app
from tests.helpers import FakeRegistry, FakeRunner


@pytest.fixture
def fake_runner():
    """Scripted docker runner; every stage succeeds unless scripted otherwise."""
    return FakeRunner()


@pytest_asyncio.fixture
async def fake_registry():
    """In-process registry listening on a random local port."""
    registry = FakeRegistry()
    server = TestServer(registry.make_app())
    await server.start_server()
    registry.url = f"http://{server.host}:{server.port}"
    yield registry
    await server.close()


@pytest.fixture
def static_dir(tmp_path):
    """A minimal UI bundle."""
    bundle = tmp_path / "build"
    bundle.mkdir()
    (bundle / "index.html").write_text("<html><body>registry ui</body></html>")
    (bundle / "app.js").write_text("console.log('ui');")
    return bundle


@pytest.fixture
def dashboard_config(fake_registry, static_dir):
    """Configuration pointing the dashboard at the fake registry."""
    return DashboardConfig(
        registry_host="registry.test:5000",
        registry_url=fake_registry.url,
        stream_heartbeat=0.2,
        static_dir=static_dir,
    )


@pytest_asyncio.fixture
async def client(dashboard_config, fake_runner):
    """Test client for the dashboard application."""
    app = create_app(dashboard_config, runner=fake_runner)
    async with TestClient(TestServer(app)) as test_client:
        yield test_client


# Pytest configuration
def pytest_configure(config):
    """Configure pytest markers and settings."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test requiring docker and a registry",
    )
    config.addinivalue_line("markers", "unit: mark test as unit test (default)")


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless a registry is available."""
    skip_integration = pytest.mark.skip(reason="Registry not available")

    for item in items:
        if (
            "integration" in item.keywords
            and os.getenv("REGISTRY_AVAILABLE", "false").lower() != "true"
        ):
            item.add_marker(skip_integration)
