import pytest
from fastapi.testclient import TestClient

from contentlab.api.deps import get_context
from contentlab.api.main import create_app


@pytest.fixture
def client(ctx) -> TestClient:
    """Test client wired to the in-memory service context."""
    app = create_app(with_lifespan=False)
    app.dependency_overrides[get_context] = lambda: ctx
    return TestClient(app)
