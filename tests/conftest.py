"""
Pytest configuration and shared fixtures for the outfit search tests.
"""
import os
import sys
from typing import List

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), "src"))

# Load environment variables
from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env"))


# ============================================================================
# Fixtures: Catalog
# ============================================================================

@pytest.fixture(scope="session")
def catalog_products() -> List:
    """The full generated catalog (deterministic, built once per session)."""
    from catalog.generator import generate_catalog
    return generate_catalog()


@pytest.fixture
def catalog_store(catalog_products):
    """CatalogStore serving the generated catalog without regenerating it."""
    from catalog.store import CatalogStore
    return CatalogStore(ttl_seconds=300, loader=lambda: catalog_products)


@pytest.fixture
def make_product():
    """Factory for ad-hoc products; any field may be overridden."""
    from catalog.models import Product

    def _make(**overrides):
        defaults = {
            "id": "prod-test-001",
            "title": "Test Blazer",
            "brand": "StyleCraft",
            "price": 100,
            "category": "Blazers",
            "color": "Navy",
            "style": "Classic",
            "description": "A test product.",
            "scenario_id": "nyc_dinner",
            "audience": "men",
            "occasion_tags": ("Work", "Evening"),
            "formality": "smart_casual",
            "delivery_days": 2,
        }
        defaults.update(overrides)
        return Product(**defaults)

    return _make


# ============================================================================
# Fixtures: Settings & Services
# ============================================================================

@pytest.fixture
def test_settings():
    """Settings with the assistant disabled."""
    from config.settings import get_settings_for_testing
    return get_settings_for_testing()


@pytest.fixture
def assistant(test_settings):
    """Assistant collaborator that always uses local fallbacks."""
    from services.assistant import AssistantCollaborator
    return AssistantCollaborator(settings=test_settings)


@pytest.fixture
def shopping_service(catalog_store, test_settings, assistant):
    """ShoppingService wired to the test store and the offline assistant."""
    from services.shopping_service import ShoppingService
    return ShoppingService(store=catalog_store, settings=test_settings, assistant=assistant)


# ============================================================================
# Fixtures: FastAPI Test Client
# ============================================================================

@pytest.fixture
def app(shopping_service):
    """FastAPI application with the test service injected."""
    from api.app import create_app
    from services.shopping_service import get_shopping_service

    application = create_app(warm_catalog=False)
    application.dependency_overrides[get_shopping_service] = lambda: shopping_service
    return application


@pytest.fixture
def client(app):
    """Synchronous test client for the API."""
    from fastapi.testclient import TestClient
    with TestClient(app) as test_client:
        yield test_client


# ============================================================================
# Markers
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "slow: marks tests as slow")
