"""
Route modules for the API.

Each module exports a FastAPI APIRouter with endpoints
for a specific domain/feature.
"""

from api.routes import cart
from api.routes import health
from api.routes import products
from api.routes import search

__all__ = ["cart", "health", "products", "search"]
