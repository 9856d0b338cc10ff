"""
FastAPI routers grouped by domain.

Each module exposes an APIRouter included by create_app(). Routers only bind
requests to service calls; business rules live in accounts_api.services.
"""
