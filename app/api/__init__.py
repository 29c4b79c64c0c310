"""
Admin HTTP API.

Structure:
- app.py: Application factory and middlewares
- helpers.py: Request parsing
- serializers.py: JSON projections of models and service results
- routes/: Route tables per area (matrices, payouts, partners, finance, health)
"""

from app.api.app import create_app

__all__ = ["create_app"]
