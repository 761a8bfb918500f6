"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from refhub.api import app

    uvicorn refhub.api:app
"""

from refhub.api.app import app, create_app

__all__ = ["app", "create_app"]
