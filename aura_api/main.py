"""Entry point for uvicorn: ``uvicorn aura_api.main:app``."""
from aura_api.app import create_app

app = create_app()

__all__ = ["app", "create_app"]
