"""ASGI entry point: ``uvicorn spincity.app_factory:app``."""
from spincity.app import create_app

app = create_app()

__all__ = ["app", "create_app"]
