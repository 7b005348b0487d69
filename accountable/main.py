"""
ASGI entrypoint: ``uvicorn accountable.main:app``
"""

from .core.app import create_app

app = create_app()
