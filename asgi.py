"""
asgi.py -- Application assembly and server entry point for Tienda.

Run with:  uvicorn asgi:app --reload
           tienda-api            (console script -> main())
"""

import uvicorn

from api.main import app
from core.config import get_settings

__all__ = ["app", "main"]


def main() -> None:
    """Serve the app on HOST:PORT from Settings."""
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
