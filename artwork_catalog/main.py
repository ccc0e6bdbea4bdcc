"""
Main entry point for Artwork Catalog.
"""

from .api import create_app

app = create_app()

if __name__ == "__main__":
    import uvicorn

    from .config import get_settings
    from .logging_config import configure_logging

    settings = get_settings()
    configure_logging(settings)
    uvicorn.run(
        "artwork_catalog.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        workers=1 if settings.debug else settings.api_workers,
    )
