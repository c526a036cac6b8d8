"""FixturePool admin server entry point."""

import uvicorn

from fixturepool.api.app import create_app
from fixturepool.config import get_settings

# Create the app instance; the pool manager is built in the lifespan
app = create_app()


def main() -> None:
    """Run the admin API with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "fixturepool.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
