"""Run the backend with ``python -m greensquares``."""

import uvicorn

from greensquares.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "greensquares.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.is_development,
    )


if __name__ == "__main__":
    main()
