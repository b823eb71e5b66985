"""Run the API server with uvicorn."""

import uvicorn

from professor_rag.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "professor_rag.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
