"""Entry point for running RemoteXO via ``python -m remotexo``."""

from __future__ import annotations

import logging
import os

import uvicorn


def main() -> None:
    """Start the FastAPI-powered RemoteXO server."""

    log_level = os.environ.get("REMOTEXO_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = os.environ.get("REMOTEXO_HOST", "0.0.0.0")
    port = int(os.environ.get("REMOTEXO_PORT", "8000"))
    uvicorn.run(
        "remotexo.api:create_app",
        factory=True,
        host=host,
        port=port,
        log_level=log_level.lower(),
        reload=False,
    )


if __name__ == "__main__":
    main()
