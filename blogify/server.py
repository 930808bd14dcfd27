"""
Run the Blogify API under uvicorn.

Usage:
    blogify
    python -m blogify
"""

from __future__ import annotations

import logging

import uvicorn

from blogify.config import get_settings

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Blog app listening on port %s", settings.port)
    uvicorn.run("blogify.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
