#!/usr/bin/env python
"""
Run the Essenza web frontend with uvicorn.

Host, port and log level come from the same settings as the app
(HOST, PORT, LOG_LEVEL, or a .env file at the working directory).
"""
import logging

import uvicorn

from essenza_web.app.core.config import get_settings


def main():
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    logger = logging.getLogger("run_server")
    logger.info("Starting Essenza on %s:%s", settings.host, settings.port)
    uvicorn.run(
        "essenza_web.app.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
