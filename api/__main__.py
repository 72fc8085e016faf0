"""Command line interface for running the API server."""
import logging

import uvicorn

from config import settings_conf, configure_logging

logger = logging.getLogger(__name__)


def main() -> None:
    """Run the API server with the configured host and port."""
    configure_logging()
    host = settings_conf['api_host']
    port = settings_conf['api_port']
    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run(
        "api:app",
        host=host,
        port=port,
        log_level=settings_conf['log_level'].lower()
    )


if __name__ == "__main__":
    main()
