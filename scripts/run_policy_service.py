"""Start the reference policy service with uvicorn."""

import logging

import uvicorn
from netpolicy.authority.config import config


logger = logging.getLogger(__name__)


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Policy service on http://{config.host}:{config.port}")

    uvicorn.run(
        "netpolicy.authority.policy_service:app",
        host=config.host,
        port=config.port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
