import os
import sys

import uvicorn
from dotenv import load_dotenv

from relay_service.core.config import load_settings
from relay_service.core.logging import configure_logging, logger


def main():
    load_dotenv()
    cfg = load_settings()
    configure_logging(cfg)

    api_cfg = cfg.get("app", {}).get("api", {})
    host = api_cfg.get("host", "127.0.0.1")
    port = int(api_cfg.get("port", 9123))

    logger.info(f"cmd line: {' '.join(sys.argv)}")
    logger.info(f"log path: {cfg.get('logging', {}).get('path') or '<stderr>'}")
    logger.info(f"port: {port}")
    logger.info(f"pid: {os.getpid()}")
    logger.info(f"work dir: {os.getcwd()}")

    from relay_service.app.http.api import create_app

    logger.info(f"starting server at {host}:{port}")
    uvicorn.run(create_app(cfg), host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
