"""Entry point for the ClaimCheck verification service."""

from __future__ import annotations

import uvicorn
from dotenv import load_dotenv

from claimcheck.api import create_app
from claimcheck.utils.config import Config
from claimcheck.utils.logging import setup_logging

# Load environment variables from .env file
load_dotenv()

config = Config.load()
setup_logging(
    level=config.logging.level,
    log_format=config.logging.format,
    log_file=config.logging.file,
)

app = create_app(config)


if __name__ == "__main__":
    # Bind to all network interfaces by default
    uvicorn.run(app, host=config.server.host, port=config.server.port)
