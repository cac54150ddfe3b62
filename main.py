# =============================================================================
# main.py  -  Entry Point for the Toolkit MCP Server
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py
#
# WHAT HAPPENS:
#   1. Loads .env (PORT, SECRET_STORE_PATH, upstream URLs, ...)
#   2. Configures logging to STDERR
#   3. Builds the app (tools/app.py): catalog, registry, dispatcher, sessions
#   4. Serves it with uvicorn until interrupted
#
# Then point an MCP client at http://localhost:<PORT>/sse, or open
# http://localhost:<PORT>/ in a browser for the tool list.  To poke at the
# tools from a terminal:  uv run python -m client.console
# =============================================================================

import logging
import sys

import uvicorn
from dotenv import load_dotenv

# Load environment variables from .env BEFORE reading settings.
load_dotenv()

from core.settings import load_settings
from tools.app import create_app


def configure_logging(level: str = "INFO") -> None:
    """Send timestamped log lines to STDERR."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [MCP] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    logging.getLogger(__name__).info("Starting tool server on %s:%d", settings.host, settings.port)

    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
