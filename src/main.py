"""Main entry point for the query result viewer"""
import logging
from src.config import settings

# DEBUG=true wins over LOG_LEVEL so window selection traces show up
_level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)

# Configure root logger before the app (and Gradio) are imported
logging.basicConfig(
    level=_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logging.getLogger("httpx").setLevel(logging.WARNING)

from src.app import main

if __name__ == "__main__":
    main()
