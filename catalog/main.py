"""ASGI entrypoint for the product catalog."""

import logging

from catalog.application import create_app
from catalog.core.config import get_settings

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app(settings)
