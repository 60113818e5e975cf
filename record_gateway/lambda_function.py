from functools import lru_cache

from .config import Settings, configure_logging
from .handler import RecordHandler
from .stores import build_store


@lru_cache(maxsize=None)
def get_handler() -> RecordHandler:
    """Process-wide handler; the store handle it owns is reused across invocations."""
    settings = Settings()
    configure_logging(settings.log_level)
    return RecordHandler(build_store(settings), settings.key_field)


def lambda_handler(event, context):
    return get_handler()(event)
