# Core module exports
from nestval.core.config import settings, get_settings
from nestval.core.logging import (
    configure_logging,
    get_logger,
    bind_context,
    clear_context,
    rules_logger,
    messages_logger,
    schema_logger,
)
