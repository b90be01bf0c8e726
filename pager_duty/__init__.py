"""pager_duty: PagerDuty REST API connection with auth, pagination and time parsing."""

__version__ = "0.2.0"

from pager_duty.config import CONFIG_DIR, CONFIG_FILE, load_config, load_timezone, load_token, save_config
from pager_duty.connection import (
    ApiError,
    AsyncConnection,
    CallerInputError,
    ClientConfig,
    Connection,
    DecodeError,
    ErrorKind,
    NotFoundError,
    PagerDutyError,
)

__all__ = [
    "CONFIG_DIR",
    "CONFIG_FILE",
    "ApiError",
    "AsyncConnection",
    "CallerInputError",
    "ClientConfig",
    "Connection",
    "DecodeError",
    "ErrorKind",
    "NotFoundError",
    "PagerDutyError",
    "load_config",
    "load_timezone",
    "load_token",
    "save_config",
]
