"""File management tasks backing the ``lib_layered_reality`` CLI."""

from .files import CONFIG_TEMPLATE, SECRETS_TEMPLATE, ConfigFileTask, SecretsFileTask, write_private
from .status import FileStatus, StatusTask

__all__ = [
    "CONFIG_TEMPLATE",
    "SECRETS_TEMPLATE",
    "ConfigFileTask",
    "SecretsFileTask",
    "write_private",
    "FileStatus",
    "StatusTask",
]
