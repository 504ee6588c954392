"""Shared utility helpers used across mcerv runtime modules."""

from mcerv.utils.logging_utils import (
    log_event,
    get_exec_log_path,
)
from mcerv.utils.path_utils import (
    _resolve_dir,
    ensure_instances_dir,
    existing_server_dir,
    list_instance_names,
    server_dir,
)

__all__ = [
    "log_event",
    "get_exec_log_path",
    "_resolve_dir",
    "ensure_instances_dir",
    "existing_server_dir",
    "list_instance_names",
    "server_dir",
]
