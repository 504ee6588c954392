"""Contract tests for package-level re-exports.

These tests verify public compatibility surfaces only.  They should fail
when a symbol the CLI layer imports disappears.
"""

from __future__ import annotations

import importlib
from typing import Iterable


def _assert_exports(module_name: str, names: Iterable[str]) -> None:
    module = importlib.import_module(module_name)
    missing = [name for name in names if not hasattr(module, name)]
    assert not missing, f"{module_name} missing exports: {missing}"


def test_services_package_exports() -> None:
    _assert_exports(
        "mcerv.services",
        [
            "HttpClient",
            "HttpError",
            "InvalidServerDirError",
            "ServerFork",
            "ServerInfo",
            "ServerInfoError",
            "ServerConfig",
            "spawn_server",
        ],
    )


def test_utils_package_exports() -> None:
    _assert_exports(
        "mcerv.utils",
        [
            "log_event",
            "get_exec_log_path",
            "ensure_instances_dir",
            "list_instance_names",
            "server_dir",
            "existing_server_dir",
        ],
    )


def test_error_model_exports() -> None:
    _assert_exports(
        "mcerv.shell.error_model",
        [
            "MCervError",
            "ParseError",
            "DispatchError",
            "UnknownCommandError",
            "NoHandlerError",
            "HandlerError",
            "OptionValueError",
            "format_error",
        ],
    )


def test_cli_handler_exports() -> None:
    _assert_exports(
        "mcerv_cli.handlers",
        [
            "list_servers",
            "list_mods",
            "select_server",
            "show_selected",
            "show_info",
            "search_server_versions",
            "search_mods",
            "search_mod_versions",
            "set_max_memory",
            "set_min_memory",
            "set_java_home",
            "add_server",
            "add_mod",
            "update_server",
            "generate_start_script",
            "check_mods_support",
            "accept_eula",
            "start_server",
            "show_help",
            "exit_shell",
        ],
    )
