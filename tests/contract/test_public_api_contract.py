"""Contract tests for the stable shell API module."""

from __future__ import annotations

import importlib

_SHELL_API = [
    "CommandNode",
    "CommandTree",
    "OptionSpec",
    "Candidate",
    "CommandCompleter",
    "DefaultContext",
    "AttachedProcess",
    "ContextEngine",
    "DispatchResult",
    "OutputSink",
    "InterpreterState",
    "parse_line",
    "quote_tokens",
    "resolve",
    "complete_line",
    "execute_line",
    "handle_interrupt",
    "run_repl",
    "create_state",
]


def test_shell_api_exports() -> None:
    api = importlib.import_module("mcerv.shell.api")
    missing = [name for name in _SHELL_API if not hasattr(api, name)]
    assert not missing, f"mcerv.shell.api missing exports: {missing}"


def test_shell_package_reexports_api() -> None:
    pkg = importlib.import_module("mcerv.shell")
    missing = [name for name in _SHELL_API if not hasattr(pkg, name)]
    assert not missing, f"mcerv.shell missing API re-exports: {missing}"
    assert sorted(pkg.__all__) == sorted(importlib.import_module("mcerv.shell.api").__all__)


def test_config_is_read_once_at_import() -> None:
    config = importlib.import_module("mcerv.config")
    for name in ("ENV_FILE", "INSTANCES_DIR", "CONFIG_FILE_NAME", "DEFAULT_MEMORY", "DEBUG"):
        assert hasattr(config, name), name
    callables = [
        name for name, value in vars(config).items()
        if callable(value) and not name.startswith("_") and getattr(value, "__module__", "") == "mcerv.config"
    ]
    assert callables == []
