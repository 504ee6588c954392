"""mcerv interactive shell (Minecraft server instance manager)."""

from __future__ import annotations

import argparse
from pathlib import Path

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from prompt_toolkit.patch_stdout import patch_stdout

from mcerv.config import DEBUG, HISTORY_FILE, INSTANCES_DIR, PROMPT
from mcerv.shell import CommandCompleter, InterpreterState, create_state, run_repl
from mcerv.utils.logging_utils import log_event
from mcerv.utils.path_utils import _resolve_dir, ensure_instances_dir
from mcerv_cli.commands import build_command_tree

ANSI_CYAN = "\033[0;36m"
ANSI_RESET = "\033[0m"


def _banner(state: InterpreterState) -> str:
    lines = [
        f"{ANSI_CYAN}mcerv{ANSI_RESET} - Minecraft server instance shell",
        f"Instances: {state.instances_dir} ({len(state.server_names)} found)",
        "Type `help` for commands, Tab to complete, Ctrl-C to quit.",
    ]
    return "\n".join(lines)


def _build_prompt_session(state: InterpreterState, history_file: Path) -> PromptSession:
    history_file.parent.mkdir(parents=True, exist_ok=True)
    return PromptSession(
        completer=CommandCompleter(lambda: state),
        complete_while_typing=True,
        reserve_space_for_menu=8,
        history=FileHistory(str(history_file)),
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="mcerv interactive Minecraft server shell")
    parser.add_argument(
        "--instances-dir",
        default=None,
        help=f"Directory holding one sub-directory per server (default: {INSTANCES_DIR}).",
    )
    parser.add_argument(
        "--history-file",
        default=None,
        help=f"Prompt history file (default: {HISTORY_FILE}).",
    )
    parser.add_argument(
        "--debug",
        action=argparse.BooleanOptionalAction,
        default=DEBUG,
        help="Print tracebacks of unexpected command failures.",
    )
    parser.add_argument("--no-banner", action="store_true", help="Suppress startup banner.")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    instances_dir = _resolve_dir(args.instances_dir, default=INSTANCES_DIR)
    history_file = _resolve_dir(args.history_file, default=HISTORY_FILE)
    try:
        ensure_instances_dir(instances_dir)
    except OSError as exc:
        print(f"ERR: cannot create instances directory {instances_dir}: {exc}")
        return 1

    state = create_state(build_command_tree(), instances_dir=instances_dir, debug=bool(args.debug))
    try:
        try:
            session = _build_prompt_session(state, history_file)
        except OSError as exc:
            print(f"ERR: cannot open prompt history {history_file}: {exc}")
            return 1
        log_event("session_started", instances_dir=instances_dir, servers=len(state.server_names))
        if not args.no_banner:
            state.echo(_banner(state))
        with patch_stdout():
            return run_repl(state, lambda: session.prompt(PROMPT))
    finally:
        state.close()
        log_event("session_closed")


if __name__ == "__main__":
    raise SystemExit(main())
