"""Command handlers.

Every handler has the signature ``(state, tokens) -> None``.  Expected
failures raise ``HandlerError`` with a message meant for the user; the
dispatcher prints it and the loop carries on.
"""

from __future__ import annotations

import re
import time
from dataclasses import replace
from pathlib import Path
from typing import Any, Coroutine, TypeVar

from mcerv.config import EULA_FILE_NAME, EULA_URL, MODRINTH_SEARCH_LIMIT, MODS_DIR_NAME
from mcerv.services import fabric_meta, modrinth
from mcerv.services.fabric_meta import FabricVersions
from mcerv.services.http import HttpError
from mcerv.services.jar_parser import InvalidServerDirError, ServerInfo, ServerInfoError
from mcerv.services.process import spawn_server
from mcerv.services.server_config import ServerConfig
from mcerv.shell.error_model import HandlerError
from mcerv.shell.options import has_flag, option_value, positional
from mcerv.shell.state import InterpreterState, Server
from mcerv.utils.path_utils import existing_server_dir, server_dir

from .mod_updates import apply_updates, check_support, collect_installed_mods, modrinth_downloader

T = TypeVar("T")

_MEMORY_RE = re.compile(r"^\d+[KkMmGg]?$")
_SERVER_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _block_on(state: InterpreterState, coro: Coroutine[Any, Any, T], *, action: str) -> T:
    """Run *coro* on the async runner, turning service failures into HandlerError."""
    try:
        return state.runtime.block_on(coro)
    except (HttpError, LookupError, OSError, ValueError) as exc:
        raise HandlerError(f"{action}: {exc}") from exc


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def _game_version(server: Server) -> str:
    if server.info is None:
        raise HandlerError(f"Could not detect the game version of {server.name}.")
    return server.info.game_version


def _mods_dir(server: Server) -> Path:
    path = server.directory / MODS_DIR_NAME
    if not path.is_dir():
        raise HandlerError(f"Failed to read mods directory: {path} does not exist")
    return path


def _commit_config(server: Server, config: ServerConfig) -> None:
    """Persist *config*, then make it the server's current config."""
    try:
        config.save(server.directory)
    except OSError as exc:
        raise HandlerError(f"Failed to save config. Error: {exc}") from exc
    server.config = config


def inspect_server_jar(directory: Path, jar_name: str) -> tuple[ServerInfo | None, str]:
    """Fork and game version of the server jar, or None plus the reason."""
    try:
        return ServerInfo.from_jar(directory / jar_name), ""
    except (ServerInfoError, OSError) as exc:
        return None, str(exc)


def load_server(instances_dir: Path, name: str) -> tuple[Server, list[str]]:
    directory = existing_server_dir(instances_dir, name)
    if directory is None:
        raise HandlerError(f"Failed to select server. Error: server {name} not found")
    try:
        config, notes = ServerConfig.load_or_create(directory)
    except (InvalidServerDirError, OSError, ValueError) as exc:
        raise HandlerError(f"Failed to select server. Error: {exc}") from exc
    info, reason = inspect_server_jar(directory, config.jar_name)
    if info is None:
        notes.append(f"Could not inspect server jar: {reason}")
    return Server(name=name, directory=directory, config=config, info=info), notes


def _requested_versions(state: InterpreterState, tokens: list[str]) -> FabricVersions:
    game = option_value(tokens, "game")
    loader = option_value(tokens, "loader")
    installer = option_value(tokens, "installer")
    if has_flag(tokens, "latest-stable") and not (game and loader and installer):
        latest = _block_on(
            state,
            fabric_meta.fetch_latest_stable_versions(state.http),
            action="Failed to fetch latest stable versions",
        )
        game = game or latest.game
        loader = loader or latest.loader
        installer = installer or latest.installer
    for label, value in (("game", game), ("loader", loader), ("installer", installer)):
        if not value:
            raise HandlerError(f"Missing or invalid --{label} option")
    return FabricVersions(game=game, loader=loader, installer=installer)


# ---------------------------------------------------------------------------
# list / select / info
# ---------------------------------------------------------------------------

def list_servers(state: InterpreterState, tokens: list[str]) -> None:
    names = state.refresh_server_names()
    if not names:
        state.echo("Server list is empty.")
        return
    state.echo("\n".join(names))


def list_mods(state: InterpreterState, tokens: list[str]) -> None:
    server = state.require_selected()
    game_version = _game_version(server)
    mods_dir = _mods_dir(server)
    mods = _block_on(
        state,
        collect_installed_mods(state.http, mods_dir, game_version),
        action="Failed to check installed mods",
    )
    for mod in mods:
        state.echo(mod.status_line())
    updates = [mod for mod in mods if mod.has_update]
    state.echo(f"You have {len(mods)} mods installed.")
    state.echo(f"You have {len(updates)} available updates.")
    if not has_flag(tokens, "update") or not updates:
        return
    state.echo("Updating mods...")
    report = state.runtime.block_on(apply_updates(updates, modrinth_downloader(state.http, mods_dir)))
    state.echo("\n".join(report.summary_lines()))


def select_server(state: InterpreterState, tokens: list[str]) -> None:
    name = positional(tokens, 1)
    if not name:
        raise HandlerError("No server name provided.")
    if name not in state.server_names:
        state.refresh_server_names()
    if name not in state.server_names:
        raise HandlerError(f"Failed to select server. Error: server {name} not found")
    server, notes = load_server(state.instances_dir, name)
    state.selected_server = server
    for note in notes:
        state.echo(note)
    lines = [f"Selected server: {name}"]
    if server.info is not None:
        lines.append(f"Fork: {server.info.server_fork}")
        lines.append(f"Game version: {server.info.game_version}")
    state.echo("\n".join(lines))


def show_selected(state: InterpreterState, tokens: list[str]) -> None:
    state.echo(state.require_selected().name)


def show_info(state: InterpreterState, tokens: list[str]) -> None:
    server = state.require_selected()
    parts = [f"Server: {server.name}"]
    parts.append(server.info.describe() if server.info else "Server jar could not be inspected.")
    parts.append(server.config.describe())
    state.echo("\n".join(parts))


# ---------------------------------------------------------------------------
# search
# ---------------------------------------------------------------------------

def search_server_versions(state: InterpreterState, tokens: list[str]) -> None:
    show_all = has_flag(tokens, "all")
    if show_all and has_flag(tokens, "stable-only"):
        raise HandlerError("--stable-only and --all are mutually exclusive.")
    started = time.perf_counter()
    games, loaders, installers = _block_on(
        state,
        fabric_meta.fetch_versions(state.http),
        action="print versions failed",
    )
    state.echo(fabric_meta.format_versions_table(games, loaders, installers, stable_only=not show_all))
    state.echo(f"Took {_elapsed_ms(started)}ms")


def search_mods(state: InterpreterState, tokens: list[str]) -> None:
    server = state.require_selected()
    game_version = _game_version(server)
    query = positional(tokens, 2)
    if not query:
        raise HandlerError("No query provided.")
    raw_facets = option_value(tokens, "facets")
    index = option_value(tokens, "index")
    limit = option_value(tokens, "limit")
    if limit is not None and not limit.isdigit():
        raise HandlerError(f"Invalid value for --limit option: {limit}")
    facets = modrinth.build_facets(raw_facets.split(",") if raw_facets else [], game_version)
    result = _block_on(
        state,
        modrinth.search(state.http, query, facets, index=index, limit=limit or MODRINTH_SEARCH_LIMIT),
        action="Search failed",
    )
    state.echo(result.render())


def search_mod_versions(state: InterpreterState, tokens: list[str]) -> None:
    server = state.require_selected()
    game_version = _game_version(server)
    slug = positional(tokens, 2)
    if not slug:
        raise HandlerError("No project slug provided.")
    raw_featured = option_value(tokens, "featured")
    featured: bool | None = None
    if raw_featured is not None:
        if raw_featured not in {"true", "false"}:
            raise HandlerError("Invalid value for --featured option.")
        featured = raw_featured == "true"
    versions = _block_on(
        state,
        modrinth.get_project_versions(state.http, slug, [game_version], featured=featured),
        action="Failed to get project versions",
    )
    state.echo(modrinth.format_versions(versions))


# ---------------------------------------------------------------------------
# set
# ---------------------------------------------------------------------------

def _set_memory(state: InterpreterState, tokens: list[str], *, field_name: str, label: str) -> None:
    server = state.require_selected()
    value = positional(tokens, 2)
    if not value:
        raise HandlerError(f"No {label} provided.")
    if not _MEMORY_RE.match(value):
        raise HandlerError(f"Invalid memory size: {value} (expected e.g. 4G or 512M)")
    _commit_config(server, replace(server.config, **{field_name: value}))
    state.echo(f"{label.capitalize()} set to {value}.")


def set_max_memory(state: InterpreterState, tokens: list[str]) -> None:
    _set_memory(state, tokens, field_name="max_memory", label="max memory")


def set_min_memory(state: InterpreterState, tokens: list[str]) -> None:
    _set_memory(state, tokens, field_name="min_memory", label="min memory")


def set_java_home(state: InterpreterState, tokens: list[str]) -> None:
    server = state.require_selected()
    java_home = tokens[2] if len(tokens) > 2 else ""
    if not java_home:
        raise HandlerError("No JAVA_HOME provided.")
    if not Path(java_home).expanduser().exists():
        raise HandlerError(f"The path {java_home} does not exist.")
    _commit_config(server, replace(server.config, java_home=str(Path(java_home).expanduser())))
    state.echo(f"JAVA_HOME set to {server.config.java_home}.")


# ---------------------------------------------------------------------------
# add / update / generate
# ---------------------------------------------------------------------------

def add_server(state: InterpreterState, tokens: list[str]) -> None:
    name = positional(tokens, 2)
    if not name:
        raise HandlerError("No server name provided.")
    if not _SERVER_NAME_RE.match(name):
        raise HandlerError(f"Invalid server name: {name}")
    if existing_server_dir(state.instances_dir, name) is not None:
        raise HandlerError(f"Server {name} already exists.")
    started = time.perf_counter()
    state.echo("Fetching versions...")
    versions = _requested_versions(state, tokens)

    directory = server_dir(state.instances_dir, name)
    state.echo("Downloading server jar...")
    try:
        filename = state.runtime.block_on(
            fabric_meta.download_server(state.http, versions, directory, show_progress=True)
        )
    except (HttpError, OSError) as exc:
        if directory.is_dir() and not any(directory.iterdir()):
            directory.rmdir()
        raise HandlerError(f"Failed to download server jar: {exc}") from exc
    state.echo(f"Download complete. Duration: {_elapsed_ms(started)}ms")

    try:
        ServerConfig(jar_name=filename).save(directory)
    except OSError as exc:
        raise HandlerError(f"Failed to save config: {exc}") from exc
    state.echo("Config created and saved")
    state.refresh_server_names()
    state.echo(f"Server added: {name}")


def add_mod(state: InterpreterState, tokens: list[str]) -> None:
    version_id = positional(tokens, 2)
    if not version_id:
        raise HandlerError("No mod version ID provided.")
    server = state.require_selected()
    mods_dir = server.directory / MODS_DIR_NAME
    state.echo(f"Downloading mod version {version_id}...")

    async def _fetch() -> Path:
        version = await modrinth.get_version(state.http, version_id)
        return await modrinth.download_version(state.http, version, mods_dir)

    path = _block_on(state, _fetch(), action="Failed to download mod version")
    state.echo(f"Mod version downloaded: {path.name}")


def update_server(state: InterpreterState, tokens: list[str]) -> None:
    server = state.require_selected()
    started = time.perf_counter()
    state.echo("Updating server jar...")
    state.echo("Fetching versions...")
    versions = _requested_versions(state, tokens)
    state.echo("Downloading new server jar...")
    filename = _block_on(
        state,
        fabric_meta.download_server(state.http, versions, server.directory, show_progress=True),
        action="Failed to download server jar",
    )
    old_jar = server.directory / server.config.jar_name
    state.echo("Updating config...")
    _commit_config(server, replace(server.config, jar_name=filename))
    if old_jar.name != filename:
        state.echo("Deleting old server jar...")
        try:
            old_jar.unlink(missing_ok=True)
        except OSError as exc:
            raise HandlerError(f"Failed to delete old server jar: {exc}") from exc
    server.info, _ = inspect_server_jar(server.directory, filename)
    state.echo(f"Update complete. Duration: {_elapsed_ms(started)}ms")


def generate_start_script(state: InterpreterState, tokens: list[str]) -> None:
    server = state.require_selected()
    extension, content = server.config.start_script()
    path = server.directory / f"start_script.{extension}"
    try:
        path.write_text(content, encoding="utf-8")
        if extension == "sh":
            path.chmod(0o755)
    except OSError as exc:
        raise HandlerError(f"Failed to write start script to file: {exc}") from exc
    state.echo(f"Start script written to {path}")


# ---------------------------------------------------------------------------
# check / eula
# ---------------------------------------------------------------------------

def check_mods_support(state: InterpreterState, tokens: list[str]) -> None:
    server = state.require_selected()
    game_version = positional(tokens, 2)
    if not game_version:
        raise HandlerError("No game version specified.")
    mods_dir = _mods_dir(server)
    results = _block_on(
        state,
        check_support(state.http, mods_dir, game_version),
        action="Failed to get mod versions",
    )
    supported = 0
    lines = []
    for slug, ok, error in results:
        if ok:
            supported += 1
            lines.append(f"{slug}: [OK] supported")
        elif ok is None:
            lines.append(f"{slug}: failed to check support: {error}")
        else:
            lines.append(f"{slug}: unsupported")
    lines.append(f"Supported mods: {supported}, Unsupported mods: {len(results) - supported}")
    state.echo("\n".join(lines))


def accept_eula(state: InterpreterState, tokens: list[str]) -> None:
    server = state.require_selected()
    path = server.directory / EULA_FILE_NAME
    try:
        content = path.read_text(encoding="utf-8")
        path.write_text(content.replace("eula=false", "eula=true"), encoding="utf-8")
    except OSError as exc:
        raise HandlerError(f"Failed to update {EULA_FILE_NAME}: {exc}") from exc
    state.echo(
        "You ran the accept-eula command. This means you agree to the Minecraft EULA. "
        f"mcerv set 'eula=true' in {EULA_FILE_NAME} for this server. "
        f"Please ensure you have read and understood the EULA at: {EULA_URL}"
    )


# ---------------------------------------------------------------------------
# start / help / exit
# ---------------------------------------------------------------------------

def start_server(state: InterpreterState, tokens: list[str]) -> None:
    server = state.require_selected()
    if state.context.is_attached():
        raise HandlerError("A server is already running.")
    command = server.config.start_command()
    state.echo("Starting server...")
    if server.config.java_home:
        state.echo(f"Using JAVA_HOME: {server.config.java_home}")
    else:
        state.echo("Using system default Java")
    try:
        process = spawn_server(command, cwd=server.directory, java_home=server.config.java_home)
    except OSError as exc:
        raise HandlerError(f"Failed to start server: {exc}") from exc
    state.context.attach(process, state.printer, name=server.name)
    state.echo("Input is now forwarded to the server. Press Ctrl-C to stop it.")


def show_help(state: InterpreterState, tokens: list[str]) -> None:
    target = positional(tokens, 1)
    if not target:
        lines = ["Commands:"]
        for node in state.tree.commands:
            lines.append(f"  {node.name:<14} {node.help}".rstrip())
        lines.append("Type `help <command>` for sub-commands and options.")
        state.echo("\n".join(lines))
        return
    node = state.tree.find(target)
    if node is None:
        raise HandlerError(f"Unknown command: {target}")
    lines = [f"{node.name}: {node.help}".rstrip(": ")]
    for child in node.children:
        lines.append(f"  {child.name:<16} {child.help}".rstrip())
        for opt in child.options:
            value = " <value>" if opt.takes_value else ""
            lines.append(f"      {opt.flag}{value:<8} {opt.help}".rstrip())
    for opt in node.options:
        value = " <value>" if opt.takes_value else ""
        lines.append(f"  {opt.flag}{value:<8} {opt.help}".rstrip())
    state.echo("\n".join(lines))


def exit_shell(state: InterpreterState, tokens: list[str]) -> None:
    state.exit_requested = True
    state.echo("Bye.")


__all__ = [
    "inspect_server_jar",
    "load_server",
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
]
