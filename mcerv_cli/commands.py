"""The interactive command set wired to its handlers."""

from __future__ import annotations

from mcerv.shell import CommandNode, CommandTree, Handler, OptionSpec

from . import handlers


def _opt(name: str, help: str, *, value: bool = False) -> OptionSpec:
    return OptionSpec(name=name, help=help, takes_value=value)


def _cmd(
    name: str,
    help: str = "",
    handler: Handler | None = None,
    *,
    children: tuple[CommandNode, ...] = (),
    options: tuple[OptionSpec, ...] = (),
) -> CommandNode:
    return CommandNode(name=name, children=children, options=options, help=help, handler=handler)


_VERSION_OPTIONS = (
    _opt("game", "Minecraft version", value=True),
    _opt("loader", "Fabric loader version", value=True),
    _opt("installer", "Fabric installer version", value=True),
    _opt("latest-stable", "Fill missing versions with the latest stable ones"),
)


def build_command_tree() -> CommandTree:
    """Fresh command tree; ``select`` gets its children from the instances directory."""
    commands = [
        _cmd(
            "list",
            "List servers or mods",
            children=(
                _cmd("servers", "List all server instances", handlers.list_servers),
                _cmd(
                    "mods",
                    "List installed mods of the selected server",
                    handlers.list_mods,
                    options=(_opt("update", "Download available updates"),),
                ),
            ),
        ),
        _cmd(
            "search",
            "Search server versions, mods or mod versions",
            children=(
                _cmd(
                    "server-versions",
                    "Show Fabric game, loader and installer versions",
                    handlers.search_server_versions,
                    options=(
                        _opt("all", "Include unstable versions"),
                        _opt("stable-only", "Only stable versions (default)"),
                    ),
                ),
                _cmd(
                    "mods",
                    "Search Modrinth for mods",
                    handlers.search_mods,
                    options=(
                        _opt("facets", "Comma-separated extra facets", value=True),
                        _opt("index", "Sort index: relevance, downloads, follows, newest, updated", value=True),
                        _opt("limit", "Maximum number of results", value=True),
                    ),
                ),
                _cmd(
                    "mod-versions",
                    "List versions of a Modrinth project",
                    handlers.search_mod_versions,
                    options=(_opt("featured", "true or false", value=True),),
                ),
            ),
        ),
        _cmd("select", "Select a server", handlers.select_server),
        _cmd("selected", "Show the selected server", handlers.show_selected),
        _cmd("info", "Show details of the selected server", handlers.show_info),
        _cmd(
            "set",
            "Change settings of the selected server",
            children=(
                _cmd("max-memory", "Set max memory (e.g. 4G)", handlers.set_max_memory),
                _cmd("min-memory", "Set min memory (e.g. 1G)", handlers.set_min_memory),
                _cmd("java", "Set JAVA_HOME", handlers.set_java_home),
            ),
        ),
        _cmd(
            "add",
            "Add a server or a mod",
            children=(
                _cmd("server", "Download a Fabric server", handlers.add_server, options=_VERSION_OPTIONS),
                _cmd("mod", "Download a mod version into the selected server", handlers.add_mod),
            ),
        ),
        _cmd(
            "generate",
            "Generate files for the selected server",
            children=(_cmd("start-script", "Write a start script", handlers.generate_start_script),),
        ),
        _cmd(
            "update",
            "Update the selected server",
            children=(
                _cmd("server", "Replace the server jar", handlers.update_server, options=_VERSION_OPTIONS),
            ),
        ),
        _cmd(
            "check",
            "Check the selected server",
            children=(_cmd("mods-support", "Check installed mods against a game version", handlers.check_mods_support),),
        ),
        _cmd("accept-eula", "Accept the Minecraft EULA for the selected server", handlers.accept_eula),
        _cmd("start", "Start the selected server", handlers.start_server),
        _cmd("exit", "Exit mcerv", handlers.exit_shell),
    ]
    topics = tuple(_cmd(node.name, node.help) for node in commands)
    commands.append(_cmd("help", "Show help", handlers.show_help, children=topics))
    return CommandTree(commands)


__all__ = [
    "build_command_tree",
]
