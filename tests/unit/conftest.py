from __future__ import annotations

from pathlib import Path

import pytest

from mcerv.shell import CommandNode, CommandTree, OptionSpec, create_state


class Recorder:
    def __init__(self) -> None:
        self.calls: list[tuple[str, list[str]]] = []

    def handler(self, name: str):
        def _handle(state, tokens: list[str]) -> None:
            self.calls.append((name, list(tokens)))

        return _handle


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def sample_tree(recorder: Recorder) -> CommandTree:
    """cmd1 -> sub1 (--opt1), sub2 (--name <v>); cmd2 has no handler."""
    return CommandTree(
        [
            CommandNode(
                name="cmd1",
                help="First command",
                handler=recorder.handler("cmd1"),
                children=(
                    CommandNode(
                        name="sub1",
                        options=(OptionSpec("opt1", "First option"),),
                        handler=recorder.handler("sub1"),
                    ),
                    CommandNode(
                        name="sub2",
                        help="Second sub-command",
                        options=(OptionSpec("name", "A name", takes_value=True),),
                        handler=recorder.handler("sub2"),
                    ),
                ),
            ),
            CommandNode(
                name="cmd2",
                children=(CommandNode(name="leaf", handler=recorder.handler("leaf")),),
            ),
        ]
    )


@pytest.fixture
def output() -> list[str]:
    return []


@pytest.fixture
def make_state(output: list[str], tmp_path: Path):
    created = []

    def _make(tree: CommandTree, instances_dir: Path | None = None):
        state = create_state(tree, instances_dir=instances_dir or tmp_path / "instances", writer=output.append)
        created.append(state)
        return state

    yield _make
    for state in created:
        state.close()
