"""Open a status view for the repository under a point in the outline."""

import shlex
import subprocess
import sys
from pathlib import Path
from typing import Callable, Optional

from error_handler import ExternalToolError
from git_utils import ensure_repo_root, which
from logging_config import get_logger
from outline import OutlineNode
from overview import GITDIR

logger = get_logger(__name__)

Launcher = Callable[[Path, str], None]


def _unix_terminal_candidates(cwd: Path, cmd: str) -> list[tuple[str, list[str]]]:
    script = f"cd {shlex.quote(str(cwd))} && {cmd}; exec bash"
    return [
        ("x-terminal-emulator", ["-e", "bash", "-lc", script]),
        ("gnome-terminal", ["--", "bash", "-lc", script]),
        ("konsole", ["-e", "bash", "-lc", script]),
        ("xfce4-terminal", ["-e", "bash", "-lc", script]),
        ("xterm", ["-e", "bash", "-lc", script]),
        ("alacritty", ["-e", "bash", "-lc", script]),
        ("kitty", ["-e", "sh", "-lc", f"cd {shlex.quote(str(cwd))} && {cmd}; exec sh"]),
    ]


def launch_in_terminal(cwd: Path, cmd: str):
    """Open a new terminal window and run `cmd` in cwd."""
    # Windows
    if sys.platform.startswith("win"):
        wt = which("wt")
        if wt:
            subprocess.Popen([wt, "new-tab", "cmd", "/k", f'cd /d "{cwd}" && {cmd}'], cwd=str(cwd))
            return
        subprocess.Popen(["cmd", "/k", f'cd /d "{cwd}" && {cmd}'], cwd=str(cwd))
        return

    # macOS
    if sys.platform == "darwin":
        osa = f"""
        tell application "Terminal"
            activate
            do script "cd {shlex.quote(str(cwd))} && {cmd}"
        end tell
        """
        subprocess.Popen(["osascript", "-e", osa], cwd=str(cwd))
        return

    # Linux / Unix
    for term, args in _unix_terminal_candidates(cwd, cmd):
        if which(term):
            subprocess.Popen([term] + args, cwd=str(cwd))
            return
    raise ExternalToolError([cmd], None, "no supported terminal emulator found")


def repository_at(node: Optional[OutlineNode]) -> Optional[Path]:
    """Repository root recorded on the node or one of its ancestors."""
    if node is None:
        return None
    gitdir = node.inherited_property(GITDIR)
    return Path(gitdir) if gitdir else None


def open_status(repo_root: Path, command: str = "git status", launcher: Launcher = launch_in_terminal):
    """Run the status command for a repository in a terminal."""
    logger.info(f"Opening status view for {repo_root}: {command}")
    launcher(repo_root, command)


def status_at(
    node: Optional[OutlineNode],
    prompt: Callable[[], Optional[str]],
    command: str = "git status",
    launcher: Launcher = launch_in_terminal,
) -> Optional[Path]:
    """Open the status view for the repository containing `node`.

    When no repository is recorded above the node, `prompt` is asked for a
    directory instead. Returns the repository root used, or None if the prompt
    was cancelled. A prompted directory outside any repository raises
    RepositoryNotFoundError.
    """
    root = repository_at(node)
    if root is None:
        answer = prompt()
        if not answer:
            return None
        root = ensure_repo_root(answer)
    open_status(root, command, launcher)
    return root
