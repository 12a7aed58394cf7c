"""Shell auto-completion for the command line tool."""

from __future__ import annotations

import os
import shutil
import sys
from typing import Dict, List, Mapping, Optional, Tuple

from kes import terminal

AUTOLOAD_CMD = "autoload -U +X bashcompinit && bashcompinit"


def _completions(cmd: str) -> Dict[str, List[str]]:
    return {
        cmd: ["server", "key", "policy", "identity", "log", "status", "metric", "update"],
        cmd + " server": ["--config", "--addr", "--auth"],
        cmd + " log": ["--audit", "--error", "--json", "--insecure"],
        cmd + " status": ["--short", "--api", "--json", "--color", "--insecure"],
        cmd + " metric": ["--rate", "--insecure"],
        cmd + " update": ["--downgrade", "--output", "--os", "--arch", "--minisign-key", "--insecure"],
        cmd + " key": ["create", "import", "info", "ls", "rm", "encrypt", "decrypt", "dek"],
        cmd + " key create": ["--insecure"],
        cmd + " key import": ["--insecure"],
        cmd + " key info": ["--insecure", "--json", "--color"],
        cmd + " key ls": ["--insecure", "--json", "--color"],
        cmd + " key rm": ["--insecure"],
        cmd + " key encrypt": ["--insecure"],
        cmd + " key decrypt": ["--insecure"],
        cmd + " key dek": ["--insecure"],
        cmd + " policy": ["info", "ls", "rm", "show"],
        cmd + " policy info": ["--insecure", "--json", "--color"],
        cmd + " policy ls": ["--insecure", "--json", "--color"],
        cmd + " policy rm": ["--insecure"],
        cmd + " policy show": ["--insecure", "--json"],
        cmd + " identity": ["new", "of", "info", "ls", "rm"],
        cmd + " identity new": ["--key", "--cert", "--force", "--ip", "--dns", "--expiry", "--encrypt"],
        cmd + " identity of": [],
        cmd + " identity info": ["--insecure", "--json", "--color"],
        cmd + " identity ls": ["--insecure", "--json", "--color"],
        cmd + " identity rm": ["--insecure"],
    }


def _supported_shell(shell: str) -> bool:
    return shell.endswith("zsh") or shell.endswith("bash")


def complete(cmd: str, environ: Optional[Mapping[str, str]] = None) -> bool:
    """Print completion candidates for the line in $COMP_LINE.

    Returns False, printing nothing, if not invoked by bash or zsh
    for completion; otherwise True.
    """
    env = os.environ if environ is None else environ
    shell = env.get("SHELL")
    if shell is None or not _supported_shell(shell):
        return False
    line = env.get("COMP_LINE")
    if line is None:
        return False

    completion = _completions(cmd)
    line = " ".join(field for field in line.split() if not field.startswith("-"))

    match = ""
    for key in completion:
        if line.startswith(key) and len(key) > len(match):
            match = key
    candidates = completion.get(match)
    if candidates is not None:
        rest = line[len(match):].strip()
        for candidate in candidates:
            if candidate.startswith(rest):
                print(candidate)
    return True


def is_completion_installed(
    filename: str, autoload_cmd: str, complete_cmd: str
) -> Tuple[bool, bool]:
    """Report whether the file holds lines starting with autoload_cmd
    and with complete_cmd.

    Exits the program if the file cannot be read.
    """
    autoload = installed = False
    try:
        with open(filename, encoding="utf-8", errors="replace") as file:
            for line in file:
                line = line.rstrip("\r\n")
                if line.startswith(autoload_cmd):
                    autoload = True
                if line.startswith(complete_cmd):
                    installed = True
    except OSError as exc:
        terminal.fatalf("failed to read '%s': %s", filename, exc)
    return autoload, installed


def _binary_path(argv0: str) -> str:
    found = shutil.which(argv0) if os.sep not in argv0 else None
    return os.path.abspath(found or argv0)


def install_auto_completion(
    environ: Optional[Mapping[str, str]] = None, argv0: Optional[str] = None
) -> None:
    """Add shell completion for this command to ~/.bashrc or ~/.zshrc.

    Exits the program on any failure.
    """
    env = os.environ if environ is None else environ
    program = argv0 if argv0 is not None else sys.argv[0]

    if sys.platform.startswith("win"):
        terminal.fatal("auto-completion is not available for windows")

    shell = env.get("SHELL")
    if shell is None:
        terminal.fatal("failed to detect shell. The env variable $SHELL is not defined")
        return

    if shell.endswith("zsh"):
        filename, is_zsh = ".zshrc", True
    elif shell.endswith("bash"):
        filename, is_zsh = ".bashrc", False
    else:
        terminal.fatalf("auto-completion for '%s' is not available", shell)
        return

    home = env.get("HOME") or os.path.expanduser("~")
    filename = os.path.join(home or "~", filename)

    complete_cmd = f"complete -o default -C {_binary_path(program)} {program}"

    has_autoload, has_complete = is_completion_installed(filename, AUTOLOAD_CMD, complete_cmd)
    if is_zsh and has_autoload and has_complete:
        print("Completion is already installed.")
        return
    if not is_zsh and has_complete:
        print("Completion is already installed.")
        return

    try:
        with open(filename, "a", encoding="utf-8") as file:
            if is_zsh and not has_autoload:
                file.write(AUTOLOAD_CMD + "\n")
            if not has_complete:
                file.write(complete_cmd + "\n")
            file.flush()
            os.fsync(file.fileno())
    except OSError as exc:
        terminal.fatalf("failed to add completion to '%s': %s", filename, exc)

    print(f"Added completion to '{filename}'")
    print()
    print(f"To uninstall completion remove the following lines from '{filename}':")
    if is_zsh and not has_autoload:
        print("  ", AUTOLOAD_CMD)
    if not has_complete:
        print("  ", complete_cmd)