"""Interactive prompts shown at confirmation points."""

from __future__ import annotations

from typing import List, Optional, Sequence

import questionary
from questionary import Style

STYLE = Style([
    ("qmark", "fg:cyan bold"),
    ("question", "bold"),
    ("answer", "fg:cyan"),
    ("pointer", "fg:cyan bold"),
    ("highlighted", "fg:cyan bold"),
    ("selected", "fg:green"),
    ("instruction", "fg:gray"),
])


def confirm(message: str, *, default: bool = True, assume_yes: bool = False) -> bool:
    """Ask a yes/no question.

    Returns False when the prompt is interrupted (questionary returns None).
    """
    if assume_yes:
        return True
    answer = questionary.confirm(message, default=default, style=STYLE).ask()
    return bool(answer)


def choose_many(
    message: str,
    choices: Sequence[str],
    checked: Sequence[str] = (),
) -> Optional[List[str]]:
    """Let the user pick several entries; None when interrupted."""
    options = [
        questionary.Choice(title=choice, value=choice, checked=choice in checked)
        for choice in choices
    ]
    return questionary.checkbox(message, choices=options, style=STYLE).ask()


def show_script(title: str, code: str) -> None:
    """Print a script in full so it can be reviewed before confirmation."""
    questionary.print(f"\n{title}:", style="bold")
    for line in code.strip().splitlines():
        questionary.print(f"  {line}", style="fg:cyan")
    questionary.print("")
