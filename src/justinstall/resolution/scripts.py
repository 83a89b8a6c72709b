"""Install-script heuristics for markdown documents.

Extraction (a single regex over fenced and indented code blocks) is kept
separate from evaluation. Rejection, keyword scoring and platform checks are
pure functions over the extracted text, driven by the data tables below.
"""

from __future__ import annotations

import math
import re
import textwrap
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Sequence, Tuple

from justinstall.core.logging import get_logger
from justinstall.core.models import ScriptSource

LOGGER = get_logger(__name__)

# Fenced blocks (``` or ~~~, optional info string) and indented blocks that
# follow a blank line.
CODE_BLOCK_PATTERN = re.compile(
    r"(?P<fence>```|~~~)[^\n]*\n(?P<fenced>.*?)(?P=fence)"
    r"|(?:\A|\n[ \t]*\n)(?P<indented>(?:(?: {4}|\t)[^\n]*(?:\n|\Z))+)",
    re.DOTALL,
)

PROMPT_PREFIX = re.compile(r"^(?:\$|%)\s+")
FLAG_TOKEN = re.compile(r"(?:^|\s)--?[A-Za-z][\w-]*")

# Any match marks the block as documentation rather than a runnable snippet.
DOCUMENTATION_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"\[[^\]\n]+\]\([^)\n]+\)"),
    re.compile(r"^\s*\|.*\|\s*$", re.MULTILINE),
    re.compile(r"\|\s*:?-{3,}"),
    re.compile(r"`"),
    # list items and block quotes
    re.compile(r"^(?:[*+>-]|\d+[.)])\s", re.MULTILINE),
)

# Commands that show or configure something but never install anything.
# "#" stands for a block that opens with a comment or a heading.
INFORMATIONAL_COMMANDS = frozenset({
    "echo",
    "cat",
    "cd",
    "export",
    "ls",
    "pwd",
    "source",
    "alias",
    "printf",
    "set",
    "unset",
    "which",
    "mkdir",
    "git",
    "#",
})

PACKAGE_MANAGERS: Tuple[str, ...] = (
    "brew", "port", "apt-get", "apt", "dnf", "yum", "pacman", "zypper", "apk", "snap",
    "flatpak", "nix-env", "pipx", "pip3", "pip", "npm", "pnpm", "yarn", "cargo", "go",
    "gem", "choco", "scoop", "winget", "conda", "mamba",
)

# First words a bare release body may start its lines with to be run as a script.
RUNNABLE_COMMANDS = frozenset(PACKAGE_MANAGERS) | frozenset({
    "curl",
    "wget",
    "sh",
    "bash",
    "zsh",
    "make",
    "iwr",
    "irm",
    "iex",
    "powershell",
    "pwsh",
    "python",
    "python3",
    "chmod",
    "tar",
    "unzip",
})

PIPE_TO_SHELL = r"\|\s*(?:sudo\s+)?(?:ba|z|da|k)?sh\b"
PACKAGE_INSTALL = (
    r"(?<![\w-])(?:" + "|".join(re.escape(name) for name in PACKAGE_MANAGERS) + r")"
    r"\s+(?:-\S+\s+)*(?:install|add)\b"
    r"|\bpacman\s+-S\w*\b"
)

KEYWORD_TIERS: Dict[str, Tuple[Pattern[str], ...]] = {
    "high": (
        re.compile(PIPE_TO_SHELL),
        re.compile(r"\bcurl\b"),
        re.compile(r"\bwget\b"),
        re.compile(r"\b(?:iwr|irm|Invoke-WebRequest|Invoke-RestMethod)\b", re.IGNORECASE),
    ),
    # install invocations, not the bare word
    "medium": (
        re.compile(PACKAGE_INSTALL),
        re.compile(r"\bmake\s+(?:-\S+\s+)*install\b"),
        re.compile(r"(?:install|setup)[\w-]*\.(?:sh|bash|ps1|py)\b", re.IGNORECASE),
    ),
    # package managers, counted only with an install verb
    "low": (
        re.compile(PACKAGE_INSTALL),
    ),
}

DOC_PUNCTUATION_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"\*\*"),
    re.compile(r":\s*$", re.MULTILINE),
    re.compile(r"^>\s", re.MULTILINE),
    re.compile(r"\b(?:e\.g|i\.e)\."),
    re.compile(r"`[^`\n]+`"),
)


def _patterns(*expressions: str) -> Tuple[Pattern[str], ...]:
    return tuple(re.compile(expression, re.IGNORECASE) for expression in expressions)


_WINDOWS_COMMANDS = (
    r"\b(?:choco|winget|scoop)\b",
    r"\b(?:powershell|pwsh)\b",
    r"\b(?:iwr|irm|iex|Invoke-WebRequest|Invoke-RestMethod)\b",
    r"\.exe\b",
    r"\.msi\b",
)
_LINUX_PACKAGE_MANAGERS = (
    r"\b(?:apt-get|apt|dnf|yum|pacman|zypper)\b",
    r"\bapk\s+add\b",
    r"\b(?:snap|flatpak)\s+install\b",
    r"\.deb\b",
    r"\.rpm\b",
)

# Per host OS: command families that fit the host, and ones that rule a script out.
PLATFORM_SCRIPT_PATTERNS: Dict[str, Dict[str, Tuple[Pattern[str], ...]]] = {
    "darwin": {
        "compatible": _patterns(
            r"\bbrew\b", r"\bcurl\b", r"\bwget\b", r"\.sh\b", PIPE_TO_SHELL,
            r"\bport\s+install\b", r"\.pkg\b", r"\.dmg\b",
        ),
        "incompatible": _patterns(*_LINUX_PACKAGE_MANAGERS, *_WINDOWS_COMMANDS),
    },
    "linux": {
        "compatible": _patterns(
            r"\b(?:apt-get|apt|dnf|yum|pacman|zypper|apk|snap|flatpak)\b",
            r"\bcurl\b", r"\bwget\b", r"\.sh\b", PIPE_TO_SHELL, r"\bbrew\b",
            r"\.deb\b", r"\.rpm\b", r"\.appimage\b",
        ),
        "incompatible": _patterns(
            r"\.dmg\b", r"\.pkg\b", r"\bhdiutil\b", r"\bport\s+install\b", r"--cask\b",
            *_WINDOWS_COMMANDS,
        ),
    },
    "windows": {
        "compatible": _patterns(*_WINDOWS_COMMANDS),
        "incompatible": _patterns(
            r"\bbrew\b", r"\bsudo\b", PIPE_TO_SHELL, r"\.sh\b", r"\.dmg\b", r"\.pkg\b",
            r"\bhdiutil\b", *_LINUX_PACKAGE_MANAGERS,
        ),
    },
}


@dataclass
class ScriptRules:
    """Thresholds and weights of the install-script heuristics."""

    max_lines: int = 10
    max_line_length: int = 200
    max_flag_tokens: int = 8
    high_weight: int = 30
    medium_weight: int = 15
    low_weight: int = 5
    two_line_bonus: int = 20
    three_line_bonus: int = 10
    doc_punctuation_penalty: int = 25
    compatible_bonus: int = 10
    incompatible_penalty: int = 100


DEFAULT_RULES = ScriptRules()


@dataclass(frozen=True)
class PlatformVerdict:
    compatible: bool
    adjustment: int = 0


@dataclass
class ScriptSnippet:
    """A code block that passed rejection, with its scores."""

    code: str
    source: ScriptSource
    score: int
    verdict: PlatformVerdict

    @property
    def total(self) -> int:
        """Keyword score plus the platform adjustment."""
        return self.score + self.verdict.adjustment

    @property
    def normalized(self) -> str:
        return normalize_whitespace(self.code)


def extract_code_blocks(markdown: str) -> List[str]:
    """Return the fenced and indented code blocks of a markdown document."""
    blocks: List[str] = []
    for match in CODE_BLOCK_PATTERN.finditer(markdown):
        if match.group("fenced") is not None:
            code = match.group("fenced")
        else:
            code = textwrap.dedent(match.group("indented").expandtabs(4))
        code = code.strip()
        if code:
            blocks.append(code)
    return blocks


def normalize_whitespace(code: str) -> str:
    return " ".join(code.split())


def strip_prompt(line: str) -> str:
    """Remove a leading shell prompt such as ``$ ``."""
    return PROMPT_PREFIX.sub("", line)


def content_lines(code: str) -> List[str]:
    """Non-empty lines of a block with prompts removed."""
    lines = []
    for line in code.splitlines():
        stripped = strip_prompt(line.strip())
        if stripped:
            lines.append(stripped)
    return lines


def first_command(lines: Sequence[str]) -> Optional[str]:
    """Return the first command word of a block, skipping a shebang and sudo.

    A leading comment or markdown heading is reported as ``#``.
    """
    for line in lines:
        if line.startswith("#!"):
            continue
        if line.startswith("#"):
            return "#"
        words = line.split()
        if words and words[0] == "sudo":
            words = words[1:]
        return words[0].lower() if words else None
    return None


def rejection_reason(code: str, rules: ScriptRules = DEFAULT_RULES) -> Optional[str]:
    """Return why a block cannot be an install snippet, or None if it can.

    These checks run before scoring and disqualify regardless of keywords.
    """
    lines = content_lines(code)
    if not lines:
        return "empty block"
    if len(lines) > rules.max_lines:
        return f"{len(lines)} lines exceeds {rules.max_lines}"
    for line in lines:
        if len(line) > rules.max_line_length:
            return f"line longer than {rules.max_line_length} characters"

    text = "\n".join(lines)
    flags = len(FLAG_TOKEN.findall(text))
    if flags > rules.max_flag_tokens:
        return f"{flags} flags exceeds {rules.max_flag_tokens}"
    for pattern in DOCUMENTATION_PATTERNS:
        if pattern.search(text):
            return "documentation markup"

    command = first_command(lines)
    if command in INFORMATIONAL_COMMANDS:
        return f"starts with informational command '{command}'"
    return None


def score_script(code: str, rules: ScriptRules = DEFAULT_RULES) -> int:
    """Weighted keyword score of a block, floored at zero.

    A block with no keyword hit scores zero; short-snippet bonuses and the
    punctuation penalty only apply on top of a keyword hit.
    """
    lines = content_lines(code)
    if not lines:
        return 0
    text = "\n".join(lines)

    score = 0
    for tier, patterns in KEYWORD_TIERS.items():
        weight = getattr(rules, f"{tier}_weight")
        for pattern in patterns:
            score += weight * len(pattern.findall(text))
    if score == 0:
        return 0

    if len(lines) <= 2:
        score += rules.two_line_bonus
    elif len(lines) <= 3:
        score += rules.three_line_bonus

    if any(pattern.search(text) for pattern in DOC_PUNCTUATION_PATTERNS):
        score -= rules.doc_punctuation_penalty

    return max(0, score)


def is_install_script(code: str, rules: ScriptRules = DEFAULT_RULES) -> bool:
    """Whether a piece of text reads like a runnable install snippet."""
    return rejection_reason(code, rules) is None and score_script(code, rules) > 0


def reads_like_commands(text: str) -> bool:
    """Whether every line of plain text starts with a runnable command.

    Continuation lines after a trailing backslash are not checked. Release
    notes without a code block must pass this before they are scored.
    """
    lines = content_lines(text)
    if not lines:
        return False
    continued = False
    for line in lines:
        if continued:
            continued = line.endswith("\\")
            continue
        continued = line.endswith("\\")
        words = line.split()
        if words[0] == "sudo" and len(words) > 1:
            words = words[1:]
        command = words[0]
        if command.lower() in RUNNABLE_COMMANDS:
            continue
        if command.startswith(("./", "/", "~/")) or command.endswith((".sh", ".ps1")):
            continue
        return False
    return True


def evaluate_platform(code: str, host_os: str, rules: ScriptRules = DEFAULT_RULES) -> PlatformVerdict:
    """Match a script against the host's compatible and incompatible command families."""
    patterns = PLATFORM_SCRIPT_PATTERNS.get(host_os)
    if patterns is None:
        return PlatformVerdict(compatible=True)

    if any(p.search(code) for p in patterns["incompatible"]):
        return PlatformVerdict(compatible=False, adjustment=-rules.incompatible_penalty)
    if any(p.search(code) for p in patterns["compatible"]):
        return PlatformVerdict(compatible=True, adjustment=rules.compatible_bonus)
    return PlatformVerdict(compatible=True)


def deduplicate(snippets: Sequence[ScriptSnippet]) -> List[ScriptSnippet]:
    """Keep the highest-scoring occurrence of each whitespace-normalized script."""
    best: Dict[str, ScriptSnippet] = {}
    for snippet in snippets:
        key = snippet.normalized
        current = best.get(key)
        if current is None or snippet.total > current.total:
            best[key] = snippet
    return list(best.values())


def detect_install_scripts(
    documents: Sequence[Tuple[ScriptSource, str]],
    host_os: str,
    rules: ScriptRules = DEFAULT_RULES,
) -> List[ScriptSnippet]:
    """Find install scripts in markdown documents for the given host OS.

    Args:
        documents: (source, markdown) pairs, e.g. release notes then README.
        host_os: Host operating system id.
        rules: Thresholds and weights.

    Returns:
        The top half (rounded up, at least one) of the compatible,
        deduplicated scripts, best first. Empty when nothing qualifies.
    """
    found: List[ScriptSnippet] = []
    for source, text in documents:
        if not text:
            continue
        blocks = extract_code_blocks(text)
        if not blocks and source == ScriptSource.RELEASE_NOTES and reads_like_commands(text):
            blocks = [text.strip()]

        for code in blocks:
            reason = rejection_reason(code, rules)
            if reason is not None:
                LOGGER.debug(f"Rejected {source.value} block: {reason}")
                continue
            score = score_script(code, rules)
            if score <= 0:
                continue
            verdict = evaluate_platform(code, host_os, rules)
            if not verdict.compatible:
                LOGGER.debug(f"Dropped {source.value} script incompatible with {host_os}")
                continue
            found.append(ScriptSnippet(code=code, source=source, score=score, verdict=verdict))

    unique = deduplicate(found)
    unique.sort(key=lambda snippet: snippet.total, reverse=True)
    if not unique:
        return []
    keep = max(1, math.ceil(len(unique) / 2))
    return unique[:keep]


def prepare_script(code: str) -> str:
    """Return the runnable form of a snippet, with shell prompts removed."""
    return "\n".join(strip_prompt(line) for line in code.strip().splitlines())
