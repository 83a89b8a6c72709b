"""Select-phase units: choose one candidate and confirm it with the user."""

from __future__ import annotations

from typing import Optional

from justinstall.core import prompts
from justinstall.core.context import ResolutionContext
from justinstall.core.errors import ExclusionReason, NoCompatibleAsset, UserAborted
from justinstall.core.logging import get_logger
from justinstall.pipeline.unit import Unit
from justinstall.resolution.scoring import dominant_exclusion, rank_candidates

LOGGER = get_logger(__name__)

MAX_ALTERNATIVES = 3


def describe_exclusion(reason: Optional[ExclusionReason], context: ResolutionContext) -> str:
    """Explain which constraint left no candidate standing."""
    total = len(context.candidates)
    if reason == ExclusionReason.PLATFORM:
        return f"No compatible asset: none of {total} candidates targets {context.profile.os}"
    if reason == ExclusionReason.ARCHITECTURE:
        return (
            f"No compatible asset: none of {total} candidates matches the "
            f"{context.profile.arch} architecture on {context.profile.os}"
        )
    if reason == ExclusionReason.CAPABILITY:
        formats = sorted({
            c.extension for c in context.candidates
            if c.exclusion_reason == ExclusionReason.CAPABILITY
        })
        return (
            "No compatible asset: this host lacks the tools to install "
            f"{', '.join('.' + f for f in formats)}"
        )
    return f"No compatible asset: none of {total} candidates is an installable file"


class AssetSelector(Unit):
    """Picks the top-ranked surviving candidate.

    Reads ``candidates`` and ``release_error``; writes ``selected`` and
    ``alternatives``. Alternatives are logged only and never substituted.
    """

    @property
    def name(self) -> str:
        return "asset-selector"

    def should_run(self, context: ResolutionContext) -> bool:
        return context.selected is None

    def execute(self, context: ResolutionContext) -> None:
        ranked = rank_candidates(context.candidates)
        if not ranked:
            if not context.candidates:
                if context.release_error is not None:
                    raise context.release_error
                raise NoCompatibleAsset(f"No installable candidates found for '{context.raw_input}'")
            reason = dominant_exclusion(context.candidates)
            raise NoCompatibleAsset(describe_exclusion(reason, context), reason=reason)

        context.selected = ranked[0]
        context.alternatives = ranked[1:1 + MAX_ALTERNATIVES]
        LOGGER.info(
            f"Selected {context.selected.describe()} from {context.selected.provider} "
            f"(priority {context.selected.priority})"
        )
        for alternative in context.alternatives:
            LOGGER.debug(f"Alternative: {alternative.name} (priority {alternative.priority})")


class UserConfirmation(Unit):
    """Asks the user to approve the selected candidate.

    Scripts are shown in full before the question. Declining raises UserAborted.
    """

    @property
    def name(self) -> str:
        return "user-confirmation"

    def should_run(self, context: ResolutionContext) -> bool:
        return context.selected is not None

    def execute(self, context: ResolutionContext) -> None:
        selected = context.selected
        if selected.is_script:
            prompts.show_script(selected.name, selected.script_code)
            question = "Run this install script?"
        else:
            question = f"Ok to install {selected.describe()}?"

        if not prompts.confirm(question, assume_yes=context.assume_yes):
            raise UserAborted(f"Installation of {selected.name} declined")
