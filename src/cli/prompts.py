"""Interactive confirmation of local-only deletions."""

import logging
from typing import Callable, Dict, Optional, Sequence

from rich.console import Console
from rich.prompt import Confirm

from src.sync_engine.models import LocalOnlyCandidate

logger = logging.getLogger(__name__)


class TerminalConfirmer:
    """Asks on the terminal whether each local-only item should be deleted.

    All questions are asked before any deletion happens. The optional
    ``before_prompt`` callback runs once before the first question, so the
    caller can stop a running spinner.

    Example:
        >>> confirmer = TerminalConfirmer(console)
        >>> answers = confirmer.confirm(candidates)
        >>> answers["a1"]
        True
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        before_prompt: Optional[Callable[[], None]] = None,
    ):
        self.console = console or Console()
        self.before_prompt = before_prompt

    def confirm(self, candidates: Sequence[LocalOnlyCandidate]) -> Dict[str, bool]:
        answers: Dict[str, bool] = {}
        if not candidates:
            return answers

        if self.before_prompt is not None:
            self.before_prompt()

        self.console.print(
            f"\n[bold]{len(candidates)} item(s) exist only locally.[/bold]"
        )
        for candidate in candidates:
            key = candidate.key
            if key is None or key in answers:
                continue
            kind = "resource" if candidate.is_resource else "item"
            question = f"Delete local {kind} {candidate.item.label}"
            if candidate.item.path and candidate.item.path != candidate.item.label:
                question += f" ({candidate.item.path})"
            answers[key] = Confirm.ask(f"{question}?", console=self.console, default=False)

        confirmed = sum(1 for answer in answers.values() if answer)
        logger.info(f"User confirmed {confirmed} of {len(answers)} local deletion(s)")
        return answers
