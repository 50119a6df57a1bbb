"""Decides whether mutating actions are carried out."""

from enum import Enum
from typing import Callable

from ..utils.output import confirm, print_what_if


class ExecutionMode(str, Enum):
    """How mutating actions are handled."""

    EXECUTE = "execute"
    DRY_RUN = "dry-run"
    CONFIRM = "confirm"


class ActionGate:
    """Callable ``gate(action, target) -> bool`` shared by every mutating step.

    In dry-run mode every action is reported and denied, in confirm mode the
    user is asked each time, and in execute mode everything is allowed.
    """

    def __init__(
        self,
        mode: ExecutionMode = ExecutionMode.EXECUTE,
        ask: Callable[[str], bool] | None = None,
    ) -> None:
        """Initialize the gate.

        Args:
            mode: Execution mode
            ask: Confirmation prompt used in confirm mode
        """
        self.mode = mode
        self._ask = ask or confirm

    @property
    def preview(self) -> bool:
        """True when actions are only reported."""
        return self.mode == ExecutionMode.DRY_RUN

    def __call__(self, action: str, target: str) -> bool:
        if self.mode == ExecutionMode.DRY_RUN:
            print_what_if(f'{action} on "{target}"')
            return False
        if self.mode == ExecutionMode.CONFIRM:
            return self._ask(f'{action} on "{target}"?')
        return True
