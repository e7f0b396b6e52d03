"""
Text of the countdown toast shown while a deletion is pending or has failed.
"""

from dataclasses import dataclass
from typing import Optional

from ..core.enums import CountdownState
from .countdown_controller import CountdownView


@dataclass(frozen=True)
class CountdownToast:
    headline: str
    hint: str
    show_seconds: bool
    can_undo: bool = True

    @classmethod
    def from_view(cls, view: CountdownView) -> Optional["CountdownToast"]:
        """Build the toast for a view, or None when nothing is pending."""
        if not view.active:
            return None
        if view.error:
            return cls(headline=view.error, hint="You can undo or dismiss.", show_seconds=False)
        if view.state is CountdownState.EXECUTING:
            return cls(headline=f"{view.message}...", hint="Deleting now", show_seconds=False, can_undo=False)
        return cls(
            headline=f"{view.message} in {view.seconds_left}s...",
            hint="Click undo to cancel",
            show_seconds=True,
        )

    def render(self) -> str:
        return f"{self.headline}\n{self.hint}"
