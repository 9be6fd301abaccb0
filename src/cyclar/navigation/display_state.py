"""
Displayed route state, owned by the UI layer.

The refresher and the device sender only report results; this is the one
place that decides how a result changes what is on screen.
"""

from dataclasses import dataclass, field

from ..core.models import DirectionStep, LiveState, LiveUpdate, RouteResult


@dataclass
class DisplayState:
    """
    Step list and messages shown to the rider.

    Attributes:
        steps: Steps currently displayed (replaced wholesale, never merged)
        error: Most recent error, cleared by the next success
        advisory: Transient notice such as 'waiting for position'
    """

    steps: tuple[DirectionStep, ...] = field(default_factory=tuple)
    error: str | None = None
    advisory: str | None = None

    def apply_route_result(self, result: RouteResult) -> None:
        if result.ok:
            self.steps = result.steps
            self.error = None
        else:
            self.error = result.error
        self.advisory = None

    def apply_live_update(self, update: LiveUpdate) -> None:
        if update.state == LiveState.UPDATED:
            self.steps = update.steps
            self.error = None
            self.advisory = None
        elif update.state == LiveState.WAITING:
            self.advisory = update.message
        elif update.state == LiveState.ERROR:
            self.error = update.message
            self.advisory = None
        elif update.state == LiveState.STOPPED:
            self.advisory = "Live mode stopped"

    def clear_messages(self) -> None:
        """Clear error and advisory (live mode switched off)."""
        self.error = None
        self.advisory = None

    def live_started(self) -> None:
        """Drop leftover messages and announce live mode."""
        self.clear_messages()
        self.advisory = "Live mode on"

    @property
    def message(self) -> str:
        """Status line text: error wins over advisory."""
        return self.error or self.advisory or ""
