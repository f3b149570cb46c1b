"""Search state machine - gates when a new nearby search is issued.

Uses python-statemachine with the model pattern: SearchContext is the model
and holds the center, radius and request generation across transitions.

Pull model:
    Changing the center only marks a search as pending. The pending flag is
    consumed by a separate trigger (MarkerReconciler.run_pending_search), so
    repeated center changes do not each fire a network call.

States (2 states):
    IDLE: No provider query owed
    PENDING: A provider query is owed for the current center

Transitions:
    IDLE|PENDING -> PENDING: request_search (new center requested)
    PENDING -> IDLE: complete_search (provider answered or failed)
    IDLE|PENDING -> IDLE: reset_search (collection cleared)

Generation:
    Every request_search and reset_search increments SearchContext.generation.
    An in-flight search remembers the generation it was issued for; if the
    generation moved on while the provider was answering, the result belongs
    to a superseded request and is discarded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from statemachine import State, StateMachine

from placefinder.constants import MapConfig, SearchConfig
from placefinder.model.position import Position

logger = logging.getLogger(__name__)


@dataclass
class SearchContext:
    """Model for SearchStateMachine.

    Note: The 'state' field is managed by python-statemachine when this
    object is passed as the model.
    """

    state: str | None = None
    center: Position = field(
        default_factory=lambda: Position(lat=MapConfig.START_CENTER_LAT, lng=MapConfig.START_CENTER_LNG)
    )
    radius_m: int = SearchConfig.DEFAULT_RADIUS_M
    generation: int = 0

    def __repr__(self) -> str:
        return (
            f"SearchContext(state={self.state}, center={self.center}, "
            f"radius_m={self.radius_m}, generation={self.generation})"
        )


class SearchLoggingListener:
    """Listener that logs every search state transition."""

    def after_transition(self, event: str, source: State, target: State) -> None:
        logger.info(f"[STATE] {source.name} --({event})--> {target.name}")


class SearchStateMachine(StateMachine):
    """Idle/Pending state machine for nearby searches.

    See module docstring for the transition table.
    """

    idle = State("Idle", initial=True)
    pending = State("Pending")

    request_search = idle.to(pending) | pending.to(pending)
    complete_search = pending.to(idle)
    reset_search = idle.to(idle) | pending.to(idle)

    # ==========================================================================
    # State Check Properties
    # ==========================================================================

    @property
    def is_idle(self) -> bool:
        return self.idle.is_active

    @property
    def is_pending(self) -> bool:
        return self.pending.is_active

    # ==========================================================================
    # Transition Actions (before_* hooks)
    # ==========================================================================

    def before_request_search(self, center: Position | None = None) -> None:
        """Action before marking a search pending: store center, bump generation."""
        if center is not None:
            self.context.center = center
        self.context.generation += 1

    def before_reset_search(self) -> None:
        """Action before reset_search: bump generation so in-flight results are discarded."""
        self.context.generation += 1

    # ==========================================================================
    # Initialization
    # ==========================================================================

    def __init__(self, context: SearchContext | None = None, start_value: str | None = None) -> None:
        """Initialize state machine with model pattern.

        Args:
            context: Shared context/model (creates new if None)
            start_value: Optional initial state value (for restoring state)
        """
        model = context or SearchContext()
        super().__init__(model=model, start_value=start_value)

    @property
    def context(self) -> SearchContext:
        """Alias for model."""
        return self.model

    def get_state_name(self) -> str:
        """Get current state name for display."""
        return self.current_state.name

    def __repr__(self) -> str:
        return f"SearchStateMachine(state={self.get_state_name()}, model={self.context!r})"

    @staticmethod
    def create(add_logging_listener: bool = True) -> tuple["SearchStateMachine", SearchContext]:
        """Factory method to create state machine with context and optional logging listener.

        Returns:
            Tuple of (SearchStateMachine, SearchContext)
        """
        context = SearchContext()
        sm = SearchStateMachine(context=context)
        if add_logging_listener:
            sm.add_listener(SearchLoggingListener())
        return sm, context
