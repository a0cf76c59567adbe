"""
Session Controller - The command surface over one puzzle session.

The controller:
1. Holds the current PuzzleState and a Reducer
2. Stamps every action with its clock
3. Relays notifications to subscribed listeners
4. Answers the presentation questions the state alone does not
   (interaction mode, what the target and board look like right now)

The state itself stays immutable; the controller only swaps references.
"""

from __future__ import annotations
from typing import Callable
import logging
import math
import time

from ..engine_core.state import PuzzleState, Difficulty, Obstacle
from ..engine_core.action import Action, ActionResult, Notification
from ..engine_core.config import RuleConfig
from ..engine_core.randomness import RandomSource
from ..engine_core.reducer import Reducer
from ..engine_core.move_generator import MoveGenerator, InteractionMode

logger = logging.getLogger(__name__)

Listener = Callable[[Notification], None]

HIDDEN_DIGIT = "?"


class SessionController:
    """
    Drives one session through the reducer.

    Usage:
        controller = SessionController(rng=RandomSource(seed=7))
        controller.subscribe(print)
        controller.start_game("12345678")
        controller.move(0, 1)
    """

    def __init__(
        self,
        rng: RandomSource | None = None,
        config: RuleConfig | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or RuleConfig()
        self.reducer = Reducer(rng=rng or RandomSource(), config=self.config)
        self.move_generator = MoveGenerator(columns=self.config.grid_columns)
        self.clock = clock
        self.last_result: ActionResult | None = None
        self._state = PuzzleState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> PuzzleState:
        return self._state

    def snapshot(self) -> PuzzleState:
        """Bring the clock up to date and return the current state."""
        self.tick()
        return self._state

    # =========================================================================
    # Commands
    # =========================================================================

    def dispatch(self, action: Action) -> ActionResult:
        """Apply an action, keep the resulting state and notify listeners."""
        if action.timestamp is None:
            action.timestamp = self.clock()

        result = self.reducer.apply(self._state, action)
        if result.new_state is not None:
            self._state = result.new_state
        self.last_result = result

        if not result.success:
            logger.debug("%s rejected: %s", action.action_type.value, result.error)

        self._notify(result.notifications)
        return result

    def start_game(self, identifier: str, difficulty: Difficulty = Difficulty.EASY) -> ActionResult:
        return self.dispatch(Action.start_game(identifier, difficulty))

    def move(self, from_index: int, to_index: int) -> ActionResult:
        return self.dispatch(Action.move(from_index, to_index))

    def activate_power_up(self, inventory_index: int) -> ActionResult:
        return self.dispatch(Action.use_power_up(inventory_index))

    def next_level(self) -> ActionResult:
        return self.dispatch(Action.next_level())

    def reset_game(self) -> ActionResult:
        return self.dispatch(Action.reset_game())

    def toggle_help(self, open_help: bool) -> ActionResult:
        return self.dispatch(Action.toggle_help(open_help))

    def tick(self, now: float | None = None) -> ActionResult:
        return self.dispatch(Action.tick(self.clock() if now is None else now))

    # =========================================================================
    # Presentation queries
    # =========================================================================

    def interaction_mode(self) -> InteractionMode:
        return self.move_generator.mode(self._state)

    def is_legal_move(self, from_index: int, to_index: int) -> bool:
        return self.move_generator.is_legal(self._state, from_index, to_index)

    def legal_moves(self) -> list[tuple[int, int]]:
        return self.move_generator.generate(self._state)

    def display_target(self) -> list[str]:
        """The target as the player sees it; reversed under the Reverse obstacle."""
        target = list(self._state.target_sequence)
        if self._state.active_obstacle == Obstacle.REVERSE:
            target.reverse()
        return target

    def is_blind(self, now: float | None = None) -> bool:
        """Digits are hidden during the opening seconds of the Blind obstacle."""
        state = self._state
        if state.active_obstacle != Obstacle.BLIND or state.obstacle_started_at is None:
            return False
        now = self.clock() if now is None else now
        return now < state.obstacle_started_at + self.config.blind_duration

    def display_sequence(self, now: float | None = None) -> list[str]:
        if self.is_blind(now):
            return [HIDDEN_DIGIT] * len(self._state.current_sequence)
        return list(self._state.current_sequence)

    def obstacle_seconds_remaining(self, now: float | None = None) -> int | None:
        expires_at = self._state.obstacle_expires_at
        if self._state.active_obstacle is None or expires_at is None:
            return None
        now = self.clock() if now is None else now
        return max(0, math.ceil(expires_at - now))

    # =========================================================================
    # Listeners
    # =========================================================================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a notification listener. Returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, notifications: list[Notification]):
        for listener in list(self._listeners):
            for notification in notifications:
                try:
                    listener(notification)
                except Exception:
                    logger.exception("Notification listener %r failed; removing it", listener)
                    if listener in self._listeners:
                        self._listeners.remove(listener)
                    break
