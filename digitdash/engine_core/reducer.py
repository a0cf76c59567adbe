"""
Reducer - Applies actions to puzzle state.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- Pure with respect to its inputs: (state, action, rng) -> new_state
- Single pass: every derived field (locks, effects, score) is computed
  from one consistent prior snapshot
- Total: no-ops and rejections return the unchanged state with
  notifications instead of raising
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import time

from .state import PuzzleState, GameStatus, Difficulty, PowerUp, Obstacle
from .action import (
    Action, ActionType, ActionResult, Notification, ReasonCode, SuggestedMove,
)
from .config import RuleConfig
from .randomness import RandomSource
from .sequence import (
    InvalidIdentifier, derive_target, shuffle, swapped, is_solved, compute_score,
)
from .effects import random_power_up, random_obstacle, obstacle_warning
from .move_generator import best_swap

logger = logging.getLogger(__name__)

PowerUpOutcome = tuple[PuzzleState, list[Notification], SuggestedMove | None]


@dataclass
class Reducer:
    """
    Reducer applies actions to puzzle state.

    Stateless - all state is in PuzzleState.
    The random source and rule config are injected.
    """
    rng: RandomSource = field(default_factory=RandomSource)
    config: RuleConfig = field(default_factory=RuleConfig)

    def apply(self, state: PuzzleState, action: Action) -> ActionResult:
        """
        Apply an action to the puzzle state.

        Returns ActionResult with the new state (or the unchanged state).
        """
        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code="NO_HANDLER",
                state=state,
            )

        now = action.timestamp if action.timestamp is not None else time.time()
        try:
            return handler(state, action, now)
        except Exception as e:
            logger.exception("Handler for %s failed", action.action_type.value)
            return ActionResult.failure(str(e), error_code="HANDLER_ERROR", state=state)

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.START_GAME: self._handle_start_game,
            ActionType.MOVE: self._handle_move,
            ActionType.USE_POWER_UP: self._handle_use_power_up,
            ActionType.NEXT_LEVEL: self._handle_next_level,
            ActionType.RESET_GAME: self._handle_reset_game,
            ActionType.TOGGLE_HELP: self._handle_toggle_help,
            ActionType.TICK: self._handle_tick,
        }
        return handlers.get(action_type)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def _handle_start_game(self, state: PuzzleState, action: Action, now: float) -> ActionResult:
        """Handle start game. A malformed identifier leaves the state untouched."""
        payload = action.payload
        difficulty = payload.difficulty or Difficulty.EASY

        try:
            target = derive_target(
                payload.identifier,
                length=self.config.target_length,
                min_length=self.config.min_identifier_length,
            )
        except InvalidIdentifier as e:
            logger.info("Rejected identifier %r: %s", payload.identifier, e)
            return ActionResult.failure(
                str(e),
                error_code=ReasonCode.INVALID_IDENTIFIER.value,
                state=state,
                notifications=[Notification.error(str(e), ReasonCode.INVALID_IDENTIFIER)],
            )

        new_state, notes = self._initialize(
            payload.identifier, target, difficulty, level=1, streak=0, now=now
        )
        logger.info(
            "Started puzzle of %d digits at %s difficulty",
            len(target), difficulty.value,
        )
        return ActionResult.success_with_state(new_state, notes)

    def _initialize(
        self,
        identifier: str,
        target: tuple[str, ...],
        difficulty: Difficulty,
        level: int,
        streak: int,
        now: float,
    ) -> tuple[PuzzleState, list[Notification]]:
        """Build a fresh PLAYING state with a shuffled board and seeded inventory."""
        count = min(
            self.config.starting_power_up_count(difficulty),
            self.config.inventory_capacity,
        )
        inventory = tuple(random_power_up(self.rng) for _ in range(count))

        fresh = PuzzleState(
            identifier=identifier,
            target_sequence=target,
            current_sequence=target,
            status=GameStatus.PLAYING,
            clock_at=now,
            inventory=inventory,
            difficulty=difficulty,
            level=level,
            streak=streak,
        )

        # Fewer than two distinct digits: every arrangement equals the target
        if len(set(target)) < 2:
            solved, notes = self._complete_if_solved(fresh)
            notes.insert(0, Notification.info(
                "Every arrangement of these digits matches the target - puzzle solved!",
                ReasonCode.TRIVIALLY_SOLVED,
            ))
            return solved, notes

        current = shuffle(target, self.rng)
        while is_solved(current, target):
            current = shuffle(current, self.rng)

        started = fresh._copy_with(current_sequence=current)
        return started, [Notification.success(
            "Game started! Arrange the numbers to match your identifier.",
            ReasonCode.GAME_STARTED,
            level=level,
            difficulty=difficulty.value,
        )]

    def _handle_next_level(self, state: PuzzleState, action: Action, now: float) -> ActionResult:
        """Start the next puzzle, escalating difficulty after a full tier of wins."""
        if state.status != GameStatus.WON:
            return ActionResult.failure("Puzzle not solved yet", error_code="NOT_WON", state=state)

        difficulty = state.difficulty
        streak = state.streak
        notes = [Notification.success(
            f"Starting level {state.level}!", ReasonCode.LEVEL_STARTED, level=state.level,
        )]

        if streak >= self.config.levels_per_tier and difficulty != Difficulty.HARD:
            difficulty = difficulty.escalate()
            streak = 0
            notes.append(Notification.info(
                f"Difficulty increased to {difficulty.value.title()}!",
                ReasonCode.DIFFICULTY_INCREASED,
                difficulty=difficulty.value,
            ))

        new_state, init_notes = self._initialize(
            state.identifier,
            state.target_sequence,
            difficulty,
            level=state.level,
            streak=streak,
            now=now,
        )
        logger.info("Advanced to level %d (%s)", state.level, difficulty.value)
        return ActionResult.success_with_state(new_state, notes + init_notes)

    def _handle_reset_game(self, state: PuzzleState, action: Action, now: float) -> ActionResult:
        """Discard the session for a fresh IDLE one."""
        return ActionResult.success_with_state(
            PuzzleState(),
            [Notification.info("Game reset", ReasonCode.GAME_RESET)],
        )

    def _handle_toggle_help(self, state: PuzzleState, action: Action, now: float) -> ActionResult:
        """Open or close the help overlay. Only the status and clock change."""
        if action.payload.open_help:
            if state.status not in {GameStatus.IDLE, GameStatus.PLAYING}:
                return ActionResult.failure(
                    "Help can only be opened before or during play",
                    error_code="HELP_UNAVAILABLE",
                    state=state,
                )
            return ActionResult.success_with_state(
                self._stamp(state, now)._copy_with(status=GameStatus.SHOWING_HELP)
            )

        if state.status != GameStatus.SHOWING_HELP:
            return ActionResult.failure("Help is not open", error_code="HELP_NOT_OPEN", state=state)

        resumed = GameStatus.PLAYING if state.has_puzzle else GameStatus.IDLE
        return ActionResult.success_with_state(self._stamp(state, now)._copy_with(status=resumed))

    def _stamp(self, state: PuzzleState, now: float) -> PuzzleState:
        # Time played up to a help toggle counts; time behind the overlay does not
        return self._accrue(state, now) if state.has_puzzle else state

    def _handle_tick(self, state: PuzzleState, action: Action, now: float) -> ActionResult:
        """
        Advance the clock.

        Time accrues only while PLAYING; in any other status the reading
        is recorded so the next PLAYING tick starts from it.
        """
        if not state.has_puzzle:
            return ActionResult.success_with_state(state)

        new_state = self._accrue(state, now)

        notes = []
        if state.status == GameStatus.PLAYING and state.obstacle_expired(now):
            new_state = self._clear_obstacle(new_state)
            notes.append(Notification.success("Obstacle has expired!", ReasonCode.OBSTACLE_EXPIRED))

        return ActionResult.success_with_state(new_state, notes)

    # =========================================================================
    # Moves
    # =========================================================================

    def _handle_move(self, state: PuzzleState, action: Action, now: float) -> ActionResult:
        """Handle a player swap. Adjacency is the caller's contract, not checked here."""
        if state.status != GameStatus.PLAYING:
            return self._not_playing(state)

        a = action.payload.from_index
        b = action.payload.to_index
        if not state.is_valid_index(a) or not state.is_valid_index(b):
            note = Notification.error(
                f"Move {a} -> {b} is outside the board",
                ReasonCode.ILLEGAL_MOVE,
                from_index=a,
                to_index=b,
            )
            return ActionResult.failure(
                note.message, error_code=ReasonCode.ILLEGAL_MOVE.value, state=state, notifications=[note]
            )

        notes: list[Notification] = []
        new_state = self._play_swap(state, a, b, now, notes)
        if new_state is None:
            return ActionResult.failure(
                "This position is locked!",
                error_code=ReasonCode.POSITION_LOCKED.value,
                state=state,
                notifications=notes,
            )

        # An armed Swap covers exactly one move
        if state.active_power_up == PowerUp.SWAP:
            new_state = new_state._copy_with(active_power_up=None)

        return ActionResult.success_with_state(new_state, notes)

    def _play_swap(
        self,
        state: PuzzleState,
        a: int,
        b: int,
        now: float,
        notes: list[Notification],
    ) -> PuzzleState | None:
        """
        The move pipeline shared by player moves and Reveal.

        Returns None (and appends a POSITION_LOCKED warning) if either
        index is locked.
        """
        locked = state.locked_positions
        touched = sorted({a, b} & locked)
        if touched:
            notes.append(Notification.warning(
                "This position is locked!", ReasonCode.POSITION_LOCKED, positions=touched,
            ))
            return None

        sequence = list(state.current_sequence)

        # Jumble swaps an extra pair first
        if state.active_obstacle == Obstacle.JUMBLE and self.rng.chance(self.config.jumble_chance):
            available = [
                i for i in range(len(sequence))
                if i not in locked and i != a and i != b
            ]
            if len(available) >= 2:
                i, j = self.rng.sample(available, 2)
                sequence = swapped(sequence, i, j)
                notes.append(Notification.info(
                    "Jumble obstacle: Two additional tiles were swapped!",
                    ReasonCode.JUMBLED,
                    positions=sorted([i, j]),
                ))

        sequence = swapped(sequence, a, b)
        new_state = state._copy_with(
            current_sequence=sequence,
            move_count=state.move_count + 1,
        )

        # The score is frozen from elapsed time at the winning move
        new_state = self._accrue(new_state, now)
        new_state, win_notes = self._complete_if_solved(new_state)
        notes.extend(win_notes)

        # Power-up drop
        inventory = list(new_state.inventory)
        if (self.rng.chance(self.config.power_up_drop_chance)
                and len(inventory) < self.config.inventory_capacity):
            power_up = random_power_up(self.rng)
            inventory.append(power_up)
            notes.append(Notification.success(
                "You got a new power-up!", ReasonCode.POWER_UP_GAINED, power_up=power_up.value,
            ))

        # Obstacle roll, only when none is active and a few moves preceded this one
        obstacle = state.active_obstacle
        started_at = state.obstacle_started_at
        expires_at = state.obstacle_expires_at
        rolled = self.rng.chance(self.config.obstacle_probability(state.difficulty))
        if rolled and obstacle is None and state.move_count > self.config.obstacle_min_moves:
            obstacle = random_obstacle(self.rng)
            started_at = now
            expires_at = now + self.config.obstacle_duration
            notes.append(Notification.error(
                obstacle_warning(obstacle, self.config.obstacle_duration),
                ReasonCode.OBSTACLE_ACTIVATED,
                obstacle=obstacle.value,
                expires_at=expires_at,
            ))

        # Lock obstacle picks its positions once. Only its own locks count here:
        # frozen positions are a separate, permanent set and do not stand in for them
        obstacle_locks = state.obstacle_locks
        if obstacle == Obstacle.LOCK and not obstacle_locks:
            lock_count = self.rng.randint(self.config.lock_count_min, self.config.lock_count_max)
            available = [
                i for i in range(len(sequence)) if i not in state.frozen_positions
            ]
            obstacle_locks = frozenset(
                self.rng.sample(available, min(lock_count, len(available)))
            )

        # Lazy expiry of the obstacle that was active before this move
        if state.obstacle_expired(now):
            obstacle = None
            started_at = None
            expires_at = None
            obstacle_locks = frozenset()
            if state.active_obstacle is not None:
                notes.append(Notification.success("Obstacle has expired!", ReasonCode.OBSTACLE_EXPIRED))

        return new_state._copy_with(
            inventory=inventory,
            active_obstacle=obstacle,
            obstacle_started_at=started_at,
            obstacle_expires_at=expires_at,
            obstacle_locks=obstacle_locks,
        )

    def _accrue(self, state: PuzzleState, now: float) -> PuzzleState:
        """Record the clock reading, adding the time since the last one while PLAYING."""
        elapsed = state.elapsed
        if state.status == GameStatus.PLAYING and state.clock_at is not None:
            elapsed += max(0.0, now - state.clock_at)
        return state._copy_with(elapsed=elapsed, clock_at=now)

    def _complete_if_solved(self, state: PuzzleState) -> tuple[PuzzleState, list[Notification]]:
        """Apply the win transition if the board matches the target."""
        if state.status != GameStatus.PLAYING or not state.is_solved:
            return state, []

        score = compute_score(state.move_count, state.elapsed_seconds, state.total_positions)
        logger.info(
            "Puzzle solved in %d moves, %ds, score %d",
            state.move_count, state.elapsed_seconds, score,
        )
        won = state._copy_with(
            status=GameStatus.WON,
            score=score,
            streak=state.streak + 1,
            level=state.level + 1,
        )
        return won, [Notification.success(
            f"Puzzle solved! Score: {score}",
            ReasonCode.PUZZLE_SOLVED,
            score=score,
            moves=state.move_count,
            elapsed=state.elapsed_seconds,
        )]

    def _clear_obstacle(self, state: PuzzleState) -> PuzzleState:
        """Remove the obstacle and the positions it locked. Frozen positions stay."""
        return state._copy_with(
            active_obstacle=None,
            obstacle_started_at=None,
            obstacle_expires_at=None,
            obstacle_locks=frozenset(),
        )

    def _not_playing(self, state: PuzzleState) -> ActionResult:
        return ActionResult.failure(
            "No puzzle in progress",
            error_code=ReasonCode.NOT_PLAYING.value,
            state=state,
        )

    # =========================================================================
    # Power-ups
    # =========================================================================

    def _handle_use_power_up(self, state: PuzzleState, action: Action, now: float) -> ActionResult:
        """Consume an inventory slot and resolve its effect."""
        if state.status != GameStatus.PLAYING:
            return self._not_playing(state)

        index = action.payload.inventory_index
        if not isinstance(index, int) or not 0 <= index < len(state.inventory):
            return ActionResult.failure(
                f"No power-up in slot {index}", error_code="NO_POWER_UP", state=state
            )

        power_up = state.inventory[index]
        remaining = state.inventory[:index] + state.inventory[index + 1:]
        base = state._copy_with(inventory=remaining)

        resolvers = {
            PowerUp.REVEAL: self._resolve_reveal,
            PowerUp.SHUFFLE: self._resolve_shuffle,
            PowerUp.HINT: self._resolve_hint,
            PowerUp.SWAP: self._resolve_swap,
            PowerUp.FREEZE: self._resolve_freeze,
        }
        new_state, notes, suggestion = resolvers[power_up](base, now)
        logger.debug("Used power-up %s from slot %d", power_up.value, index)
        return ActionResult.success_with_state(new_state, notes, suggested_move=suggestion)

    def _no_op(self, state: PuzzleState, power_up: PowerUp, message: str) -> PowerUpOutcome:
        return state, [Notification.info(
            message, ReasonCode.NO_OP_POWER_UP, power_up=power_up.value,
        )], None

    def _resolve_reveal(self, state: PuzzleState, now: float) -> PowerUpOutcome:
        """Move the digit belonging at a random incorrect position into place."""
        incorrect = state.incorrect_indices()
        if not incorrect:
            return self._no_op(state, PowerUp.REVEAL, "All positions are already correct!")

        destination = self.rng.choice(incorrect)
        value = state.target_sequence[destination]
        # Take the digit from a misplaced position so no correct digit is disturbed
        source = next(
            (i for i in incorrect if state.current_sequence[i] == value), None
        )
        if source is None:
            return self._no_op(state, PowerUp.REVEAL, "No digit can be revealed right now")

        notes: list[Notification] = []
        moved = self._play_swap(state, source, destination, now, notes)
        if moved is None:
            return state, notes, None

        notes.insert(0, Notification.success(
            f"Revealed correct position for {value}!",
            ReasonCode.POWER_UP_USED,
            power_up=PowerUp.REVEAL.value,
            from_index=source,
            to_index=destination,
        ))
        return moved, notes, None

    def _resolve_shuffle(self, state: PuzzleState, now: float) -> PowerUpOutcome:
        """Re-permute the digits at incorrect positions. Not a move."""
        incorrect = state.incorrect_indices()
        if len(incorrect) < 2:
            return self._no_op(state, PowerUp.SHUFFLE, "Nothing to shuffle!")

        values = [state.current_sequence[i] for i in incorrect]
        sequence = list(state.current_sequence)
        for i, value in zip(incorrect, shuffle(values, self.rng)):
            sequence[i] = value

        new_state = self._accrue(state._copy_with(current_sequence=sequence), now)
        new_state, win_notes = self._complete_if_solved(new_state)
        notes = [Notification.success(
            "Shuffled all incorrect positions!",
            ReasonCode.POWER_UP_USED,
            power_up=PowerUp.SHUFFLE.value,
        )]
        return new_state, notes + win_notes, None

    def _resolve_hint(self, state: PuzzleState, now: float) -> PowerUpOutcome:
        """Find the best swap. Advisory only."""
        suggestion = best_swap(
            state.current_sequence,
            state.target_sequence,
            excluded=state.locked_positions,
        )
        if suggestion is None:
            return self._no_op(state, PowerUp.HINT, "No single swap improves the board right now")

        plural = "digit" if suggestion.improvement == 1 else "digits"
        return state, [Notification.success(
            f"Hint: swap positions {suggestion.from_index + 1} and {suggestion.to_index + 1} "
            f"to place {suggestion.improvement} more {plural}!",
            ReasonCode.HINT,
            from_index=suggestion.from_index,
            to_index=suggestion.to_index,
            improvement=suggestion.improvement,
        )], suggestion

    def _resolve_swap(self, state: PuzzleState, now: float) -> PowerUpOutcome:
        """Arm free swapping for the next move."""
        return state._copy_with(active_power_up=PowerUp.SWAP), [Notification.info(
            "Select two tiles to swap them (any positions)",
            ReasonCode.SWAP_ARMED,
            power_up=PowerUp.SWAP.value,
        )], None

    def _resolve_freeze(self, state: PuzzleState, now: float) -> PowerUpOutcome:
        """Permanently lock a random correct position."""
        candidates = [
            i for i in state.correct_indices() if i not in state.locked_positions
        ]
        if not candidates:
            return self._no_op(state, PowerUp.FREEZE, "No correct positions to freeze yet!")

        position = self.rng.choice(candidates)
        digit = state.current_sequence[position]
        frozen = state._copy_with(frozen_positions=state.frozen_positions | {position})
        return frozen, [Notification.success(
            f"Frozen position {position + 1} with digit {digit}!",
            ReasonCode.POWER_UP_USED,
            power_up=PowerUp.FREEZE.value,
            position=position,
        )], None


def apply_action(
    state: PuzzleState,
    action: Action,
    rng: RandomSource | None = None,
    config: RuleConfig | None = None,
) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer(rng=rng or RandomSource(), config=config or RuleConfig())
    return reducer.apply(state, action)
