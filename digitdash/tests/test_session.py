"""
Tests for the session controller and manager.

Tests:
- Clock stamping and ticks
- Notification listeners
- Presentation queries (reverse, blind, time remaining)
- Session lifecycle
"""

import pytest

from ..engine_core.state import GameStatus, Difficulty, PowerUp, Obstacle
from ..engine_core.action import ReasonCode
from ..engine_core.move_generator import InteractionMode
from ..session import SessionController, SessionManager
from .conftest import FakeClock, make_state


class TestSessionController:
    """Tests for SessionController."""

    def test_start_game_uses_clock(self, controller, clock):
        result = controller.start_game("12345678", Difficulty.MEDIUM)

        assert result.success
        assert controller.state.status == GameStatus.PLAYING
        assert controller.state.clock_at == clock.now
        assert controller.state.difficulty == Difficulty.MEDIUM
        assert controller.last_result is result

    def test_tick_accrues_time(self, controller, clock):
        controller.start_game("12345678")
        clock.advance(7.5)
        controller.tick()

        assert controller.state.elapsed == 7.5

    def test_snapshot_ticks(self, controller, clock):
        controller.start_game("12345678")
        clock.advance(3)
        assert controller.snapshot().elapsed == 3

    def test_rejected_command_keeps_state(self, controller):
        controller.start_game("12345678")
        before = controller.state
        result = controller.start_game("abc")

        assert not result.success
        assert controller.state is before

    def test_commands(self, controller, clock):
        controller._state = make_state(
            "21436587", inventory=(PowerUp.HINT, PowerUp.SWAP), clock_at=clock.now
        )
        controller.move(0, 1)
        assert controller.state.move_count == 1

        controller.toggle_help(True)
        assert controller.state.status == GameStatus.SHOWING_HELP
        controller.toggle_help(False)
        assert controller.state.status == GameStatus.PLAYING

        controller.activate_power_up(0)
        assert len(controller.state.inventory) == 1

        controller.reset_game()
        assert controller.state.status == GameStatus.IDLE

    def test_win_score_includes_time_played(self, controller, clock):
        controller._state = make_state("21345678", clock_at=clock.now)
        clock.advance(30)
        controller.move(0, 1)

        assert controller.state.status == GameStatus.WON
        assert controller.state.elapsed_seconds == 30
        assert controller.state.score == 1330

        # Later ticks on the won board leave the score alone
        clock.advance(100)
        controller.tick()
        assert controller.state.score == 1330

    def test_next_level(self, controller, clock):
        controller._state = make_state("21345678", clock_at=clock.now)
        controller.move(0, 1)
        assert controller.state.status == GameStatus.WON

        controller.next_level()
        assert controller.state.status == GameStatus.PLAYING
        assert controller.state.level == 2


class TestListeners:
    """Tests for notification relay."""

    def test_subscribe_and_unsubscribe(self, controller):
        received = []
        unsubscribe = controller.subscribe(received.append)

        controller.start_game("12345678")
        assert any(n.reason == ReasonCode.GAME_STARTED for n in received)

        unsubscribe()
        count = len(received)
        controller.reset_game()
        assert len(received) == count

    def test_failing_listener_is_dropped(self, controller):
        received = []

        def broken(notification):
            raise RuntimeError("listener down")

        controller.subscribe(broken)
        controller.subscribe(received.append)
        controller.start_game("12345678")
        controller.reset_game()

        assert len(received) == 2
        assert broken not in controller._listeners

    def test_unsubscribe_twice_is_harmless(self, controller):
        unsubscribe = controller.subscribe(lambda n: None)
        unsubscribe()
        unsubscribe()
        assert controller._listeners == []


class TestPresentationQueries:
    """Tests for what the player sees."""

    def test_reverse_flips_displayed_target(self, controller, clock):
        controller._state = make_state(
            "21436587",
            active_obstacle=Obstacle.REVERSE,
            obstacle_started_at=clock.now,
            obstacle_expires_at=clock.now + 20,
        )
        assert controller.display_target() == list("87654321")

    def test_target_not_reversed_otherwise(self, controller):
        controller._state = make_state("21436587")
        assert controller.display_target() == list("12345678")

    def test_blind_hides_digits_briefly(self, controller, clock):
        controller._state = make_state(
            "21436587",
            active_obstacle=Obstacle.BLIND,
            obstacle_started_at=clock.now,
            obstacle_expires_at=clock.now + 20,
        )
        clock.advance(2)
        assert controller.display_sequence() == ["?"] * 8

        clock.advance(4)
        assert controller.display_sequence() == list("21436587")

    def test_obstacle_seconds_remaining(self, controller, clock):
        controller._state = make_state(
            "21436587",
            active_obstacle=Obstacle.LOCK,
            obstacle_started_at=clock.now,
            obstacle_expires_at=clock.now + 20,
        )
        clock.advance(5.5)
        assert controller.obstacle_seconds_remaining() == 15

        clock.advance(30)
        assert controller.obstacle_seconds_remaining() == 0

    def test_no_obstacle_no_countdown(self, controller):
        controller._state = make_state("21436587")
        assert controller.obstacle_seconds_remaining() is None

    def test_interaction_mode(self, controller):
        controller._state = make_state("21436587")
        assert controller.interaction_mode() == InteractionMode.ADJACENT
        assert not controller.is_legal_move(0, 4)

        controller._state = make_state("21436587", active_power_up=PowerUp.SWAP)
        assert controller.interaction_mode() == InteractionMode.FREE_SWAP
        assert controller.is_legal_move(0, 4)


class TestSessionManager:
    """Tests for SessionManager."""

    @pytest.fixture
    def manager(self):
        return SessionManager(clock=FakeClock(500.0))

    def test_create_session(self, manager):
        session = manager.create_session(seed=11)

        assert session.session_id
        assert session.seed == 11
        assert session.created_at == 500.0
        assert session.state.status == GameStatus.IDLE
        assert manager.get_session(session.session_id) is session

    def test_sessions_are_independent(self, manager):
        a = manager.create_session()
        b = manager.create_session()
        a.controller.start_game("12345678")

        assert a.session_id != b.session_id
        assert b.state.status == GameStatus.IDLE

    def test_seeded_sessions_repeat(self, manager):
        a = manager.create_session(seed=42)
        b = manager.create_session(seed=42)
        a.controller.start_game("12345678")
        b.controller.start_game("12345678")

        assert a.state.current_sequence == b.state.current_sequence

    def test_end_session(self, manager):
        session = manager.create_session()

        assert manager.end_session(session.session_id)
        assert manager.get_session(session.session_id) is None
        assert not manager.end_session(session.session_id)

    def test_list_active_sessions(self, manager):
        playing = manager.create_session()
        won = manager.create_session()
        won.controller.start_game("00000000")

        active = manager.list_active_sessions()
        assert playing.session_id in active
        assert won.session_id not in active
        assert set(manager.list_sessions()) == {playing.session_id, won.session_id}

    def test_cleanup_stale_sessions(self, manager):
        old = manager.create_session()
        manager.clock.advance(4000)
        fresh = manager.create_session()

        removed = manager.cleanup_stale_sessions(max_age_seconds=3600)

        assert removed == [old.session_id]
        assert manager.get_session(fresh.session_id) is fresh

    def test_controller_shares_manager_config(self):
        manager = SessionManager()
        session = manager.create_session()
        assert isinstance(session.controller, SessionController)
        assert session.controller.config is manager.config
