from __future__ import annotations
"""
Stage navigation for the swipeable five-stage layout.

The navigator owns which stage is showing and the horizontal offset of the
stage strip (in viewport-width percent, so stage i rests at -i * 100). It
moves between three phases:

    IDLE -> DRAGGING -> IDLE | TRANSITIONING
    IDLE -> TRANSITIONING -> IDLE   (after the transition duration)

Commands that arrive in the wrong phase are ignored and return False/None.
Time is read from an injected millisecond clock; a finished transition
settles on the next call, so no timer thread is needed.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from loguru import logger

from .config import (
    BOUNDARY_DAMPENING,
    DEFAULT_VIEWPORT_WIDTH,
    STAGE_TRANSITION_MS,
    STAGES,
    SWIPE_DISTANCE_THRESHOLD_PX,
    SWIPE_VELOCITY_THRESHOLD,
)
from .utils.urls import stage_index_from_fragment, stage_url


class NavigatorPhase(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    TRANSITIONING = "transitioning"


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class NavigationEvent:
    """Emitted once per committed transition."""

    from_stage: str
    to_stage: str
    index: int

    @property
    def url(self) -> str:
        return stage_url(self.to_stage)


@dataclass(frozen=True)
class DragUpdate:
    """Result of a drag move: where to draw the strip and whether to block scrolling."""

    offset: float
    horizontal: bool


NavigationListener = Callable[[NavigationEvent], None]


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


# keyboard shortcuts (vim-style h/l alongside the arrows)
_PREVIOUS_KEYS = {"ArrowLeft", "h"}
_NEXT_KEYS = {"ArrowRight", "l"}


class StageNavigator:
    def __init__(
        self,
        stages: Sequence[str] = STAGES,
        viewport_width: float = DEFAULT_VIEWPORT_WIDTH,
        transition_ms: float = STAGE_TRANSITION_MS,
        clock: Optional[Callable[[], float]] = None,
    ):
        if not stages:
            raise ValueError("StageNavigator needs at least one stage")
        if viewport_width <= 0:
            raise ValueError(f"viewport_width must be positive, got {viewport_width}")
        if transition_ms < 0:
            raise ValueError(f"transition_ms must be >= 0, got {transition_ms}")

        self.stages = tuple(stages)
        self.viewport_width = float(viewport_width)
        self.transition_ms = float(transition_ms)
        self._clock = clock or _monotonic_ms

        self.current_index = 0
        self.offset = self.base_offset(0)
        self._phase = NavigatorPhase.IDLE
        self._transition_from: Optional[int] = None
        self._transition_ends_at: Optional[float] = None

        self.drag_origin: Optional[Point] = None
        self.drag_current: Optional[Point] = None
        self.drag_start_time: Optional[float] = None

        self._listeners: List[NavigationListener] = []

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def phase(self) -> NavigatorPhase:
        self._settle()
        return self._phase

    @property
    def is_animating(self) -> bool:
        return self.phase == NavigatorPhase.TRANSITIONING

    @property
    def transition(self) -> Optional[Tuple[int, int]]:
        """(from_index, to_index) while a transition is running."""
        if self.phase != NavigatorPhase.TRANSITIONING or self._transition_from is None:
            return None
        return self._transition_from, self.current_index

    @property
    def current_stage(self) -> str:
        return self.stages[self.current_index]

    @property
    def last_index(self) -> int:
        return len(self.stages) - 1

    def base_offset(self, index: int) -> float:
        """Resting offset of the strip for ``index``."""
        return -index * 100.0

    def subscribe(self, listener: NavigationListener) -> Callable[[], None]:
        """Register a listener for committed transitions; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Discrete commands
    # ------------------------------------------------------------------

    def go_to(self, index: int) -> bool:
        """
        Start a transition to ``index``.

        Returns True when a transition was committed. Out-of-range or
        current indices only re-settle the offset.
        """
        if self.phase != NavigatorPhase.IDLE:
            logger.debug("go_to({}) ignored while {}", index, self._phase.value)
            return False
        if (
            isinstance(index, bool)
            or not isinstance(index, int)
            or not 0 <= index <= self.last_index
            or index == self.current_index
        ):
            self.offset = self.base_offset(self.current_index)
            return False

        from_index = self.current_index
        self.current_index = index
        self.offset = self.base_offset(index)
        self._phase = NavigatorPhase.TRANSITIONING
        self._transition_from = from_index
        self._transition_ends_at = self._clock() + self.transition_ms

        self._emit(
            NavigationEvent(
                from_stage=self.stages[from_index],
                to_stage=self.stages[index],
                index=index,
            )
        )
        return True

    def next(self) -> bool:
        return self.go_to(self.current_index + 1)

    def previous(self) -> bool:
        return self.go_to(self.current_index - 1)

    def go_to_stage(self, name: str) -> bool:
        try:
            index = self.stages.index(name)
        except ValueError:
            logger.debug("Unknown stage {!r}", name)
            return False
        return self.go_to(index)

    def restore_from_fragment(self, fragment: Optional[str]) -> bool:
        """Follow a deep link or a history back/forward entry such as "#vendor"."""
        index = stage_index_from_fragment(fragment, self.stages)
        if index is None:
            return False
        return self.go_to(index)

    def handle_key(self, key: str) -> bool:
        """
        Keyboard navigation: ArrowLeft/h, ArrowRight/l, and 1..N to jump.

        Returns True when the key caused a transition.
        """
        if key in _PREVIOUS_KEYS:
            return self.previous()
        if key in _NEXT_KEYS:
            return self.next()
        if len(key) == 1 and key.isdigit() and key != "0":
            index = int(key) - 1
            if index <= self.last_index:
                return self.go_to(index)
        return False

    # ------------------------------------------------------------------
    # Drag gestures
    # ------------------------------------------------------------------

    def drag_start(self, point: Point, time_ms: Optional[float] = None) -> bool:
        if self.phase != NavigatorPhase.IDLE:
            logger.debug("drag_start ignored while {}", self._phase.value)
            return False
        self.drag_origin = point
        self.drag_current = point
        self.drag_start_time = self._clock() if time_ms is None else float(time_ms)
        self._phase = NavigatorPhase.DRAGGING
        return True

    def drag_move(self, point: Point) -> Optional[DragUpdate]:
        """
        Track the pointer. A horizontal gesture moves the strip (damped past
        either end); a vertical one leaves it at rest so the page can scroll.
        """
        if self._phase != NavigatorPhase.DRAGGING or self.drag_origin is None:
            return None
        self.drag_current = point
        dx = point.x - self.drag_origin.x
        dy = point.y - self.drag_origin.y

        horizontal = abs(dx) > abs(dy)
        if not horizontal:
            self.offset = self.base_offset(self.current_index)
            return DragUpdate(offset=self.offset, horizontal=False)

        self.offset = self.base_offset(self.current_index) + (
            dx / self.viewport_width * 100.0 * self._dampening(dx)
        )
        return DragUpdate(offset=self.offset, horizontal=True)

    def drag_end(self, point: Optional[Point] = None, time_ms: Optional[float] = None) -> bool:
        """
        Release the gesture. Commits to the neighbouring stage when the drag
        travelled more than the distance threshold OR was faster than the
        velocity threshold; otherwise snaps back.

        Returns True when a transition was committed.
        """
        if self._phase != NavigatorPhase.DRAGGING or self.drag_origin is None:
            return False

        end = point or self.drag_current or self.drag_origin
        end_time = self._clock() if time_ms is None else float(time_ms)
        dx = end.x - self.drag_origin.x
        dy = end.y - self.drag_origin.y
        start_time = end_time if self.drag_start_time is None else self.drag_start_time
        # a zero-length press would divide by zero; treat it as 1ms
        elapsed = max(end_time - start_time, 1.0)
        velocity = abs(dx) / elapsed

        self._clear_drag()

        if abs(dx) <= abs(dy):
            self.go_to(self.current_index)
            return False

        if abs(dx) > SWIPE_DISTANCE_THRESHOLD_PX or velocity > SWIPE_VELOCITY_THRESHOLD:
            logger.debug("Swipe committed: dx={:.1f}px velocity={:.3f}px/ms", dx, velocity)
            return self.previous() if dx > 0 else self.next()

        self.go_to(self.current_index)
        return False

    def cancel_drag(self) -> bool:
        """Pointer/touch cancel: drop the gesture and snap back."""
        if self._phase != NavigatorPhase.DRAGGING:
            return False
        self._clear_drag()
        self.go_to(self.current_index)
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _dampening(self, dx: float) -> float:
        at_first = self.current_index == 0
        at_last = self.current_index == self.last_index
        if (dx > 0 and at_first) or (dx < 0 and at_last):
            return BOUNDARY_DAMPENING
        return 1.0

    def _clear_drag(self) -> None:
        self.drag_origin = None
        self.drag_current = None
        self.drag_start_time = None
        self._phase = NavigatorPhase.IDLE

    def _settle(self) -> None:
        if (
            self._phase == NavigatorPhase.TRANSITIONING
            and self._transition_ends_at is not None
            and self._clock() >= self._transition_ends_at
        ):
            self._phase = NavigatorPhase.IDLE
            self._transition_from = None
            self._transition_ends_at = None

    def _emit(self, event: NavigationEvent) -> None:
        logger.debug("Stage change {} -> {}", event.from_stage, event.to_stage)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # the transition is already committed at this point
                logger.exception("Navigation listener {!r} failed", listener)
