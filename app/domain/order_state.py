"""Order status state machine.

PENDING is the only initial state. COMPLETED and CANCELLED are terminal.
Self-transitions are never allowed.
"""

from dataclasses import dataclass, field
from typing import Literal

from app.domain.enums import BookingStatus

ORDER_TRANSITIONS: dict[BookingStatus, tuple[BookingStatus, ...]] = {
    BookingStatus.PENDING: (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
    BookingStatus.CONFIRMED: (BookingStatus.PREPARING, BookingStatus.CANCELLED),
    BookingStatus.PREPARING: (BookingStatus.READY, BookingStatus.CANCELLED),
    BookingStatus.READY: (BookingStatus.COMPLETED,),
    BookingStatus.COMPLETED: (),
    BookingStatus.CANCELLED: (),
}

TimestampField = Literal["confirmed_at", "completed_at"]

# Only these targets stamp a timestamp on the booking
TRANSITION_TIMESTAMPS: dict[BookingStatus, TimestampField] = {
    BookingStatus.CONFIRMED: "confirmed_at",
    BookingStatus.COMPLETED: "completed_at",
}


@dataclass(frozen=True)
class TransitionResult:
    """Decision for one requested status change."""

    allowed: bool
    current_status: str
    requested_status: str
    timestamp_field: TimestampField | None = None
    allowed_transitions: list[BookingStatus] = field(default_factory=list)


def _parse(status: BookingStatus | str) -> BookingStatus | None:
    try:
        return BookingStatus(status)
    except ValueError:
        return None


def allowed_transitions_for(status: BookingStatus | str) -> list[BookingStatus]:
    """Statuses reachable from ``status`` in one step."""
    parsed = _parse(status)
    if parsed is None:
        return []
    return list(ORDER_TRANSITIONS[parsed])


def is_terminal(status: BookingStatus | str) -> bool:
    parsed = _parse(status)
    return parsed is not None and not ORDER_TRANSITIONS[parsed]


def apply_transition(
    current: BookingStatus | str,
    requested: BookingStatus | str,
) -> TransitionResult:
    """Decide whether ``current -> requested`` is legal.

    Never raises. A rejected result carries the statuses that are allowed
    from ``current`` so the caller can report them.
    """
    current_status = _parse(current)
    requested_status = _parse(requested)
    allowed = allowed_transitions_for(current_status) if current_status else []

    current_value = current_status.value if current_status else str(current)
    requested_value = requested_status.value if requested_status else str(requested)

    if requested_status is None or requested_status not in allowed:
        return TransitionResult(
            allowed=False,
            current_status=current_value,
            requested_status=requested_value,
            allowed_transitions=allowed,
        )

    return TransitionResult(
        allowed=True,
        current_status=current_value,
        requested_status=requested_value,
        timestamp_field=TRANSITION_TIMESTAMPS.get(requested_status),
        allowed_transitions=allowed,
    )
