"""Workflow Enforcement — trade and report state machines.

Invariants:
    - TRADE_TRANSITIONS and REPORT_SEQUENCE are the single source of truth for legal edges
    - COMPLETED/CANCELLED trades and RESOLVED reports have no outgoing edges
    - Same-state requests are transitions too, and are rejected
    - Functions are PURE: they return the next status or raise, never mutate

Design Decisions:
    - Report review is a linear sequence: advance() takes no target, so skipping
      pending -> resolved is impossible by construction
"""

from bloxmarket.core.domain_types import ReportStatus, TradeStatus
from bloxmarket.core.errors import InvalidTransitionError


TRADE_TRANSITIONS: dict[TradeStatus, frozenset[TradeStatus]] = {
    TradeStatus.OPEN: frozenset({TradeStatus.IN_PROGRESS, TradeStatus.CANCELLED}),
    TradeStatus.IN_PROGRESS: frozenset({TradeStatus.COMPLETED, TradeStatus.CANCELLED}),
    TradeStatus.COMPLETED: frozenset(),
    TradeStatus.CANCELLED: frozenset(),
}

REPORT_SEQUENCE: tuple[ReportStatus, ...] = (
    ReportStatus.PENDING,
    ReportStatus.REVIEWED,
    ReportStatus.RESOLVED,
)


def is_terminal_trade_status(status: TradeStatus) -> bool:
    return not TRADE_TRANSITIONS[status]


def check_trade_transition(
    current: TradeStatus | str, target: TradeStatus | str,
) -> TradeStatus:
    """Return target as TradeStatus if current -> target is a legal edge."""
    current = TradeStatus(current)
    target = TradeStatus(target)
    if target not in TRADE_TRANSITIONS[current]:
        raise InvalidTransitionError("Trade", current.value, target.value)
    return target


def next_report_status(current: ReportStatus | str) -> ReportStatus:
    """pending -> reviewed -> resolved; resolved has no successor."""
    current = ReportStatus(current)
    position = REPORT_SEQUENCE.index(current)
    if position == len(REPORT_SEQUENCE) - 1:
        raise InvalidTransitionError("Report", current.value, "<none>")
    return REPORT_SEQUENCE[position + 1]
