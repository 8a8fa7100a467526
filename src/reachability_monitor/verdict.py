# ─── Standard library imports ───
from enum import Enum, auto


class ReachabilityVerdict(Enum):
    """
    Tri-state outcome of evaluating whether the target host responds.

    • REACHABLE    — network path exists and the host answered the probe
    • UNAVAILABLE  — network path exists but the probe failed
    • UNREACHABLE  — no network path at all (connectivity lost)

    Invariants:
    • Unset (None) only before the first observation
    • UNREACHABLE comes from the connectivity signal, never from a probe
    """
    REACHABLE = auto()
    UNAVAILABLE = auto()
    UNREACHABLE = auto()

    def __str__(self) -> str:
        return self.name

    @classmethod
    def from_probe(cls, reachable: bool) -> "ReachabilityVerdict":
        return cls.REACHABLE if reachable else cls.UNAVAILABLE

VERDICT_EMOJI = {
    ReachabilityVerdict.REACHABLE:   "💚",
    ReachabilityVerdict.UNAVAILABLE: "🟡",
    ReachabilityVerdict.UNREACHABLE: "🔴",
}
