"""Event decision engine.

Routes newly created objects through a marker rename and a downstream
notification, quarantining them when the notification is rejected:

    DECODE -> MATCH -> GUARD -> TRANSITION -> RENAME -> NOTIFY
                                                          |
                                                          v
                                                     QUARANTINE

Whether an object was already processed is decided from its filename alone.
A leading timestamp marker means "done", and every rename the engine
performs adds one, so a rename can re-trigger the engine at most once.
"""

from filedrop.engine.clock import Clock, fixed_clock, utc_timestamp
from filedrop.engine.guard import MARKER_PATTERN, basename, is_marked
from filedrop.engine.keys import compute_new_key, decode_key, split_relative
from filedrop.engine.matching import match_rule
from filedrop.engine.processor import IntakeEngine, IntakePlan, plan_key
from filedrop.engine.states import (
    IntakeState,
    InvocationState,
    TransitionError,
    TRANSITIONS,
)

__all__ = [
    # Clock
    "Clock",
    "utc_timestamp",
    "fixed_clock",
    # Decision functions
    "MARKER_PATTERN",
    "basename",
    "is_marked",
    "decode_key",
    "split_relative",
    "compute_new_key",
    "match_rule",
    # States
    "IntakeState",
    "InvocationState",
    "TransitionError",
    "TRANSITIONS",
    # Engine
    "IntakeEngine",
    "IntakePlan",
    "plan_key",
]
