from datetime import datetime, timezone
import itertools
import time
import uuid

TEST_RESULT_PREFIX = "test"
LEARNING_PREFIX = "learn"
SUGGESTION_PREFIX = "suggest"

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


class IdGenerator:
    """
    Creates record identifiers and timestamps for evaluation output.

    IDs look like `test_lx2k9c1a_3f9a1c2e`: prefix, wall clock millis in base36
    and a random suffix. Unique enough within a process; nothing relies on them
    being globally unique.
    """

    def new_id(self, prefix: str) -> str:
        millis = int(time.time() * 1000)
        return f"{prefix}_{_to_base36(millis)}_{uuid.uuid4().hex[:8]}"

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class SequentialIdGenerator(IdGenerator):
    """Deterministic IDs (`learn_0001`, ...) and a fixed clock, for tests and replays."""

    def __init__(self, fixed_now: datetime | None = None):
        self._counter = itertools.count(1)
        self._fixed_now = fixed_now or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def new_id(self, prefix: str) -> str:
        return f"{prefix}_{next(self._counter):04d}"

    def now(self) -> datetime:
        return self._fixed_now


_DEFAULT_ID_GENERATOR = IdGenerator()


def get_id_generator() -> IdGenerator:
    return _DEFAULT_ID_GENERATOR
