from __future__ import annotations

from datetime import UTC, datetime, timedelta

from portal_auth.services._shared.ports import KeyValueStore

DAILY_COUNTER_TTL = timedelta(hours=24)


class RateLimiter:
    """
    Per-recipient send cooldown and per-recipient daily quota.

    The cooldown key holds the last send time in epoch milliseconds and lives
    for one interval; its presence means "too soon". Daily counters are keyed
    by UTC calendar date, so a new day starts from an empty key.
    """

    def __init__(self, store: KeyValueStore, *, interval: timedelta, daily_max: int) -> None:
        self.store = store
        self.interval = interval
        self.daily_max = daily_max

    # ------------------------- helpers -------------------------

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)

    @staticmethod
    def _ms(dt: datetime) -> int:
        return int(dt.timestamp() * 1000)

    @staticmethod
    def _kt(recipient: str) -> str:
        return f"send_time:{recipient}"

    @staticmethod
    def _kc(recipient: str, day: datetime) -> str:
        return f"send_count:{recipient}:{day:%Y%m%d}"

    # -------------------------- API ----------------------------

    def cooldown_remaining(self, recipient: str) -> timedelta:
        """Zero when sendable now, otherwise the time left on the cooldown."""
        raw = self.store.get(self._kt(recipient))
        if raw is None:
            return timedelta(0)
        now = self._now()
        remaining_ms = int(raw) + self.interval.total_seconds() * 1000 - self._ms(now)
        return max(timedelta(0), timedelta(milliseconds=remaining_ms))

    def quota_remaining(self, recipient: str) -> int:
        raw = self.store.get(self._kc(recipient, self._now()))
        sent_today = int(raw) if raw is not None else 0
        return max(0, self.daily_max - sent_today)

    def acquire_cooldown(self, recipient: str) -> str | None:
        """
        Atomically claim the cooldown slot (set-if-absent with TTL).

        :returns: The stored stamp when claimed, ``None`` if a cooldown is active.
        """
        stamp = str(self._ms(self._now()))
        if self.store.set_if_absent(self._kt(recipient), stamp, ttl=self.interval):
            return stamp
        return None

    def release_cooldown(self, recipient: str, stamp: str) -> None:
        """Give back a slot claimed by :meth:`acquire_cooldown` (only if still ours)."""
        self.store.compare_and_delete(self._kt(recipient), stamp)

    def record_send(self, recipient: str) -> None:
        """Refresh the cooldown and count one send. Call only after delivery."""
        now = self._now()
        self.store.set(self._kt(recipient), str(self._ms(now)), ttl=self.interval)
        self.store.incr(self._kc(recipient, now), ttl=DAILY_COUNTER_TTL)

    def reset_daily_count(self, recipient: str) -> None:
        self.store.delete(self._kc(recipient, self._now()))
