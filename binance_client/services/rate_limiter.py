"""
Rate limiter for exchange API calls.

One RateGate per published REQUEST_WEIGHT rule, composed by an
AdmissionController: a request is dispatched only once every gate can take
its weight at the same instant, and then all gates are charged together.
"""

import asyncio
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Iterable, List, Optional, Sequence, Tuple

from binance_client.core.clock import Clock
from binance_client.core.exceptions import AdmissionTimeoutError, ConfigurationError
from binance_client.core.logger import get_logger
from binance_client.models.rate_limit import RateLimitDescriptor, RateLimitType

logger = get_logger(__name__)


class RateGate:
    """
    Sliding window gate for one rate limit rule.

    Keeps a log of (admitted_at, weight). The weight admitted within any
    window of ``period`` seconds never exceeds ``capacity``; capacity comes
    back as old entries age out of the window.
    """

    def __init__(self, descriptor: RateLimitDescriptor):
        self.descriptor = descriptor
        self.capacity = descriptor.limit
        self.period = descriptor.period

        self._log: Deque[Tuple[float, int]] = deque()
        self._used = 0

        # Statistics
        self.total_weight = 0
        self.total_requests = 0

    def _expire(self, now: float) -> None:
        cutoff = now - self.period
        while self._log and self._log[0][0] <= cutoff:
            _, weight = self._log.popleft()
            self._used -= weight

    def available(self, now: float) -> int:
        """Weight that could be admitted at ``now``"""
        self._expire(now)
        return self.capacity - self._used

    def wait_time(self, weight: int, now: float) -> float:
        """Seconds until ``weight`` fits, 0.0 if it fits now"""
        self._expire(now)
        excess = self._used + weight - self.capacity
        if excess <= 0:
            return 0.0

        freed = 0
        for admitted_at, entry_weight in self._log:
            freed += entry_weight
            if freed >= excess:
                return admitted_at + self.period - now

        # weight > capacity, rejected before reaching here
        return self.period

    def consume(self, weight: int, now: float) -> None:
        self._expire(now)
        self._log.append((now, weight))
        self._used += weight
        self.total_weight += weight
        self.total_requests += 1

    def stats(self, now: float) -> Dict[str, float]:
        return {
            "rule": str(self.descriptor),
            "capacity": self.capacity,
            "available": self.available(now),
            "total_requests": self.total_requests,
            "total_weight": self.total_weight,
        }

    def __repr__(self) -> str:
        return f"RateGate({self.descriptor})"


@dataclass(frozen=True)
class Admission:
    """Receipt of an admitted request"""

    weight: int
    admitted_at: float
    waited: float


class AdmissionController:
    """
    All-or-nothing admission across a set of rate gates.

    Waiters are served in arrival order (asyncio.Lock is FIFO), so a heavy
    request cannot be starved by a stream of light ones. The check and the
    charge over all gates happen with no await in between, so no request is
    ever half admitted. A waiter cancelled while sleeping has charged nothing.
    """

    def __init__(self, gates: Iterable[RateGate] = (), clock: Optional[Clock] = None):
        # Short windows first: they are the ones that usually decide the wait
        self._gates: List[RateGate] = sorted(gates, key=lambda g: (g.period, g.capacity))
        self._clock = clock or Clock()
        self._lock = asyncio.Lock()

        self.total_waits = 0
        self.total_wait_time = 0.0

        logger.info(
            f"AdmissionController initialized with {len(self._gates)} gate(s): "
            f"{', '.join(str(g.descriptor) for g in self._gates) or 'none'}"
        )

    @classmethod
    def from_descriptors(
        cls,
        descriptors: Sequence[RateLimitDescriptor],
        clock: Optional[Clock] = None,
    ) -> "AdmissionController":
        """Build one gate per REQUEST_WEIGHT rule; other kinds are not gated locally"""
        gates = []
        for descriptor in descriptors:
            if descriptor.kind != RateLimitType.REQUEST_WEIGHT:
                logger.debug(f"No local gate for {descriptor}")
                continue
            gates.append(RateGate(descriptor))
        return cls(gates, clock=clock)

    @property
    def gates(self) -> List[RateGate]:
        return list(self._gates)

    @property
    def max_weight(self) -> Optional[int]:
        """Largest weight any single request may carry, None when ungated"""
        if not self._gates:
            return None
        return min(g.capacity for g in self._gates)

    def check_weight(self, weight: int) -> None:
        """
        Reject weights that could never be admitted.

        Raises:
            ConfigurationError: If weight < 1 or exceeds a gate's capacity
        """
        if weight < 1:
            raise ConfigurationError(f"Request weight must be positive, got {weight}")
        for gate in self._gates:
            if weight > gate.capacity:
                raise ConfigurationError(
                    f"Request weight {weight} exceeds capacity of {gate.descriptor}",
                    details={"weight": weight, "capacity": gate.capacity},
                )

    async def acquire(self, weight: int = 1, timeout: Optional[float] = None) -> Admission:
        """
        Wait until ``weight`` can be taken from every gate, then take it.

        Args:
            weight: Request weight
            timeout: Optional bound on the wait, in seconds

        Returns:
            Admission receipt

        Raises:
            ConfigurationError: If the weight can never be admitted (raised before waiting)
            AdmissionTimeoutError: If ``timeout`` expires first; nothing is charged
        """
        self.check_weight(weight)

        if timeout is None:
            return await self._acquire(weight)

        try:
            return await asyncio.wait_for(self._acquire(weight), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise AdmissionTimeoutError(
                f"No rate limit capacity for weight {weight} within {timeout}s",
                details={"weight": weight, "timeout": timeout},
                original_exception=e,
            ) from e

    async def _acquire(self, weight: int) -> Admission:
        started = self._clock.monotonic()

        async with self._lock:
            while True:
                now = self._clock.monotonic()
                delay = max(
                    (gate.wait_time(weight, now) for gate in self._gates),
                    default=0.0,
                )
                if delay <= 0:
                    for gate in self._gates:
                        gate.consume(weight, now)
                    return Admission(weight=weight, admitted_at=now, waited=now - started)

                self.total_waits += 1
                self.total_wait_time += delay
                logger.debug(f"Rate limit: waiting {delay:.3f}s for weight {weight}")
                await self._clock.sleep(delay)

    def stats(self) -> List[Dict[str, float]]:
        now = self._clock.monotonic()
        return [gate.stats(now) for gate in self._gates]
