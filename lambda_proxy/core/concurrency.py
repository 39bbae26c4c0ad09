import asyncio
from collections import deque
from typing import Optional

from lambda_proxy.core.exceptions import GateClosedError, ResourceExhaustedError


class ConcurrencyGate:
    """
    Single-permit admission control for a function with a reserved
    concurrency of one.

    Waiters are queued in a deque of futures so the permit is handed over
    in FIFO order. Each waiter future resolves to True when it is granted
    the permit and to False when the gate is closed.
    """

    def __init__(self, default_timeout: Optional[float] = None):
        self.limit = 1
        self.default_timeout = default_timeout
        self.current = 0
        self._lock = asyncio.Lock()
        self.waiters: deque[asyncio.Future] = deque()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def waiting(self) -> int:
        return len(self.waiters)

    def locked(self) -> bool:
        return self.current >= self.limit

    async def acquire(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the permit.

        Returns True once the permit is held and False if the gate is closed.
        Raises ResourceExhaustedError if a timeout is in effect and expires.
        """
        if timeout is None:
            timeout = self.default_timeout

        async with self._lock:
            if self._closed:
                return False
            if self.current < self.limit:
                self.current += 1
                return True
            waiter = asyncio.get_running_loop().create_future()
            self.waiters.append(waiter)

        try:
            return await asyncio.wait_for(waiter, timeout)
        except asyncio.TimeoutError:
            await self._abandon(waiter)
            raise ResourceExhaustedError("Request timed out in queue")
        except BaseException:
            await self._abandon(waiter)
            raise

    async def _abandon(self, waiter: asyncio.Future) -> None:
        async with self._lock:
            if waiter in self.waiters:
                self.waiters.remove(waiter)
                return
        # Granted between the wakeup and the cancellation: pass it on.
        if waiter.done() and not waiter.cancelled() and waiter.result():
            await self.release()

    async def release(self) -> None:
        async with self._lock:
            if self.current == 0:
                raise ValueError("ConcurrencyGate released too many times")
            while self.waiters and not self._closed:
                next_waiter = self.waiters.popleft()
                if not next_waiter.done():
                    # The permit moves to the waiter; current stays at 1.
                    next_waiter.set_result(True)
                    return
            self.current -= 1

    async def close(self) -> None:
        """Close the gate and wake every waiter without granting the permit."""
        async with self._lock:
            self._closed = True
            while self.waiters:
                waiter = self.waiters.popleft()
                if not waiter.done():
                    waiter.set_result(False)

    async def __aenter__(self):
        if not await self.acquire():
            raise GateClosedError()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.release()
