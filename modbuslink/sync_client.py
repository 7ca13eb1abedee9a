"""Blocking Modbus client built on top of the asynchronous client context."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Any, Awaitable, Coroutine, Iterable, Sequence, TypeVar, Union

from .client import Context
from .messages import Request, Response, Slave

_T = TypeVar("_T")

Duration = Union[float, int, timedelta, None]


def _seconds(duration: Duration) -> float | None:
    if duration is None:
        return None
    if isinstance(duration, timedelta):
        seconds = duration.total_seconds()
    elif isinstance(duration, (int, float)) and not isinstance(duration, bool):
        seconds = float(duration)
    else:
        raise TypeError(f"timeout must be seconds, a timedelta or None, got {duration!r}")
    if seconds < 0:
        raise ValueError(f"timeout must not be negative, got {duration!r}")
    return seconds


class SyncContext:
    """Blocking Modbus client context with an optional per-operation timeout.

    Every operation runs the matching coroutine of the wrapped asynchronous
    context on a private event loop. When a timeout is set and elapses,
    ``TimeoutError`` is raised.
    """

    def __init__(self, async_ctx: Context, timeout: Duration = None) -> None:
        self._async_ctx = async_ctx
        self._timeout = _seconds(timeout)
        self._loop = asyncio.new_event_loop()

    def __enter__(self) -> SyncContext:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def timeout(self) -> float | None:
        """Return the current timeout in seconds, or None if disabled."""
        return self._timeout

    def set_timeout(self, duration: Duration) -> None:
        """Set the timeout for all subsequent operations; None disables it."""
        self._timeout = _seconds(duration)

    def reset_timeout(self) -> None:
        """Disable the timeout for all subsequent operations."""
        self._timeout = None

    def close(self) -> None:
        """Disconnect the client and release the event loop."""
        if self._loop.is_closed():
            return
        try:
            self._loop.run_until_complete(self._async_ctx.disconnect())
        finally:
            self._loop.close()

    def _block_on(self, coro: Coroutine[Any, Any, _T]) -> _T:
        if self._loop.is_closed():
            coro.close()
            raise RuntimeError("the client context is closed")
        task: Awaitable[_T] = coro
        if self._timeout is not None:
            task = asyncio.wait_for(coro, self._timeout)
        try:
            return self._loop.run_until_complete(task)
        except asyncio.TimeoutError:
            raise TimeoutError(
                f"operation timed out after {self._timeout} seconds"
            ) from None

    def call(self, request: Request) -> Response:
        """Invoke a Modbus function."""
        return self._block_on(self._async_ctx.call(request))

    def set_slave(self, slave: Slave) -> None:
        """Address subsequent requests to ``slave``."""
        self._async_ctx.set_slave(slave)

    def read_coils(self, addr: int, cnt: int) -> list[bool]:
        """Read multiple coils (0x01)."""
        return self._block_on(self._async_ctx.read_coils(addr, cnt))

    def read_discrete_inputs(self, addr: int, cnt: int) -> list[bool]:
        """Read multiple discrete inputs (0x02)."""
        return self._block_on(self._async_ctx.read_discrete_inputs(addr, cnt))

    def read_holding_registers(self, addr: int, cnt: int) -> list[int]:
        """Read multiple holding registers (0x03)."""
        return self._block_on(self._async_ctx.read_holding_registers(addr, cnt))

    def read_input_registers(self, addr: int, cnt: int) -> list[int]:
        """Read multiple input registers (0x04)."""
        return self._block_on(self._async_ctx.read_input_registers(addr, cnt))

    def read_write_multiple_registers(
        self,
        read_addr: int,
        read_count: int,
        write_addr: int,
        write_data: Sequence[int],
    ) -> list[int]:
        """Write then read multiple holding registers (0x17)."""
        return self._block_on(
            self._async_ctx.read_write_multiple_registers(
                read_addr, read_count, write_addr, write_data
            )
        )

    def read_file_record(self, sub_requests: Iterable[Any]) -> list[Any]:
        """Read file records (0x14)."""
        return self._block_on(self._async_ctx.read_file_record(sub_requests))

    def read_fifo_queue(self, addr: int) -> list[int]:
        """Read a FIFO queue (0x18)."""
        return self._block_on(self._async_ctx.read_fifo_queue(addr))

    def read_device_identification(self, read_code: int, object_id: int) -> Any:
        """Read device identification (0x2B / 0x0E)."""
        return self._block_on(
            self._async_ctx.read_device_identification(read_code, object_id)
        )

    def write_single_coil(self, addr: int, coil: bool) -> None:
        """Write a single coil (0x05)."""
        self._block_on(self._async_ctx.write_single_coil(addr, coil))

    def write_single_register(self, addr: int, word: int) -> None:
        """Write a single holding register (0x06)."""
        self._block_on(self._async_ctx.write_single_register(addr, word))

    def write_multiple_coils(self, addr: int, coils: Sequence[bool]) -> None:
        """Write multiple coils (0x0F)."""
        self._block_on(self._async_ctx.write_multiple_coils(addr, coils))

    def write_multiple_registers(self, addr: int, words: Sequence[int]) -> None:
        """Write multiple holding registers (0x10)."""
        self._block_on(self._async_ctx.write_multiple_registers(addr, words))

    def masked_write_register(self, addr: int, and_mask: int, or_mask: int) -> None:
        """Set or clear individual bits of a holding register (0x16)."""
        self._block_on(self._async_ctx.masked_write_register(addr, and_mask, or_mask))

    def write_file_record(self, sub_requests: Iterable[Any]) -> list[Any]:
        """Write file records (0x15)."""
        return self._block_on(self._async_ctx.write_file_record(sub_requests))