"""Ready-made request handlers for Modbus servers.

A service takes a request (optionally wrapped in a ``SlaveRequest``) and
returns the matching response, or raises ``ModbusException`` with the
exception code the server should answer with.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Mapping, MutableMapping, Sequence

from .messages import (
    ExceptionCode,
    MaskWriteRegisterRequest,
    ModbusException,
    ReadCoilsRequest,
    ReadDiscreteInputsRequest,
    ReadHoldingRegistersRequest,
    ReadHoldingRegistersResponse,
    ReadInputRegistersRequest,
    ReadInputRegistersResponse,
    Request,
    Response,
    Slave,
    SlaveRequest,
    WriteMultipleCoilsRequest,
    WriteMultipleRegistersRequest,
    WriteMultipleRegistersResponse,
    WriteSingleCoilRequest,
    WriteSingleRegisterRequest,
    WriteSingleRegisterResponse,
)

_log = logging.getLogger(__name__)


def _unwrap(request: Any) -> Request:
    return request.request if isinstance(request, SlaveRequest) else request


def register_read(registers: Mapping[int, int], addr: int, cnt: int) -> list[int]:
    """Read ``cnt`` consecutive registers starting at ``addr``.

    Raises ``ModbusException`` with ``ILLEGAL_DATA_ADDRESS`` if any of them
    does not exist.
    """
    values = []
    for reg_addr in range(addr, addr + cnt):
        try:
            values.append(registers[reg_addr])
        except KeyError:
            _log.info("illegal data address %#06x", reg_addr)
            raise ModbusException(ExceptionCode.ILLEGAL_DATA_ADDRESS) from None
    return values


def register_write(
    registers: MutableMapping[int, int], addr: int, values: Sequence[int]
) -> None:
    """Write ``values`` to consecutive existing registers starting at ``addr``.

    Registers are written in order; on the first missing address the writing
    stops and ``ModbusException`` with ``ILLEGAL_DATA_ADDRESS`` is raised.
    """
    for reg_addr, value in enumerate(values, start=addr):
        if reg_addr not in registers:
            _log.info("illegal data address %#06x", reg_addr)
            raise ModbusException(ExceptionCode.ILLEGAL_DATA_ADDRESS)
        registers[reg_addr] = value


class RegisterService:
    """Serves input and holding registers kept in memory."""

    def __init__(
        self,
        input_registers: Mapping[int, int],
        holding_registers: Mapping[int, int],
    ) -> None:
        self.input_registers: dict[int, int] = dict(input_registers)
        self.holding_registers: dict[int, int] = dict(holding_registers)
        self._lock = threading.Lock()

    @classmethod
    def example(cls) -> RegisterService:
        """A service preloaded with a few sample register values."""
        return cls(
            input_registers={0: 1234, 1: 5678},
            holding_registers={0: 10, 1: 20, 2: 30, 3: 40},
        )

    def handle(self, request: Any) -> Response:
        """Answer register reads and writes; other functions are illegal."""
        if isinstance(request, SlaveRequest):
            _log.debug("request for slave %s", request.slave)
        req = _unwrap(request)
        with self._lock:
            if isinstance(req, ReadInputRegistersRequest):
                return ReadInputRegistersResponse(
                    register_read(self.input_registers, req.address, req.quantity)
                )
            if isinstance(req, ReadHoldingRegistersRequest):
                return ReadHoldingRegistersResponse(
                    register_read(self.holding_registers, req.address, req.quantity)
                )
            if isinstance(req, WriteMultipleRegistersRequest):
                register_write(self.holding_registers, req.address, req.values)
                return WriteMultipleRegistersResponse(req.address, len(req.values))
            if isinstance(req, WriteSingleRegisterRequest):
                register_write(self.holding_registers, req.address, (req.value,))
                return WriteSingleRegisterResponse(req.address, req.value)
        _log.info("unimplemented function in request %r", req)
        raise ModbusException(ExceptionCode.ILLEGAL_FUNCTION)


def _fixed_input_registers(cnt: int) -> ReadInputRegistersResponse:
    registers = [0] * cnt
    if cnt > 2:
        registers[2] = 0x77
    return ReadInputRegistersResponse(registers)


class SlaveFilterService:
    """Answers only requests addressed to one slave; others are ignored."""

    def __init__(self, slave: Slave | int) -> None:
        self.slave = int(slave)

    def handle(self, request: SlaveRequest) -> Response | None:
        """Return None for other slaves, else answer input register reads."""
        if request.slave != self.slave:
            return None
        req = request.request
        if isinstance(req, ReadInputRegistersRequest):
            return _fixed_input_registers(req.quantity)
        raise ModbusException(ExceptionCode.ILLEGAL_FUNCTION)


class FixedInputService:
    """Serves constant input registers and rejects holding register reads."""

    def handle(self, request: Any) -> Response:
        """Answer input register reads with zeros and 0x77 at index 2."""
        req = _unwrap(request)
        if isinstance(req, ReadInputRegistersRequest):
            return _fixed_input_registers(req.quantity)
        if isinstance(req, ReadHoldingRegistersRequest):
            raise ModbusException(ExceptionCode.ILLEGAL_DATA_ADDRESS)
        raise ModbusException(ExceptionCode.ILLEGAL_FUNCTION)


_TEST_EXCEPTIONS: dict[type, ExceptionCode] = {
    ReadCoilsRequest: ExceptionCode.ACKNOWLEDGE,
    ReadDiscreteInputsRequest: ExceptionCode.GATEWAY_PATH_UNAVAILABLE,
    WriteSingleCoilRequest: ExceptionCode.GATEWAY_TARGET_DEVICE,
    WriteMultipleCoilsRequest: ExceptionCode.ILLEGAL_DATA_ADDRESS,
    ReadInputRegistersRequest: ExceptionCode.ILLEGAL_DATA_VALUE,
    ReadHoldingRegistersRequest: ExceptionCode.ILLEGAL_FUNCTION,
    WriteSingleRegisterRequest: ExceptionCode.MEMORY_PARITY_ERROR,
    WriteMultipleRegistersRequest: ExceptionCode.SERVER_DEVICE_BUSY,
    MaskWriteRegisterRequest: ExceptionCode.SERVER_DEVICE_FAILURE,
}


class ExceptionTestService:
    """Answers every request with a fixed exception code per function."""

    def handle(self, request: Any) -> Response:
        """Always raise the exception code assigned to the request's function."""
        req = _unwrap(request)
        code = _TEST_EXCEPTIONS.get(type(req), ExceptionCode.ILLEGAL_FUNCTION)
        raise ModbusException(code)