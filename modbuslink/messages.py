"""Modbus protocol data units: requests, responses, exception codes and slave ids."""

from __future__ import annotations

import enum
from dataclasses import dataclass, make_dataclass
from typing import Any, Callable, Iterable, Optional, Union

_Check = Callable[[str, Any], Any]


def _bounded(limit: int) -> _Check:
    def check(name: str, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= limit:
            raise ValueError(f"{name} must be an integer in 0..={limit}, got {value!r}")
        return value

    return check


_u8 = _bounded(0xFF)
_u16 = _bounded(0xFFFF)


def _words(name: str, values: Iterable[int]) -> tuple[int, ...]:
    return tuple(_u16(name, value) for value in values)


def _flag(name: str, value: Any) -> bool:
    return bool(value)


def _flags(name: str, values: Iterable[Any]) -> tuple[bool, ...]:
    return tuple(bool(value) for value in values)


def _items(name: str, values: Iterable[Any]) -> tuple[Any, ...]:
    return tuple(values)


def _raw(name: str, value: Any) -> bytes:
    return bytes(value)


def _any(name: str, value: Any) -> Any:
    return value


def _message(name: str, code: Optional[int], doc: str = "", **checks: _Check) -> type:
    """Build a frozen dataclass whose fields are validated and normalised by ``checks``."""

    def __post_init__(self: Any) -> None:
        for field_name, check in checks.items():
            value = check(field_name.replace("_", " "), getattr(self, field_name))
            object.__setattr__(self, field_name, value)

    namespace: dict[str, Any] = {
        "__post_init__": __post_init__,
        "__doc__": doc or f"{name} protocol data unit.",
        "__module__": __name__,
    }
    if code is not None:
        namespace["function_code"] = code
    return make_dataclass(name, list(checks), frozen=True, namespace=namespace)


class ExceptionCode(enum.IntEnum):
    """Exception codes a Modbus server may answer with."""

    ILLEGAL_FUNCTION = 0x01
    ILLEGAL_DATA_ADDRESS = 0x02
    ILLEGAL_DATA_VALUE = 0x03
    SERVER_DEVICE_FAILURE = 0x04
    ACKNOWLEDGE = 0x05
    SERVER_DEVICE_BUSY = 0x06
    MEMORY_PARITY_ERROR = 0x08
    GATEWAY_PATH_UNAVAILABLE = 0x0A
    GATEWAY_TARGET_DEVICE = 0x0B

    @property
    def description(self) -> str:
        return self.name.replace("_", " ").capitalize()

    def __str__(self) -> str:
        return self.description


class ModbusException(Exception):
    """Raised when the server answers a request with an exception response."""

    def __init__(self, code: ExceptionCode | int) -> None:
        try:
            self.code: ExceptionCode | int = ExceptionCode(code)
        except ValueError:
            self.code = _u8("exception code", code)
        text = (
            self.code.description
            if isinstance(self.code, ExceptionCode)
            else f"Custom exception 0x{self.code:02X}"
        )
        super().__init__(f"Modbus exception: {text}")


@dataclass(frozen=True)
class Slave:
    """Identifier of a slave (unit) device on a Modbus network."""

    id: int

    def __post_init__(self) -> None:
        _u8("slave id", self.id)

    @classmethod
    def broadcast(cls) -> Slave:
        """The reserved broadcast address, received by every slave."""
        return cls(0)

    @classmethod
    def tcp_device(cls) -> Slave:
        """The unit id addressing a Modbus TCP device directly."""
        return cls(0xFF)

    def __int__(self) -> int:
        return self.id

    def __str__(self) -> str:
        return f"{self.id} (0x{self.id:02X})"


SlaveRequest = _message(
    "SlaveRequest",
    None,
    "A request together with the slave id it was addressed to.",
    slave=_u8,
    request=_any,
)

_RANGE = {"address": _u16, "quantity": _u16}
_MASKS = {"address": _u16, "and_mask": _u16, "or_mask": _u16}

# Requests

ReadCoilsRequest = _message("ReadCoilsRequest", 0x01, **_RANGE)
ReadDiscreteInputsRequest = _message("ReadDiscreteInputsRequest", 0x02, **_RANGE)
ReadHoldingRegistersRequest = _message("ReadHoldingRegistersRequest", 0x03, **_RANGE)
ReadInputRegistersRequest = _message("ReadInputRegistersRequest", 0x04, **_RANGE)
ReadWriteMultipleRegistersRequest = _message(
    "ReadWriteMultipleRegistersRequest",
    0x17,
    "Writes ``values`` first, then reads ``read_quantity`` registers.",
    read_address=_u16,
    read_quantity=_u16,
    write_address=_u16,
    values=_words,
)
ReadFileRecordRequest = _message("ReadFileRecordRequest", 0x14, sub_requests=_items)
ReadFifoQueueRequest = _message("ReadFifoQueueRequest", 0x18, address=_u16)
ReadDeviceIdentificationRequest = _message(
    "ReadDeviceIdentificationRequest", 0x2B, read_code=_u8, object_id=_u8
)
WriteSingleCoilRequest = _message("WriteSingleCoilRequest", 0x05, address=_u16, coil=_flag)
WriteSingleRegisterRequest = _message(
    "WriteSingleRegisterRequest", 0x06, address=_u16, value=_u16
)
WriteMultipleCoilsRequest = _message(
    "WriteMultipleCoilsRequest", 0x0F, address=_u16, coils=_flags
)
WriteMultipleRegistersRequest = _message(
    "WriteMultipleRegistersRequest", 0x10, address=_u16, values=_words
)
MaskWriteRegisterRequest = _message("MaskWriteRegisterRequest", 0x16, **_MASKS)
WriteFileRecordRequest = _message("WriteFileRecordRequest", 0x15, sub_requests=_items)
CustomRequest = _message(
    "CustomRequest",
    None,
    "A request with an arbitrary function code and raw payload.",
    function_code=_u8,
    data=_raw,
)

# Responses

ReadCoilsResponse = _message("ReadCoilsResponse", 0x01, coils=_flags)
ReadDiscreteInputsResponse = _message("ReadDiscreteInputsResponse", 0x02, inputs=_flags)
ReadHoldingRegistersResponse = _message("ReadHoldingRegistersResponse", 0x03, values=_words)
ReadInputRegistersResponse = _message("ReadInputRegistersResponse", 0x04, values=_words)
ReadWriteMultipleRegistersResponse = _message(
    "ReadWriteMultipleRegistersResponse", 0x17, values=_words
)
ReadFileRecordResponse = _message("ReadFileRecordResponse", 0x14, sub_responses=_items)
ReadFifoQueueResponse = _message("ReadFifoQueueResponse", 0x18, values=_words)
ReadDeviceIdentificationResponse = _message(
    "ReadDeviceIdentificationResponse", 0x2B, identification=_any
)
WriteSingleCoilResponse = _message("WriteSingleCoilResponse", 0x05, address=_u16, coil=_flag)
WriteSingleRegisterResponse = _message(
    "WriteSingleRegisterResponse", 0x06, address=_u16, value=_u16
)
WriteMultipleCoilsResponse = _message("WriteMultipleCoilsResponse", 0x0F, **_RANGE)
WriteMultipleRegistersResponse = _message("WriteMultipleRegistersResponse", 0x10, **_RANGE)
MaskWriteRegisterResponse = _message("MaskWriteRegisterResponse", 0x16, **_MASKS)
WriteFileRecordResponse = _message("WriteFileRecordResponse", 0x15, sub_requests=_items)
CustomResponse = _message("CustomResponse", None, function_code=_u8, data=_raw)


REQUEST_TYPES = (
    ReadCoilsRequest,
    ReadDiscreteInputsRequest,
    ReadHoldingRegistersRequest,
    ReadInputRegistersRequest,
    ReadWriteMultipleRegistersRequest,
    ReadFileRecordRequest,
    ReadFifoQueueRequest,
    ReadDeviceIdentificationRequest,
    WriteSingleCoilRequest,
    WriteSingleRegisterRequest,
    WriteMultipleCoilsRequest,
    WriteMultipleRegistersRequest,
    MaskWriteRegisterRequest,
    WriteFileRecordRequest,
    CustomRequest,
)

RESPONSE_TYPES = (
    ReadCoilsResponse,
    ReadDiscreteInputsResponse,
    ReadHoldingRegistersResponse,
    ReadInputRegistersResponse,
    ReadWriteMultipleRegistersResponse,
    ReadFileRecordResponse,
    ReadFifoQueueResponse,
    ReadDeviceIdentificationResponse,
    WriteSingleCoilResponse,
    WriteSingleRegisterResponse,
    WriteMultipleCoilsResponse,
    WriteMultipleRegistersResponse,
    MaskWriteRegisterResponse,
    WriteFileRecordResponse,
    CustomResponse,
)

Request = Union[REQUEST_TYPES]  # type: ignore[valid-type]
Response = Union[RESPONSE_TYPES]  # type: ignore[valid-type]