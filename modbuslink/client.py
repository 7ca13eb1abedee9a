"""Transport independent asynchronous Modbus client."""

from __future__ import annotations

import abc
from typing import Any, Iterable, Sequence, TypeVar

from .messages import (
    CustomRequest,
    CustomResponse,
    MaskWriteRegisterRequest,
    MaskWriteRegisterResponse,
    ReadCoilsRequest,
    ReadCoilsResponse,
    ReadDeviceIdentificationRequest,
    ReadDeviceIdentificationResponse,
    ReadDiscreteInputsRequest,
    ReadDiscreteInputsResponse,
    ReadFifoQueueRequest,
    ReadFifoQueueResponse,
    ReadFileRecordRequest,
    ReadFileRecordResponse,
    ReadHoldingRegistersRequest,
    ReadHoldingRegistersResponse,
    ReadInputRegistersRequest,
    ReadInputRegistersResponse,
    ReadWriteMultipleRegistersRequest,
    ReadWriteMultipleRegistersResponse,
    Request,
    Response,
    Slave,
    WriteFileRecordRequest,
    WriteFileRecordResponse,
    WriteMultipleCoilsRequest,
    WriteMultipleCoilsResponse,
    WriteMultipleRegistersRequest,
    WriteMultipleRegistersResponse,
    WriteSingleCoilRequest,
    WriteSingleCoilResponse,
    WriteSingleRegisterRequest,
    WriteSingleRegisterResponse,
)

_R = TypeVar("_R")

_RESPONSE_TYPES: dict[type, type] = {
    ReadCoilsRequest: ReadCoilsResponse,
    ReadDiscreteInputsRequest: ReadDiscreteInputsResponse,
    ReadHoldingRegistersRequest: ReadHoldingRegistersResponse,
    ReadInputRegistersRequest: ReadInputRegistersResponse,
    ReadWriteMultipleRegistersRequest: ReadWriteMultipleRegistersResponse,
    ReadFileRecordRequest: ReadFileRecordResponse,
    ReadFifoQueueRequest: ReadFifoQueueResponse,
    ReadDeviceIdentificationRequest: ReadDeviceIdentificationResponse,
    WriteSingleCoilRequest: WriteSingleCoilResponse,
    WriteSingleRegisterRequest: WriteSingleRegisterResponse,
    WriteMultipleCoilsRequest: WriteMultipleCoilsResponse,
    WriteMultipleRegistersRequest: WriteMultipleRegistersResponse,
    MaskWriteRegisterRequest: MaskWriteRegisterResponse,
    WriteFileRecordRequest: WriteFileRecordResponse,
    CustomRequest: CustomResponse,
}


class Client(abc.ABC):
    """A transport that carries Modbus requests to a slave device.

    ``call`` returns the matching response, raises ``ModbusException`` when the
    server answers with an exception code and ``OSError`` on transport failure.
    """

    @abc.abstractmethod
    async def call(self, request: Request) -> Response:
        """Invoke a Modbus function."""

    @abc.abstractmethod
    async def disconnect(self) -> None:
        """Shut down the underlying stream gracefully."""

    @abc.abstractmethod
    def set_slave(self, slave: Slave) -> None:
        """Address subsequent requests to ``slave``."""


class Context(Client):
    """Client context offering one method per Modbus function."""

    def __init__(self, client: Client) -> None:
        self._client = client

    async def __aenter__(self) -> Context:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.disconnect()

    async def call(self, request: Request) -> Response:
        return await self._client.call(request)

    async def disconnect(self) -> None:
        await self._client.disconnect()

    def set_slave(self, slave: Slave) -> None:
        self._client.set_slave(slave)

    async def _expect(self, request: Request, response_type: type[_R]) -> _R:
        response = await self._client.call(request)
        if not isinstance(response, response_type):
            raise ValueError(
                f"mismatching response {response!r} for request {request!r}"
            )
        return response

    async def read_coils(self, addr: int, cnt: int) -> list[bool]:
        """Read multiple coils (0x01)."""
        response = await self._expect(ReadCoilsRequest(addr, cnt), ReadCoilsResponse)
        # Responses carry whole bytes, i.e. a multiple of 8 coils.
        return list(response.coils[:cnt])

    async def read_discrete_inputs(self, addr: int, cnt: int) -> list[bool]:
        """Read multiple discrete inputs (0x02)."""
        response = await self._expect(
            ReadDiscreteInputsRequest(addr, cnt), ReadDiscreteInputsResponse
        )
        return list(response.inputs[:cnt])

    async def read_holding_registers(self, addr: int, cnt: int) -> list[int]:
        """Read multiple holding registers (0x03)."""
        response = await self._expect(
            ReadHoldingRegistersRequest(addr, cnt), ReadHoldingRegistersResponse
        )
        return list(response.values)

    async def read_input_registers(self, addr: int, cnt: int) -> list[int]:
        """Read multiple input registers (0x04)."""
        response = await self._expect(
            ReadInputRegistersRequest(addr, cnt), ReadInputRegistersResponse
        )
        return list(response.values)

    async def read_write_multiple_registers(
        self,
        read_addr: int,
        read_count: int,
        write_addr: int,
        write_data: Sequence[int],
    ) -> list[int]:
        """Write then read multiple holding registers (0x17)."""
        response = await self._expect(
            ReadWriteMultipleRegistersRequest(read_addr, read_count, write_addr, write_data),
            ReadWriteMultipleRegistersResponse,
        )
        return list(response.values)

    async def read_file_record(self, sub_requests: Iterable[Any]) -> list[Any]:
        """Read file records (0x14)."""
        response = await self._expect(
            ReadFileRecordRequest(tuple(sub_requests)), ReadFileRecordResponse
        )
        return list(response.sub_responses)

    async def read_fifo_queue(self, addr: int) -> list[int]:
        """Read a FIFO queue (0x18)."""
        response = await self._expect(ReadFifoQueueRequest(addr), ReadFifoQueueResponse)
        return list(response.values)

    async def read_device_identification(self, read_code: int, object_id: int) -> Any:
        """Read device identification (0x2B / 0x0E)."""
        response = await self._expect(
            ReadDeviceIdentificationRequest(read_code, object_id),
            ReadDeviceIdentificationResponse,
        )
        return response.identification

    async def write_single_coil(self, addr: int, coil: bool) -> None:
        """Write a single coil (0x05)."""
        await self._expect(WriteSingleCoilRequest(addr, coil), WriteSingleCoilResponse)

    async def write_single_register(self, addr: int, word: int) -> None:
        """Write a single holding register (0x06)."""
        await self._expect(
            WriteSingleRegisterRequest(addr, word), WriteSingleRegisterResponse
        )

    async def write_multiple_coils(self, addr: int, coils: Sequence[bool]) -> None:
        """Write multiple coils (0x0F)."""
        await self._expect(
            WriteMultipleCoilsRequest(addr, tuple(coils)), WriteMultipleCoilsResponse
        )

    async def write_multiple_registers(self, addr: int, words: Sequence[int]) -> None:
        """Write multiple holding registers (0x10)."""
        await self._expect(
            WriteMultipleRegistersRequest(addr, tuple(words)),
            WriteMultipleRegistersResponse,
        )

    async def masked_write_register(self, addr: int, and_mask: int, or_mask: int) -> None:
        """Set or clear individual bits of a holding register (0x16)."""
        await self._expect(
            MaskWriteRegisterRequest(addr, and_mask, or_mask), MaskWriteRegisterResponse
        )

    async def write_file_record(self, sub_requests: Iterable[Any]) -> list[Any]:
        """Write file records (0x15)."""
        response = await self._expect(
            WriteFileRecordRequest(tuple(sub_requests)), WriteFileRecordResponse
        )
        return list(response.sub_requests)