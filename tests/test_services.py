import pytest

from modbuslink.client import Client, Context
from modbuslink.messages import (
    CustomRequest,
    ExceptionCode,
    ModbusException,
    ReadCoilsRequest,
    ReadHoldingRegistersRequest,
    ReadInputRegistersRequest,
    ReadInputRegistersResponse,
    Slave,
    SlaveRequest,
    WriteMultipleRegistersRequest,
    WriteMultipleRegistersResponse,
    WriteSingleRegisterRequest,
    WriteSingleRegisterResponse,
)
from modbuslink.services import (
    ExceptionTestService,
    FixedInputService,
    RegisterService,
    SlaveFilterService,
    register_read,
    register_write,
)


class LoopbackClient(Client):
    """Hands requests straight to a service, wrapped with the current slave."""

    def __init__(self, service, slave=Slave.tcp_device()):
        self.service = service
        self.slave = slave
        self.disconnected = False

    async def call(self, request):
        response = self.service.handle(SlaveRequest(int(self.slave), request))
        if response is None:
            raise TimeoutError("no response")
        return response

    async def disconnect(self):
        self.disconnected = True

    def set_slave(self, slave):
        self.slave = slave


def test_register_read_returns_values():
    assert register_read({0: 1, 1: 2, 2: 3}, 1, 2) == [2, 3]


def test_register_read_zero_count():
    assert register_read({}, 5, 0) == []


def test_register_read_missing_address():
    with pytest.raises(ModbusException) as info:
        register_read({0: 1}, 0, 2)
    assert info.value.code == ExceptionCode.ILLEGAL_DATA_ADDRESS


def test_register_write_updates_registers():
    registers = {0: 1, 1: 2, 2: 3}
    register_write(registers, 1, [9, 8])
    assert registers == {0: 1, 1: 9, 2: 8}


def test_register_write_stops_at_missing_address():
    registers = {0: 1, 1: 2}
    with pytest.raises(ModbusException) as info:
        register_write(registers, 1, [5, 6])
    assert info.value.code == ExceptionCode.ILLEGAL_DATA_ADDRESS
    assert registers == {0: 1, 1: 5}


def test_register_service_example_values():
    service = RegisterService.example()
    assert service.input_registers == {0: 1234, 1: 5678}
    assert service.holding_registers == {0: 10, 1: 20, 2: 30, 3: 40}


def test_register_service_single_write():
    service = RegisterService.example()
    response = service.handle(WriteSingleRegisterRequest(2, 99))
    assert response == WriteSingleRegisterResponse(2, 99)
    assert service.holding_registers[2] == 99


def test_register_service_multiple_write_response():
    service = RegisterService.example()
    response = service.handle(SlaveRequest(1, WriteMultipleRegistersRequest(0, [1, 2, 3])))
    assert response == WriteMultipleRegistersResponse(0, 3)


def test_register_service_rejects_other_functions():
    service = RegisterService.example()
    with pytest.raises(ModbusException) as info:
        service.handle(ReadCoilsRequest(0, 1))
    assert info.value.code == ExceptionCode.ILLEGAL_FUNCTION


@pytest.mark.asyncio
async def test_register_service_client_session():
    ctx = Context(LoopbackClient(RegisterService.example(), Slave(1)))
    assert await ctx.read_input_registers(0x00, 2) == [1234, 5678]
    await ctx.write_multiple_registers(0x01, [7777, 8888])
    assert await ctx.read_holding_registers(0x00, 4) == [10, 7777, 8888, 40]
    with pytest.raises(ModbusException) as info:
        await ctx.read_holding_registers(0x100, 1)
    assert info.value.code == ExceptionCode.ILLEGAL_DATA_ADDRESS


def test_slave_filter_ignores_other_slaves():
    service = SlaveFilterService(Slave(12))
    assert service.handle(SlaveRequest(13, ReadInputRegistersRequest(0, 7))) is None


@pytest.mark.asyncio
async def test_slave_filter_client_session():
    slave = Slave(12)
    ctx = Context(LoopbackClient(SlaveFilterService(slave), slave))
    assert await ctx.read_input_registers(0x00, 7) == [0, 0, 0x77, 0, 0, 0, 0]
    with pytest.raises(ModbusException) as info:
        await ctx.read_holding_registers(0x100, 1)
    assert info.value.code == ExceptionCode.ILLEGAL_FUNCTION


def test_fixed_input_service_reads():
    response = FixedInputService().handle(ReadInputRegistersRequest(0, 7))
    assert response == ReadInputRegistersResponse([0, 0, 0x77, 0, 0, 0, 0])


def test_fixed_input_service_rejects_holding_registers():
    with pytest.raises(ModbusException) as info:
        FixedInputService().handle(ReadHoldingRegistersRequest(0x100, 1))
    assert info.value.code == ExceptionCode.ILLEGAL_DATA_ADDRESS


@pytest.mark.asyncio
async def test_fixed_input_service_via_broadcast_context():
    ctx = Context(LoopbackClient(FixedInputService(), Slave.broadcast()))
    assert await ctx.read_input_registers(0x00, 7) == [0, 0, 0x77, 0, 0, 0, 0]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("operation", "expected"),
    [
        (lambda ctx: ctx.read_coils(0x00, 2), ExceptionCode.ACKNOWLEDGE),
        (lambda ctx: ctx.read_discrete_inputs(0x00, 2), ExceptionCode.GATEWAY_PATH_UNAVAILABLE),
        (lambda ctx: ctx.write_single_coil(0x00, True), ExceptionCode.GATEWAY_TARGET_DEVICE),
        (lambda ctx: ctx.write_multiple_coils(0x00, [True]), ExceptionCode.ILLEGAL_DATA_ADDRESS),
        (lambda ctx: ctx.read_input_registers(0x00, 2), ExceptionCode.ILLEGAL_DATA_VALUE),
        (lambda ctx: ctx.read_holding_registers(0x00, 2), ExceptionCode.ILLEGAL_FUNCTION),
        (lambda ctx: ctx.write_single_register(0x00, 42), ExceptionCode.MEMORY_PARITY_ERROR),
        (lambda ctx: ctx.write_multiple_registers(0x00, [42]), ExceptionCode.SERVER_DEVICE_BUSY),
        (lambda ctx: ctx.masked_write_register(0x00, 0, 0), ExceptionCode.SERVER_DEVICE_FAILURE),
        (
            lambda ctx: ctx.read_write_multiple_registers(0x00, 0, 0, [42]),
            ExceptionCode.ILLEGAL_FUNCTION,
        ),
    ],
)
async def test_all_exceptions(operation, expected):
    ctx = Context(LoopbackClient(ExceptionTestService(), Slave(1)))
    with pytest.raises(ModbusException) as info:
        await operation(ctx)
    assert info.value.code == expected


def test_exception_service_custom_function():
    with pytest.raises(ModbusException) as info:
        ExceptionTestService().handle(CustomRequest(70, b"\x2a"))
    assert info.value.code == ExceptionCode.ILLEGAL_FUNCTION