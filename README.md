# modbuslink

Modbus client contexts that work over any transport, and a few request
handlers for the server side.

The package has no dependencies outside the standard library.

## Modules

- `modbuslink.messages`: the protocol data units. `Slave` (a unit id in
  `0..=255`, with `Slave.broadcast()` for id 0 and `Slave.tcp_device()` for
  id 0xFF), `ExceptionCode`, `ModbusException`, `SlaveRequest` and one frozen
  dataclass per request and response, such as `ReadCoilsRequest` and
  `ReadCoilsResponse`. Addresses, quantities and register values are checked
  to be 16-bit unsigned integers and raise `ValueError` otherwise.
- `modbuslink.client`: the abstract `Client` interface (`call`,
  `disconnect`, `set_slave`) and `Context`, which wraps a `Client`.
- `modbuslink.sync_client`: `SyncContext`, a blocking wrapper around a
  `Context`.
- `modbuslink.services`: request handlers and register helpers.

## Client contexts

`Context` offers one coroutine per Modbus function:

- `read_coils`, `read_discrete_inputs`, `read_holding_registers`,
  `read_input_registers`, `read_write_multiple_registers`,
  `read_file_record`, `read_fifo_queue`, `read_device_identification`
- `write_single_coil`, `write_single_register`, `write_multiple_coils`,
  `write_multiple_registers`, `masked_write_register`, `write_file_record`

`read_coils` and `read_discrete_inputs` cut the answer down to the number of
values asked for, since responses carry whole bytes. If the wrapped client
returns a response of the wrong kind, `ValueError` is raised. A
`ModbusException` raised by the client, whose `code` is an `ExceptionCode`
(or a plain integer for codes outside the standard set), passes through
unchanged, as do transport errors. `Context` can also be used with
`async with`, which disconnects on exit.

```python
import asyncio

from modbuslink.client import Client, Context
from modbuslink.messages import ExceptionCode, ModbusException, Slave, SlaveRequest
from modbuslink.services import RegisterService


class LoopbackClient(Client):
    """Hands every request straight to a service in the same process."""

    def __init__(self, service):
        self.service = service
        self.slave = Slave.tcp_device()

    async def call(self, request):
        return self.service.handle(SlaveRequest(self.slave.id, request))

    async def disconnect(self):
        pass

    def set_slave(self, slave):
        self.slave = slave


async def main():
    async with Context(LoopbackClient(RegisterService.example())) as ctx:
        ctx.set_slave(Slave(1))
        print(await ctx.read_input_registers(0x00, 2))  # [1234, 5678]
        await ctx.write_multiple_registers(0x01, [7777, 8888])
        print(await ctx.read_holding_registers(0x00, 4))  # [10, 7777, 8888, 40]
        try:
            await ctx.read_holding_registers(0x100, 1)
        except ModbusException as exc:
            assert exc.code is ExceptionCode.ILLEGAL_DATA_ADDRESS


asyncio.run(main())
```

## Blocking use

`SyncContext` runs each operation of a `Context` on its own private event
loop. The timeout is given in seconds or as a `timedelta`; `timeout()`
returns it in seconds, `set_timeout(None)` or `reset_timeout()` turns it
off. When it elapses, `TimeoutError` is raised. `close()` disconnects the
client and closes the loop; the context can also be used in a `with` block.
Calls after closing raise `RuntimeError`.

```python
from modbuslink.sync_client import SyncContext

with SyncContext(Context(LoopbackClient(RegisterService.example())), timeout=2.0) as ctx:
    print(ctx.read_input_registers(0x00, 2))
```

## Services

Each service has a `handle(request)` method that returns a response or
raises `ModbusException` with the code to answer with.

- `RegisterService(input_registers, holding_registers)` answers input and
  holding register reads, and single and multiple register writes, from
  dictionaries; any other function raises `ILLEGAL_FUNCTION`.
  `RegisterService.example()` holds inputs `{0: 1234, 1: 5678}` and holding
  registers `{0: 10, 1: 20, 2: 30, 3: 40}`.
- `SlaveFilterService(slave)` takes a `SlaveRequest`, returns `None` for
  requests to other slaves and answers input register reads with zeros and
  `0x77` at index 2.
- `FixedInputService` answers input register reads the same way, raises
  `ILLEGAL_DATA_ADDRESS` for holding register reads and `ILLEGAL_FUNCTION`
  for anything else.
- `ExceptionTestService` answers every request with a fixed exception code
  per function, which is useful for testing clients.

`register_read(registers, addr, cnt)` and
`register_write(registers, addr, values)` work on plain dictionaries and
raise `ILLEGAL_DATA_ADDRESS` for a missing register.

## What is not included

There are no TCP, RTU or serial transports, no encoding of frames to bytes
and no server that listens for connections. A `Client` implementation that
talks to a real device, and the loop that feeds requests to a service, have
to be supplied by the application.

## Running the tests

```
pip install -e ".[test]"
pytest
```