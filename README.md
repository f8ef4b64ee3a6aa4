# dronenode

Building blocks for DroneCAN nodes in plain Python, with no dependencies
outside the standard library. The package holds the message types a node
exchanges, an in-process bus, a parameter server, the allocatee side of
dynamic node ID allocation and a firmware downloader. Time is injected
everywhere, so all of it can be driven deterministically.

## Modules

| Module | What it provides |
| --- | --- |
| `dronenode.clock` | `Clock`, a monotonic clock counting microseconds and milliseconds from its first reading, and `ManualClock`, which only moves when you call `advance` |
| `dronenode.messages` | Dataclasses for the payloads: `NodeStatus`, `NodeInfo`, `SoftwareVersion`, `HardwareVersion`, `ParamValue`, `GetSetRequest`/`GetSetResponse`, `ExecuteOpcodeRequest`/`ExecuteOpcodeResponse`, `Allocation`, `BatteryInfo`, `EscStatus`, `RawCommand`, `ActuatorCommand`, `ArrayCommand`, `ActuatorStatus`, `RangeMeasurement`, `BeginFirmwareUpdateRequest`/`BeginFirmwareUpdateResponse`, `FileReadRequest`/`FileReadResponse`, `RestartNodeRequest`, and the `Health`, `Mode` and `ParamValueType` enumerations |
| `dronenode.transport` | `Transfer`, `TransferType`, `Priority`, `TransportError` and `InMemoryBus` |
| `dronenode.params` | `Parameter`, `ParameterTable` and `SettingsStore` |
| `dronenode.dna` | `DynamicNodeAllocator` |
| `dronenode.firmware` | `FirmwareUpdater` |

## Behaviour worth knowing

* `Clock.millis()` and `ManualClock.millis()` wrap at 32 bits.
  `ManualClock.advance` refuses negative steps with `ValueError`.
* `Allocation.encode()` puts the node ID in the top seven bits of the
  first byte and the "first part of unique ID" flag in bit 0, followed by
  the unique ID bytes; `Allocation.decode()` reverses it. Empty messages,
  unique IDs longer than 16 bytes and node IDs outside 0–127 raise
  `ValueError`.
* `InMemoryBus` records everything it sends in `sent` (drain it with
  `pop_sent()`), queues incoming transfers with `deliver()` and hands them
  out with `receive()`. Transfer IDs count modulo 32, separately for each
  stream. A bus with node ID 0 cannot send requests or responses and
  raises `TransportError`; responses reuse the request's transfer ID and
  priority.
* `ParameterTable.find()` looks a parameter up by name, or by index when
  the name is empty. `get_set()` sets the value when the request carries
  both a name and a non-empty value, calls `on_change` if one was given,
  and always answers with the current value; an unknown parameter gets an
  empty `GetSetResponse`. Values are held as single-precision floats.
  `execute_opcode()` acknowledges every opcode with `ok=True`.
* `SettingsStore` saves a table's values to `settings.dat` (or a path
  you give) as consecutive little-endian 32-bit floats, and loads them
  back in table order.
* `DynamicNodeAllocator` asks for node ID 73 by default and sends the
  16-byte unique ID at most six bytes at a time. A request is due when
  the clock passes a randomised deadline 600–999 ms after the last
  request or received allocation message; a matching partial answer from
  an allocator brings the next request forward by 600 ms.
* `FirmwareUpdater` writes the image to `newfirmware.bin` (or the
  `image_path` you give). It repeats a read request every 750 ms until
  an answer arrives, asks for the next chunk straight after an accepted
  one, and finishes when a chunk shorter than 256 bytes arrives.
  `vendor_status_code()` reports progress in kilobytes while an update
  runs.

## Example

```python
from dronenode.clock import ManualClock
from dronenode.dna import DynamicNodeAllocator
from dronenode.messages import Allocation, GetSetRequest, ParamValue, ParamValueType
from dronenode.params import Parameter, ParameterTable

clock = ManualClock()
unique_id = bytes(range(16))
allocator = DynamicNodeAllocator(unique_id, clock)

clock.advance(1_000)
assert allocator.due()
request = allocator.make_request()
assert request.unique_id == unique_id[:6] and request.first_part_of_unique_id

allocator.handle_allocation(10, Allocation(unique_id=unique_id[:6]))
assert allocator.handle_allocation(10, Allocation(node_id=42, unique_id=unique_id)) == 42

table = ParameterTable([Parameter("CAN_NODE", ParamValueType.INTEGER_VALUE, 0, 0, 127)])
reply = table.get_set(
    GetSetRequest(name="CAN_NODE", value=ParamValue(ParamValueType.INTEGER_VALUE, 42))
)
assert reply.value.value == 42
```

## What this package does not do

* There is no runnable node and no command to start one: nothing here
  ties the pieces into a main loop that broadcasts `NodeStatus`, answers
  node info requests or dispatches incoming transfers.
* There is no connection to a real CAN interface or network; the only
  bus is `InMemoryBus`.
* Messages other than `Allocation` have no wire encoding; they are plain
  dataclasses.
* The telemetry message types (`BatteryInfo`, `EscStatus`,
  `ActuatorStatus`, `RangeMeasurement`) are defined, but nothing in the
  package produces them.

## Tests

Install the `test` extra and run `pytest`.