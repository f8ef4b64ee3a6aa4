"""Message and service payloads exchanged by the nodes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar, Union

UNIQUE_ID_LENGTH = 16
MAX_NODE_ID = 127


class Health(IntEnum):
    OK = 0
    WARNING = 1
    ERROR = 2
    CRITICAL = 3


class Mode(IntEnum):
    OPERATIONAL = 0
    INITIALIZATION = 1
    MAINTENANCE = 2
    SOFTWARE_UPDATE = 3
    OFFLINE = 7


class ParamValueType(IntEnum):
    EMPTY = 0
    INTEGER_VALUE = 1
    REAL_VALUE = 2
    BOOLEAN_VALUE = 3
    STRING_VALUE = 4


@dataclass
class NodeStatus:
    data_type_id: ClassVar[int] = 341

    uptime_sec: int = 0
    health: Health = Health.OK
    mode: Mode = Mode.OPERATIONAL
    sub_mode: int = 0
    vendor_specific_status_code: int = 0


@dataclass
class SoftwareVersion:
    major: int = 0
    minor: int = 0
    optional_field_flags: int = 0
    vcs_commit: int = 0
    image_crc: int = 0


@dataclass
class HardwareVersion:
    major: int = 0
    minor: int = 0
    unique_id: bytes = bytes(UNIQUE_ID_LENGTH)
    certificate_of_authenticity: bytes = b""

    def __post_init__(self) -> None:
        self.unique_id = bytes(self.unique_id)
        if len(self.unique_id) != UNIQUE_ID_LENGTH:
            raise ValueError(f"unique id must be {UNIQUE_ID_LENGTH} bytes")


@dataclass
class GetNodeInfoRequest:
    data_type_id: ClassVar[int] = 1


@dataclass
class NodeInfo:
    """Response to a GetNodeInfo request."""

    data_type_id: ClassVar[int] = 1
    MAX_NAME_LENGTH: ClassVar[int] = 80

    status: NodeStatus = field(default_factory=NodeStatus)
    software_version: SoftwareVersion = field(default_factory=SoftwareVersion)
    hardware_version: HardwareVersion = field(default_factory=HardwareVersion)
    name: str = ""

    def __post_init__(self) -> None:
        if len(self.name.encode()) > self.MAX_NAME_LENGTH:
            raise ValueError("node name is too long")


ParamScalar = Union[int, float, bool, str, None]


@dataclass
class ParamValue:
    type: ParamValueType = ParamValueType.EMPTY
    value: ParamScalar = None


@dataclass
class GetSetRequest:
    data_type_id: ClassVar[int] = 11

    index: int = 0
    value: ParamValue = field(default_factory=ParamValue)
    name: str = ""


@dataclass
class GetSetResponse:
    data_type_id: ClassVar[int] = 11

    value: ParamValue = field(default_factory=ParamValue)
    name: str = ""


@dataclass
class ExecuteOpcodeRequest:
    data_type_id: ClassVar[int] = 10
    OPCODE_SAVE: ClassVar[int] = 0
    OPCODE_ERASE: ClassVar[int] = 1

    opcode: int = 0
    argument: int = 0


@dataclass
class ExecuteOpcodeResponse:
    data_type_id: ClassVar[int] = 10

    argument: int = 0
    ok: bool = False


@dataclass
class Allocation:
    """Dynamic node ID allocation message."""

    data_type_id: ClassVar[int] = 1
    MIN_REQUEST_PERIOD_MS: ClassVar[int] = 600
    MAX_FOLLOWUP_DELAY_MS: ClassVar[int] = 400
    FOLLOWUP_TIMEOUT_MS: ClassVar[int] = 500
    MAX_LENGTH_OF_UNIQUE_ID_IN_REQUEST: ClassVar[int] = 6

    node_id: int = 0
    first_part_of_unique_id: bool = False
    unique_id: bytes = b""

    def encode(self) -> bytes:
        """Serialise: node ID in the top seven bits, the flag in bit 0, then the ID."""
        if not 0 <= self.node_id <= MAX_NODE_ID:
            raise ValueError(f"node id {self.node_id} out of range")
        if len(self.unique_id) > UNIQUE_ID_LENGTH:
            raise ValueError("unique id is too long")
        head = (self.node_id << 1) | int(self.first_part_of_unique_id)
        return bytes([head]) + bytes(self.unique_id)

    @classmethod
    def decode(cls, data: bytes) -> "Allocation":
        """Parse an encoded allocation message."""
        data = bytes(data)
        if not data:
            raise ValueError("empty allocation message")
        if len(data) - 1 > UNIQUE_ID_LENGTH:
            raise ValueError("unique id is too long")
        return cls(
            node_id=data[0] >> 1,
            first_part_of_unique_id=bool(data[0] & 1),
            unique_id=data[1:],
        )


@dataclass
class BatteryInfo:
    data_type_id: ClassVar[int] = 1092
    MAX_MODEL_NAME_LENGTH: ClassVar[int] = 31

    temperature: float = 0.0
    voltage: float = 0.0
    current: float = 0.0
    average_power_10sec: float = 0.0
    remaining_capacity_wh: float = 0.0
    full_charge_capacity_wh: float = 0.0
    hours_to_full_charge: float = 0.0
    status_flags: int = 0
    state_of_health_pct: int = 0
    state_of_charge_pct: int = 0
    state_of_charge_pct_stdev: int = 0
    battery_id: int = 0
    model_instance_id: int = 0
    model_name: str = ""

    def __post_init__(self) -> None:
        if len(self.model_name.encode()) > self.MAX_MODEL_NAME_LENGTH:
            raise ValueError("model name is too long")


@dataclass
class EscStatus:
    data_type_id: ClassVar[int] = 1034

    error_count: int = 0
    voltage: float = 0.0
    current: float = 0.0
    temperature: float = 0.0
    rpm: int = 0
    power_rating_pct: int = 0
    esc_index: int = 0


@dataclass
class RawCommand:
    data_type_id: ClassVar[int] = 1030
    MAX_VALUE: ClassVar[int] = 8191

    cmd: tuple[int, ...] = ()


@dataclass
class ActuatorCommand:
    COMMAND_TYPE_UNITLESS: ClassVar[int] = 0
    COMMAND_TYPE_POSITION: ClassVar[int] = 1
    COMMAND_TYPE_FORCE: ClassVar[int] = 2
    COMMAND_TYPE_SPEED: ClassVar[int] = 3
    COMMAND_TYPE_PWM: ClassVar[int] = 4

    actuator_id: int = 0
    command_type: int = 0
    command_value: float = 0.0


@dataclass
class ArrayCommand:
    data_type_id: ClassVar[int] = 1010

    commands: tuple[ActuatorCommand, ...] = ()


@dataclass
class ActuatorStatus:
    data_type_id: ClassVar[int] = 1011

    actuator_id: int = 0
    position: float = 0.0
    force: float = 0.0
    speed: float = 0.0
    power_rating_pct: int = 0


@dataclass
class RangeMeasurement:
    data_type_id: ClassVar[int] = 1050
    READING_TYPE_UNDEFINED: ClassVar[int] = 0
    READING_TYPE_VALID_RANGE: ClassVar[int] = 1
    READING_TYPE_TOO_CLOSE: ClassVar[int] = 2
    READING_TYPE_TOO_FAR: ClassVar[int] = 3

    timestamp_usec: int = 0
    sensor_id: int = 0
    sensor_type: int = 0
    reading_type: int = 0
    field_of_view: float = 0.0
    range: float = 0.0


@dataclass
class BeginFirmwareUpdateRequest:
    data_type_id: ClassVar[int] = 40

    source_node_id: int = 0
    image_file_remote_path: str = ""


@dataclass
class BeginFirmwareUpdateResponse:
    data_type_id: ClassVar[int] = 40
    ERROR_OK: ClassVar[int] = 0

    error: int = 0
    optional_error_message: str = ""


@dataclass
class FileReadRequest:
    data_type_id: ClassVar[int] = 48

    offset: int = 0
    path: str = ""


@dataclass
class FileReadResponse:
    data_type_id: ClassVar[int] = 48
    ERROR_OK: ClassVar[int] = 0
    MAX_DATA_LENGTH: ClassVar[int] = 256

    error: int = 0
    data: bytes = b""


@dataclass
class RestartNodeRequest:
    data_type_id: ClassVar[int] = 5
    MAGIC_NUMBER: ClassVar[int] = 0xACCE551B1E

    magic_number: int = 0