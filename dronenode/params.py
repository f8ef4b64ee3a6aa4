"""Parameter server: named node settings readable and writable over the bus."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator

from .messages import (
    ExecuteOpcodeRequest,
    ExecuteOpcodeResponse,
    GetSetRequest,
    GetSetResponse,
    ParamValue,
    ParamValueType,
)

log = logging.getLogger(__name__)

SETTINGS_PATH = "settings.dat"

_SUPPORTED_TYPES = frozenset(
    {ParamValueType.INTEGER_VALUE, ParamValueType.BOOLEAN_VALUE, ParamValueType.REAL_VALUE}
)
_FLOAT = struct.Struct("<f")


def _as_float32(value: float) -> float:
    """Round a number to single precision, as the settings are stored."""
    return _FLOAT.unpack(_FLOAT.pack(float(value)))[0]


@dataclass
class Parameter:
    """One user-visible setting, held as a single-precision float."""

    name: str
    type: ParamValueType
    value: float = 0.0
    min_value: float = 0.0
    max_value: float = 0.0

    def __post_init__(self) -> None:
        self.type = ParamValueType(self.type)
        self.value = _as_float32(self.value)

    def assign(self, value: float) -> None:
        """Store a new value, rounded to single precision."""
        self.value = _as_float32(value)

    def to_param_value(self) -> ParamValue | None:
        """The current value in wire form, or ``None`` for unsupported types."""
        if self.type is ParamValueType.INTEGER_VALUE:
            return ParamValue(self.type, int(self.value))
        if self.type is ParamValueType.BOOLEAN_VALUE:
            return ParamValue(self.type, bool(self.value))
        if self.type is ParamValueType.REAL_VALUE:
            return ParamValue(self.type, float(self.value))
        return None


class ParameterTable:
    """An ordered set of parameters answering GetSet and ExecuteOpcode requests."""

    def __init__(
        self,
        parameters: Iterable[Parameter],
        on_change: Callable[[Parameter], None] | None = None,
    ) -> None:
        self._parameters = list(parameters)
        names = [p.name for p in self._parameters]
        if len(set(names)) != len(names):
            raise ValueError("parameter names must be unique")
        self.on_change = on_change

    def __len__(self) -> int:
        return len(self._parameters)

    def __iter__(self) -> Iterator[Parameter]:
        return iter(self._parameters)

    def __getitem__(self, name: str) -> Parameter:
        found = self.find(name)
        if found is None:
            raise KeyError(name)
        return found

    def find(self, name: str = "", index: int = 0) -> Parameter | None:
        """Look up by name if one is given, otherwise by position."""
        if name:
            return next((p for p in self._parameters if p.name == name), None)
        if 0 <= index < len(self._parameters):
            return self._parameters[index]
        return None

    def get_set(self, request: GetSetRequest) -> GetSetResponse | None:
        """Apply a set (named request carrying a value) and report the current value.

        Returns ``None`` when the parameter has a type that cannot be exchanged,
        in which case no answer is sent.
        """
        param = self.find(request.name, request.index)
        if param is None:
            return GetSetResponse()

        if param.type not in _SUPPORTED_TYPES:
            return None

        incoming = request.value
        if request.name and incoming.type is not ParamValueType.EMPTY:
            if self._apply(param, incoming):
                if self.on_change is not None:
                    self.on_change(param)

        value = param.to_param_value()
        if value is None:
            return None
        return GetSetResponse(value=value, name=param.name)

    def execute_opcode(self, request: ExecuteOpcodeRequest) -> ExecuteOpcodeResponse:
        """Acknowledge a save or erase opcode."""
        log.debug("execute opcode %d", request.opcode)
        return ExecuteOpcodeResponse(ok=True)

    @staticmethod
    def _apply(param: Parameter, incoming: ParamValue) -> bool:
        raw = incoming.value
        if raw is None or isinstance(raw, str):
            log.warning("ignoring non-numeric value for %s", param.name)
            return False
        if param.type is ParamValueType.INTEGER_VALUE:
            param.assign(int(raw))
        elif param.type is ParamValueType.BOOLEAN_VALUE:
            param.assign(1.0 if raw else 0.0)
        else:
            param.assign(float(raw))
        return True


class SettingsStore:
    """Persists a parameter table's values as consecutive single-precision floats."""

    def __init__(self, table: ParameterTable, path: str | Path = SETTINGS_PATH) -> None:
        self.table = table
        self.path = Path(path)

    def load(self) -> bool:
        """Read stored values into the table; return whether the file was read."""
        try:
            data = self.path.read_bytes()
        except OSError:
            return False
        for param, (value,) in zip(self.table, _FLOAT.iter_unpack(data[: len(data) // 4 * 4])):
            param.value = value
        return True

    def save(self) -> bool:
        """Write the table's values; return whether the write succeeded."""
        data = b"".join(_FLOAT.pack(p.value) for p in self.table)
        try:
            self.path.write_bytes(data)
        except OSError:
            log.warning("could not save settings to %s", self.path)
            return False
        return True