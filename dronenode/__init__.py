"""DroneCAN node building blocks: clocks, messages, an in-memory bus, parameters, node ID allocation and firmware download."""

__version__ = "0.1.0"