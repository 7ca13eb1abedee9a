"""Transport independent Modbus client contexts, message types and request services."""

__version__ = "0.1.0"
__all__ = ["messages", "client", "sync_client", "services"]