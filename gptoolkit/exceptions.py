class GptkError(Exception):
    """Base class for toolkit errors."""


class AuthError(GptkError):
    """Raised when the web session can't be bootstrapped from the given cookies."""


class ResponseFormatError(GptkError):
    """Raised when a batchexecute response has no usable payload."""


class UnsupportedRpcId(GptkError, ValueError):
    """Raised when a response is decoded under an rpc id with no grammar."""

    def __init__(self, rpc_id) -> None:
        self.rpc_id = rpc_id
        super().__init__(f"No response grammar for rpc id {rpc_id!r}")


class InvalidSettings(GptkError, ValueError):
    """Raised when an api setting is not a positive integer."""

    def __init__(self, name: str, value) -> None:
        self.name = name
        self.value = value
        super().__init__(f"{name} must be a positive integer, got {value!r}")
