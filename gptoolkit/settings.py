import os
from dataclasses import dataclass, fields
from typing import Any, Mapping, Self

from .exceptions import InvalidSettings

ENV_PREFIX = "GPTK_"


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _positive_int(name: str, value: Any) -> int:
    """Validate an option value. Only whole positive numbers pass, strings are parsed as base 10."""
    if isinstance(value, bool):
        raise InvalidSettings(name, value)
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidSettings(name, value)
        value = int(value)
    elif isinstance(value, str):
        try:
            value = int(value.strip(), 10)
        except ValueError:
            raise InvalidSettings(name, value) from None
    elif not isinstance(value, int):
        raise InvalidSettings(name, value)

    if value < 1:
        raise InvalidSettings(name, value)
    return value


@dataclass(slots=True, frozen=True)
class ApiSettings:
    """
    Concurrency and chunking limits for bulk operations.

    Attributes:
        max_concurrent_single_api_req: In-flight request cap when each request carries a single item.
        max_concurrent_batch_api_req: In-flight request cap for multi-item requests.
        operation_size: Items per request for most bulk actions.
        info_size: Items per bulk media info request.
        locked_folder_op_size: Items per locked folder move request.
    """

    max_concurrent_single_api_req: int = 30
    max_concurrent_batch_api_req: int = 3
    operation_size: int = 250
    info_size: int = 5000
    locked_folder_op_size: int = 100

    def __post_init__(self) -> None:
        for f in fields(self):
            # frozen, so bypass __setattr__ to store the normalized value
            object.__setattr__(self, f.name, _positive_int(_camel(f.name), getattr(self, f.name)))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> Self:
        """
        Build settings from a mapping keyed by camelCase (`maxConcurrentSingleApiReq`) or snake_case names.

        Absent or None values fall back to the defaults.

        Raises:
            InvalidSettings: If a present value is not a positive integer.
        """
        mapping = mapping or {}
        kwargs = {}
        for f in fields(cls):
            value = mapping.get(_camel(f.name))
            if value is None:
                value = mapping.get(f.name)
            if value is not None:
                kwargs[f.name] = value
        return cls(**kwargs)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Self:
        """Build settings from `GPTK_<NAME>` environment variables, e.g. `GPTK_OPERATION_SIZE`."""
        environ = os.environ if environ is None else environ
        mapping = {}
        for f in fields(cls):
            value = environ.get(ENV_PREFIX + f.name.upper())
            if value is not None and value.strip():
                mapping[f.name] = value
        return cls.from_mapping(mapping)
