"""
Load Balancer Protocol Value Object

Architectural Intent:
- Closed set of listener protocols every supported provider understands
- Parsing is case-insensitive so callers may pass "tcp", "Http", etc.
- Surrounding whitespace is not trimmed; " tcp " is rejected
"""

from enum import Enum


class LoadBalancerProtocol(str, Enum):
    HTTP = "HTTP"
    TCP = "TCP"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: "str | LoadBalancerProtocol") -> "LoadBalancerProtocol":
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError("Acceptable values for protocol are HTTP or TCP")
        try:
            return cls(value.upper())
        except ValueError:
            raise ValueError(
                f"Acceptable values for protocol are HTTP or TCP, got {value!r}"
            ) from None
