"""
Protocol Infrastructure

Environment-variable wire format between agent and fetcher.
"""

from .environment import (
    PROTOCOL_KEYS,
    decode_environment,
    decode_token,
    encode_environment,
    encode_request,
    encode_token,
)

__all__ = [
    "PROTOCOL_KEYS",
    "decode_environment",
    "decode_token",
    "encode_environment",
    "encode_request",
    "encode_token",
]
