from .akindo import (
    AkindoClient,
    AkindoError,
    AkindoHTTPError,
    AkindoNetworkError,
    AkindoNotFoundError,
    AkindoPayloadError,
    AkindoTimeoutError,
)

__all__ = [
    "AkindoClient",
    "AkindoError",
    "AkindoHTTPError",
    "AkindoNetworkError",
    "AkindoNotFoundError",
    "AkindoPayloadError",
    "AkindoTimeoutError",
]
