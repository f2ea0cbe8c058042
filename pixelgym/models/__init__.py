from .record import Record
from .identity import Identity, RevokedToken

__all__ = ["Record", "Identity", "RevokedToken"]
