# tokenledger/core/roles.py

from abc import ABC, abstractmethod
from typing import Any, Hashable

Identity = Hashable

ZERO_ADDRESS = "0x" + "0" * 40

def is_zero(identity: Any) -> bool:
    """
    Return True if identity is the reserved "no account" sentinel.
    Accepts None, empty strings, zero-valued hex strings, 0 and all-zero bytes.
    """
    if identity is None:
        return True
    if isinstance(identity, bool):
        return False
    if isinstance(identity, int):
        return identity == 0
    if isinstance(identity, (bytes, bytearray)):
        return not any(identity)
    if isinstance(identity, str):
        text = identity.strip().lower()
        if text == "":
            return True
        if text.startswith("0x"):
            digits = text[2:]
            return digits != "" and set(digits) == {"0"}
    return False

class CallerIdentity(ABC):
    """
    Source of the authenticated identity behind the current call.
    The ledger trusts whatever this returns.
    """
    @abstractmethod
    def caller_identity(self) -> Identity:
        pass

class FixedCaller(CallerIdentity):
    """
    Provider that always reports the same identity.
    """
    def __init__(self, identity: Identity):
        self._identity = identity

    def caller_identity(self) -> Identity:
        return self._identity

class SwitchableCaller(CallerIdentity):
    """
    Provider whose identity can be swapped between calls, for driving
    interleaved transactions from different accounts.
    """
    def __init__(self, identity: Identity = ZERO_ADDRESS):
        self._identity = identity

    def switch_to(self, identity: Identity):
        self._identity = identity

    def caller_identity(self) -> Identity:
        return self._identity
