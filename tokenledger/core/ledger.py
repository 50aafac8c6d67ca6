# tokenledger/core/ledger.py

import logging
import threading
from enum import Enum
from typing import Dict, Optional, Tuple

from .events import EventLog, create_approval_event, create_transfer_event
from .roles import CallerIdentity, FixedCaller, Identity, ZERO_ADDRESS, is_zero
from .safemath import (ArithmeticOverflowError, ArithmeticUnderflowError,
                       InvalidAmountError, TokenLedgerError, checked_add,
                       checked_sub, require_amount)

logger = logging.getLogger(__name__)

__all__ = [
    "TokenLedger", "CallerSession", "LedgerSemantics",
    "TokenLedgerError", "InvalidAmountError", "ArithmeticOverflowError",
    "ZeroIdentityError", "ZeroCallerError", "ZeroRecipientError",
    "ZeroSpenderError", "ZeroSenderError",
    "InsufficientBalanceError", "InsufficientAllowanceError",
]

class ZeroIdentityError(TokenLedgerError):
    """Raised when the caller or an identity argument is the zero identity."""
    pass

class ZeroCallerError(ZeroIdentityError):
    pass

class ZeroRecipientError(ZeroIdentityError):
    pass

class ZeroSpenderError(ZeroIdentityError):
    pass

class ZeroSenderError(ZeroIdentityError):
    pass

class InsufficientBalanceError(TokenLedgerError):
    """Raised when an address has insufficient balance for a debit."""
    pass

class InsufficientAllowanceError(TokenLedgerError):
    """Raised when an allowance is smaller than the amount being spent from it."""
    pass

class LedgerSemantics(Enum):
    """
    REFERENCE reproduces the reference token exactly, defects included:
    transfer_from only decrements allowances[(sender, recipient)], and
    increase/decrease_allowance move value between the owner's balance
    and the allowance entry.

    CORRECTED is the standard ERC-20 design: transfer_from spends
    allowances[(sender, caller)] and moves balances, allowance adjustments
    leave balances alone, and the initial mint emits a Transfer event.
    """
    REFERENCE = "reference"
    CORRECTED = "corrected"

class TokenLedger:
    """
    Fixed-supply fungible token ledger with ERC-20 style allowances.

    Every mutating operation takes the authenticated caller explicitly as
    its first argument. Operations validate and compute all new values
    before writing, so a rejected call leaves the ledger untouched.
    """
    def __init__(self,
                 recipient: Identity,
                 name: str,
                 symbol: str,
                 decimals: int,
                 total_supply: int,
                 event_log: Optional[EventLog] = None,
                 semantics: LedgerSemantics = LedgerSemantics.REFERENCE):
        self._semantics = LedgerSemantics(semantics)
        self._name = name if name is not None else ""
        self._symbol = symbol if symbol is not None else ""
        self._decimals = require_amount(decimals, "decimals")
        self._total_supply = require_amount(total_supply, "total_supply")
        self._balances: Dict[Identity, int] = {}
        self._allowances: Dict[Tuple[Identity, Identity], int] = {}
        self._event_log = event_log if event_log is not None else EventLog()
        self._lock = threading.RLock()

        if self._corrected:
            self._require_nonzero(recipient, ZeroRecipientError, "recipient")

        self._balances[recipient] = self._total_supply

        # The reference token mints silently
        if self._corrected:
            self._event_log.emit(create_transfer_event(
                ZERO_ADDRESS, recipient, self._total_supply))

        logger.debug("Minted %d %s to %s (%s semantics)",
                     self._total_supply, self._symbol, recipient,
                     self._semantics.value)

    # Reads

    def get_name(self) -> str:
        return self._name

    def get_symbol(self) -> str:
        return self._symbol

    def get_decimals(self) -> int:
        return self._decimals

    def get_total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: Identity) -> int:
        """Get the balance of an address."""
        return self._balances.get(account, 0)

    def allowance(self, owner: Identity, spender: Identity) -> int:
        """Get how much spender may still move out of owner's balance."""
        return self._allowances.get((owner, spender), 0)

    @property
    def semantics(self) -> LedgerSemantics:
        return self._semantics

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    def holders(self) -> Dict[Identity, int]:
        """Snapshot of every address holding a non-zero balance."""
        with self._lock:
            return {a: b for a, b in self._balances.items() if b > 0}

    def circulating_supply(self) -> int:
        """Sum of all balances."""
        with self._lock:
            return sum(self._balances.values())

    def check_supply_invariant(self) -> bool:
        """
        True if the balances add up to the total supply. Always holds under
        CORRECTED semantics; under REFERENCE semantics allowance adjustments
        shift value out of (or back into) balances.
        """
        return self.circulating_supply() == self._total_supply

    # Mutations

    def transfer(self, caller: Identity, recipient: Identity, amount: int) -> bool:
        """
        Move amount from the caller's balance to recipient and emit Transfer.
        """
        with self._lock:
            self._require_nonzero(caller, ZeroCallerError, "caller")
            self._require_nonzero(recipient, ZeroRecipientError, "recipient")
            amount = self._amount(amount)

            self._commit(
                balances=self._move(caller, recipient, amount),
                event=create_transfer_event(caller, recipient, amount))

        logger.debug("Transfer %s -> %s: %d", caller, recipient, amount)
        return True

    def approve(self, caller: Identity, spender: Identity, amount: int) -> bool:
        """
        Set the allowance of spender over the caller's tokens to amount.
        The previous allowance is overwritten, not added to.
        """
        with self._lock:
            self._require_nonzero(caller, ZeroCallerError, "caller")
            self._require_nonzero(spender, ZeroSpenderError, "spender")
            amount = self._amount(amount)

            self._commit(
                allowances={(caller, spender): amount},
                event=create_approval_event(caller, spender, amount))

        logger.debug("Approval %s -> %s: %d", caller, spender, amount)
        return True

    def transfer_from(self,
                      caller: Identity,
                      sender: Identity,
                      recipient: Identity,
                      amount: int) -> bool:
        """
        Spend from an allowance granted by sender.

        Under REFERENCE semantics this only decrements
        allowances[(sender, recipient)]; no balance moves and no event is
        emitted, and the caller is not consulted. Under CORRECTED semantics
        the caller spends allowances[(sender, caller)] and amount moves from
        sender to recipient.
        """
        with self._lock:
            if self._corrected:
                self._require_nonzero(caller, ZeroCallerError, "caller")
            self._require_nonzero(sender, ZeroSenderError, "sender")
            self._require_nonzero(recipient, ZeroRecipientError, "recipient")
            amount = self._amount(amount)

            if self._corrected:
                key = (sender, caller)
                new_allowance = self._spend(self._allowances.get(key, 0), amount)
                self._commit(
                    balances=self._move(sender, recipient, amount),
                    allowances={key: new_allowance},
                    event=create_transfer_event(sender, recipient, amount))
            else:
                key = (sender, recipient)
                new_allowance = self._spend(self._allowances.get(key, 0), amount)
                self._commit(allowances={key: new_allowance})

        logger.debug("TransferFrom by %s: %s -> %s: %d",
                     caller, sender, recipient, amount)
        return True

    def increase_allowance(self,
                           caller: Identity,
                           spender: Identity,
                           added_value: int) -> bool:
        """
        Raise the allowance of spender over the caller's tokens.
        Under REFERENCE semantics added_value is also debited from the
        caller's balance.
        """
        with self._lock:
            self._require_nonzero(caller, ZeroCallerError, "caller")
            self._require_nonzero(spender, ZeroSpenderError, "spender")
            added_value = self._amount(added_value, "added_value")

            key = (caller, spender)
            if self._corrected:
                new_allowance = self._add(self._allowances.get(key, 0), added_value)
                self._commit(
                    allowances={key: new_allowance},
                    event=create_approval_event(caller, spender, new_allowance))
            else:
                balance = self.balance_of(caller)
                if balance < added_value:
                    raise self._reject(InsufficientBalanceError(
                        f"Insufficient balance: {balance} < {added_value}"))
                new_allowance = self._add(self._allowances.get(key, 0), added_value)
                self._commit(
                    balances={caller: balance - added_value},
                    allowances={key: new_allowance})

        logger.debug("Allowance %s -> %s raised by %d", caller, spender, added_value)
        return True

    def decrease_allowance(self,
                           caller: Identity,
                           spender: Identity,
                           subtracted_value: int) -> bool:
        """
        Lower the allowance of spender over the caller's tokens.
        Under REFERENCE semantics subtracted_value is also credited back to
        the caller's balance.
        """
        with self._lock:
            self._require_nonzero(caller, ZeroCallerError, "caller")
            self._require_nonzero(spender, ZeroSpenderError, "spender")
            subtracted_value = self._amount(subtracted_value, "subtracted_value")

            key = (caller, spender)
            new_allowance = self._spend(self._allowances.get(key, 0), subtracted_value)
            if self._corrected:
                self._commit(
                    allowances={key: new_allowance},
                    event=create_approval_event(caller, spender, new_allowance))
            else:
                new_balance = self._add(self.balance_of(caller), subtracted_value)
                self._commit(
                    balances={caller: new_balance},
                    allowances={key: new_allowance})

        logger.debug("Allowance %s -> %s lowered by %d",
                     caller, spender, subtracted_value)
        return True

    # Caller binding

    def bind(self, provider: CallerIdentity) -> "CallerSession":
        """Return a session that asks provider for the caller on every call."""
        return CallerSession(self, provider)

    def as_caller(self, identity: Identity) -> "CallerSession":
        return self.bind(FixedCaller(identity))

    # Internals

    @property
    def _corrected(self) -> bool:
        return self._semantics is LedgerSemantics.CORRECTED

    def _reject(self, error: TokenLedgerError) -> TokenLedgerError:
        logger.info("Rejected: %s: %s", type(error).__name__, error)
        return error

    def _require_nonzero(self, identity: Identity, error_cls, role: str):
        if is_zero(identity):
            raise self._reject(error_cls(f"{role} is the zero identity"))

    def _amount(self, value, label: str = "amount") -> int:
        try:
            return require_amount(value, label)
        except InvalidAmountError as err:
            raise self._reject(err)

    def _add(self, a: int, b: int) -> int:
        try:
            return checked_add(a, b)
        except ArithmeticOverflowError as err:
            raise self._reject(err)

    def _spend(self, current_allowance: int, amount: int) -> int:
        try:
            return checked_sub(current_allowance, amount)
        except ArithmeticUnderflowError as err:
            raise self._reject(InsufficientAllowanceError(
                f"Insufficient allowance: {current_allowance} < {amount}")) from err

    def _move(self, sender: Identity, recipient: Identity, amount: int) -> Dict[Identity, int]:
        """New balances for moving amount from sender to recipient. Writes nothing."""
        from_balance = self.balance_of(sender)
        if from_balance < amount:
            raise self._reject(InsufficientBalanceError(
                f"Insufficient balance: {from_balance} < {amount}"))

        if sender == recipient:
            return {}  # Self-transfer leaves the balance as is

        new_to_balance = self._add(self.balance_of(recipient), amount)
        return {sender: from_balance - amount, recipient: new_to_balance}

    def _commit(self,
                balances: Optional[Dict[Identity, int]] = None,
                allowances: Optional[Dict[Tuple[Identity, Identity], int]] = None,
                event=None):
        """
        Write the new values, then emit event. If the sink raises, the
        previous values are put back before the error propagates.
        """
        balances = balances or {}
        allowances = allowances or {}
        saved_balances = {k: self._balances.get(k) for k in balances}
        saved_allowances = {k: self._allowances.get(k) for k in allowances}

        self._balances.update(balances)
        self._allowances.update(allowances)
        if event is None:
            return

        try:
            self._event_log.emit(event)
        except Exception:
            _restore(self._balances, saved_balances)
            _restore(self._allowances, saved_allowances)
            raise

def _restore(mapping: dict, saved: dict):
    for key, value in saved.items():
        if value is None:
            mapping.pop(key, None)
        else:
            mapping[key] = value

class CallerSession:
    """
    Ledger view for one caller-identity provider. Mutating calls resolve the
    caller through provider.caller_identity() at call time.
    """
    def __init__(self, ledger: TokenLedger, provider: CallerIdentity):
        self._ledger = ledger
        self._provider = provider

    @property
    def caller(self) -> Identity:
        return self._provider.caller_identity()

    @property
    def ledger(self) -> TokenLedger:
        return self._ledger

    def balance(self) -> int:
        return self._ledger.balance_of(self.caller)

    def transfer(self, recipient: Identity, amount: int) -> bool:
        return self._ledger.transfer(self.caller, recipient, amount)

    def approve(self, spender: Identity, amount: int) -> bool:
        return self._ledger.approve(self.caller, spender, amount)

    def transfer_from(self, sender: Identity, recipient: Identity, amount: int) -> bool:
        return self._ledger.transfer_from(self.caller, sender, recipient, amount)

    def increase_allowance(self, spender: Identity, added_value: int) -> bool:
        return self._ledger.increase_allowance(self.caller, spender, added_value)

    def decrease_allowance(self, spender: Identity, subtracted_value: int) -> bool:
        return self._ledger.decrease_allowance(self.caller, spender, subtracted_value)
