# tokenledger/core/events.py

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from datetime import datetime

@dataclass
class Event:
    """A record emitted by the ledger after a state change."""
    name: str
    params: Dict[str, Any]
    timestamp: datetime = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now()

class EventLog:
    """
    In-memory event sink injected into the ledger.
    Delivery beyond this log is left to whoever reads it.
    """
    def __init__(self):
        self._events: List[Event] = []

    def emit(self, event: Event):
        """Add an event to the log."""
        self._events.append(event)

    def get_events(self, event_name: Optional[str] = None) -> List[Event]:
        """
        Retrieve events from the log.
        If event_name is provided, only returns events with that name.
        """
        if event_name is None:
            return self._events.copy()
        return [e for e in self._events if e.name == event_name]

    def clear(self):
        """Clear all events from the log."""
        self._events = []

    def __len__(self) -> int:
        return len(self._events)

# Event factories
def create_transfer_event(from_address, to_address, amount: int) -> Event:
    return Event(
        name="Transfer",
        params={
            "from": from_address,
            "to": to_address,
            "amount": amount
        }
    )

def create_approval_event(owner, spender, amount: int) -> Event:
    return Event(
        name="Approval",
        params={
            "owner": owner,
            "spender": spender,
            "amount": amount
        }
    )
