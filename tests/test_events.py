# tokenledger/tests/test_events.py

import pytest
from datetime import datetime
from tokenledger.core.events import (
    Event, EventLog, create_transfer_event, create_approval_event)

def test_event_creation():
    """Test basic event creation."""
    event = Event("TestEvent", {"param1": "value1"})
    assert event.name == "TestEvent"
    assert event.params["param1"] == "value1"
    assert isinstance(event.timestamp, datetime)

def test_event_log():
    """Test EventLog basic functionality."""
    log = EventLog()
    log.emit(Event("Event1", {"param1": "value1"}))
    log.emit(Event("Event2", {"param2": "value2"}))

    events = log.get_events()
    assert len(events) == 2
    assert len(log) == 2
    assert events[0].name == "Event1"
    assert events[1].name == "Event2"

def test_get_events_returns_copy():
    log = EventLog()
    log.emit(Event("Event1", {}))
    log.get_events().clear()
    assert len(log) == 1

def test_event_filtering():
    """Test filtering events by name."""
    log = EventLog()
    log.emit(create_transfer_event("a", "b", 1))
    log.emit(create_approval_event("a", "c", 2))
    log.emit(create_transfer_event("b", "a", 3))

    transfers = log.get_events("Transfer")
    assert len(transfers) == 2
    assert all(e.name == "Transfer" for e in transfers)
    assert log.get_events("Missing") == []

def test_transfer_event_creation():
    """Test transfer event factory function."""
    event = create_transfer_event("alice", "bob", 2 ** 200)

    assert event.name == "Transfer"
    assert event.params["from"] == "alice"
    assert event.params["to"] == "bob"
    assert event.params["amount"] == 2 ** 200
    assert isinstance(event.params["amount"], int)

def test_approval_event_creation():
    """Test approval event factory function."""
    event = create_approval_event("alice", "bob", 50)

    assert event.name == "Approval"
    assert event.params == {"owner": "alice", "spender": "bob", "amount": 50}

def test_event_log_clear():
    """Test clearing the event log."""
    log = EventLog()
    log.emit(Event("Event1", {"param1": "value1"}))
    log.emit(Event("Event2", {"param2": "value2"}))

    assert len(log.get_events()) == 2
    log.clear()
    assert len(log.get_events()) == 0
