# tokenledger/core/holdings.py

from typing import Dict, List, Tuple
import numpy as np

from .roles import Identity

def _share_vector(ledger) -> Tuple[List[Identity], np.ndarray]:
    """
    Holders and their fraction of total supply, in insertion order.

    Shares are computed as exact int / int division before conversion,
    so 256-bit balances do not overflow.
    """
    holders = ledger.holders()
    total = ledger.get_total_supply()
    if not holders or total == 0:
        return [], np.zeros(0)
    addresses = list(holders.keys())
    shares = np.array([holders[a] / total for a in addresses], dtype=float)
    return addresses, shares

def holder_shares(ledger) -> Dict[Identity, float]:
    """
    Fraction of total supply held by each address with a non-zero balance.

    Under REFERENCE semantics the shares may sum to less than 1.0, since
    increase_allowance moves value out of balances.
    """
    addresses, shares = _share_vector(ledger)
    return {a: float(s) for a, s in zip(addresses, shares)}

def top_holders(ledger, n: int = 10) -> List[Tuple[Identity, int]]:
    """
    The n largest balances, largest first. Ties keep insertion order.
    """
    if n < 0:
        raise ValueError("n must not be negative")
    holders = ledger.holders()
    ranked = sorted(holders.items(), key=lambda item: item[1], reverse=True)
    return ranked[:n]

def concentration_index(ledger) -> float:
    """
    Herfindahl-Hirschman index of holder shares.

    Returns:
        1.0 when a single address holds the entire supply, approaching 0.0
        as holdings spread out. 0.0 for a ledger with no holders.
    """
    _, shares = _share_vector(ledger)
    if shares.size == 0:
        return 0.0
    return float(np.sum(np.square(shares)))
