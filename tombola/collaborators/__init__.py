"""
Collaborators - External services the engine calls but does not own.

- Ledger: custody of entry fees and payout of the pot
- EntropySource: the value of each draw
"""

from .ledger import Ledger, InMemoryLedger
from .entropy import EntropySource, SeededEntropySource, ScriptedEntropySource

__all__ = [
    "Ledger",
    "InMemoryLedger",
    "EntropySource",
    "SeededEntropySource",
    "ScriptedEntropySource",
]
