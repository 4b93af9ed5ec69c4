"""
Ledger - Fee custody collaborator.

The engine never holds funds. It asks the ledger to take custody of
an entry fee on join and to release the pot on payout. Both calls are
synchronous and either succeed or raise a LedgerError.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from collections import defaultdict
import logging
import threading

from ..engine_core.errors import InsufficientFunds, TransferDenied, TransferFailed

logger = logging.getLogger(__name__)


class Ledger(ABC):
    """
    Interface for fee custody.

    Implementations raise:
        InsufficientFunds / TransferDenied from escrow()
        TransferFailed from payout()
    """

    @abstractmethod
    def escrow(self, game_id: int, payer: str, amount: int) -> None:
        """Take custody of ``amount`` from ``payer`` for ``game_id``."""
        pass

    @abstractmethod
    def payout(self, game_id: int, payee: str, amount: int) -> None:
        """Release ``amount`` held for ``game_id`` to ``payee``."""
        pass


class InMemoryLedger(Ledger):
    """
    Process-local ledger with account balances and per-game escrow.

    Accounts not seeded via deposit() start at ``default_balance``.
    Used by the CLI, the default app, and tests.
    """

    def __init__(self, default_balance: int = 0, denied: set[str] | None = None):
        self.default_balance = default_balance
        self.denied: set[str] = set(denied or ())
        self._balances: dict[str, int] = {}
        self._escrow: dict[int, int] = defaultdict(int)
        self._lock = threading.Lock()

    def deposit(self, account: str, amount: int):
        with self._lock:
            self._balances[account] = self._balance(account) + amount

    def balance(self, account: str) -> int:
        with self._lock:
            return self._balance(account)

    def escrowed(self, game_id: int) -> int:
        with self._lock:
            return self._escrow.get(game_id, 0)

    def escrow(self, game_id: int, payer: str, amount: int) -> None:
        with self._lock:
            if payer in self.denied:
                logger.warning(f"Escrow denied for {payer} in game {game_id}")
                raise TransferDenied(f"Transfers from {payer} are denied")
            balance = self._balance(payer)
            if balance < amount:
                logger.warning(f"Escrow of {amount} failed for {payer}: balance {balance}")
                raise InsufficientFunds(payer, amount, balance)
            self._balances[payer] = balance - amount
            self._escrow[game_id] += amount

    def payout(self, game_id: int, payee: str, amount: int) -> None:
        with self._lock:
            held = self._escrow.get(game_id, 0)
            if amount > held:
                logger.error(f"Payout of {amount} exceeds escrow {held} for game {game_id}")
                raise TransferFailed(f"Game {game_id} holds {held}, cannot pay {amount}")
            self._escrow[game_id] = held - amount
            self._balances[payee] = self._balance(payee) + amount

    def _balance(self, account: str) -> int:
        return self._balances.get(account, self.default_balance)
