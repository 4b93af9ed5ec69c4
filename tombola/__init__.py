"""
Tombola - Multi-session Bingo coordination engine.

A deterministic engine for running many Bingo rounds side by side.
Each game provides:
- Per-player 5x5 boards with a free center
- Idempotent number draws and incremental marking
- Join/turn timing gates driven by caller-supplied clocks
- Payout of the pooled entry fees to the first verified winner
"""

__version__ = "0.1.0"
