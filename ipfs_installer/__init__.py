"""IPFS node installer for Raspberry Pi OS and Debian.

Core design goals:
- Ordered, idempotent steps (each one checks whether it already applied)
- Resumable: applied steps are recorded and skipped on the next run
- First failure stops the run; no rollback
- One immutable configuration resolved before anything is touched
- Centralized logging
"""

__all__ = []
