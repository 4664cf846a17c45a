"""
vestvault Core Module

Core functionality for the vesting engine including:
- Schedule data model and vesting arithmetic
- The vesting ledger and its escrow bookkeeping
- Collaborator protocols and the in-memory asset ledger
- Configuration, structured logging and metrics
"""

__all__ = []
