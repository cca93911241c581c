"""Design request pipeline tracking: status state machine, optimistic edits and realtime reconciliation."""

__version__ = "0.1.0"
