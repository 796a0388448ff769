"""
Calculation engine: a desk-calculator state machine and a unit converter.

The package has no I/O. Finished calculations leave it as ``HistoryCommit``
values which the backend persists.
"""
