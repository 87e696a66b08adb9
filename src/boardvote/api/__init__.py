"""API module for boardvote.

- Validates inputs, reads/writes DB through the orchestrator and repo
- Returns display-ready payloads
- Forbidden: tally logic, reconciliation logic
"""
