"""
Heat-treatment recommendation engine.

Responsibilities:
- Validate treatment requests (steel code, current and target hardness).
- Score every active work instruction with fixed, table-driven weights.
- Rank, truncate and explain the best matches.
- Hand a chosen result to a recorder for persistence.
"""
