"""
Deterministic enrichment of extracted pantry items.

Category classification and shelf-life prediction are pure functions and
safe to call concurrently.
"""
