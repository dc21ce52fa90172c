"""AI-backed operations: request lifecycle, receipt scanning and recipe suggestions."""
