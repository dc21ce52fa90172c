"""Model provider adapters used behind the generate-text service."""
