"""Shared configuration, logging, models and error types."""
