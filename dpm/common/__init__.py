"""Shared configuration, constants and data types."""
