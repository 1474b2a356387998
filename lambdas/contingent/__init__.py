"""Contingent module: period maintenance, status and usage statistics."""
