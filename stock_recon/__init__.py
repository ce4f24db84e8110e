"""Finished-goods stock reconciliation for production locations."""
