"""Persistence and external-collaborator adapters."""
