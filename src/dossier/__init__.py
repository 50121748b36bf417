"""Dossier: person lookup aggregation and entity resolution over OSINT sources."""

__version__ = "0.1.0"
