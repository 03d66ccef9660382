"""In-memory document store layer.

This module holds the record matcher, result pipeline, save orchestrator,
and the MemStore facade that serves load, list, save, and remove calls.
"""
