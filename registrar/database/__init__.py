"""
Data Store

In-memory registry of students and courses shared by the services of one process.
"""

from registrar.database.registry import InMemoryRegistry

__all__ = ["InMemoryRegistry"]
