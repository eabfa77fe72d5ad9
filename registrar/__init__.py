"""
Campus Registrar Core

Enrollment decision pipeline, grade lifecycle and the shared infrastructure
(configuration, logging, notifications, locking, in-memory registry) used by
the student, faculty and admin services.
"""

__version__ = "0.1.0"
