"""
Runtime Verification Module

Checks registry snapshots against the enrollment invariants.
"""

from registrar.verification.enrollment_invariants import (
    InvariantMonitor,
    InvariantViolation,
    InvariantViolationType,
    assert_registry_consistent,
)

__all__ = [
    'InvariantMonitor',
    'InvariantViolation',
    'InvariantViolationType',
    'assert_registry_consistent',
]
