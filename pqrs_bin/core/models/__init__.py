"""
Domain models — Pydantic types for the formula.

    from pqrs_bin.core.models import Descriptor
"""

from pqrs_bin.core.models.descriptor import Descriptor

__all__ = [
    "Descriptor",
]
