"""Domain models for the SureTax client.

This package contains in-memory (Pydantic) records describing the tax
calculation and cancellation payloads exchanged with the service. They are
independent from the HTTP layer so that envelope handling and testing can
evolve without a network dependency.
"""

__all__ = [
    "suretax",
]
