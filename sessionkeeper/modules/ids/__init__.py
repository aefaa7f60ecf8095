"""
Identifier Module - Black Box Interface

Purpose: Issue opaque, unguessable session identifiers
Interface: new_id()
Hidden: Randomness source, encoding

Stateless and safe to call from any number of threads.
"""

from .ids import DEFAULT_TOKEN_BYTES, MIN_TOKEN_BYTES, IdGenerationError, new_id

__all__ = ["new_id", "IdGenerationError", "DEFAULT_TOKEN_BYTES", "MIN_TOKEN_BYTES"]
