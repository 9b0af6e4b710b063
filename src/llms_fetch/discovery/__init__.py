"""Candidate URL discovery for llms-fetch."""

from .variants import STANDARD_DERIVATIONS, generate_variants, is_terminal

__all__ = [
    "STANDARD_DERIVATIONS",
    "generate_variants",
    "is_terminal",
]
