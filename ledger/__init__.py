"""
Ledger - Source Package

GraphQL-facing backend core for a personal expense/income tracker.
Users keep a personal vocabulary of tags and a list of dated DEBIT/CREDIT
records; this package holds the record filtering engine and the services
around it.

DESIGN PRINCIPLES:
1. Every field-level problem is reported at once
2. Nothing touches storage until the request is known to be valid
3. Storage is an injected collaborator, never a global
4. Every step must be auditable
"""

__version__ = "1.0.0"
__author__ = "Ledger Team"
