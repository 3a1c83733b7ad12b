"""
Licenses module - License store and purchase intake.

This module handles:
- License entity and key normalization
- Key lookup, including synthesis from upstream-verified keys
- Purchase recording and local key issuance
"""
