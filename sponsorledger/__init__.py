# MIT License
# Copyright (c) 2025 Hashborn

"""
Sponsorship reserve accounting and claimable-balance rule engine.
"""

__version__ = "0.1.0"
