# MIT License
# Copyright (c) 2025 Hashborn

"""
Observability Module

Provides Prometheus metrics for the sponsorship and claimable balance engines.
"""

from .metrics import metrics_registry, update_state_metrics

__all__ = ['metrics_registry', 'update_state_metrics']
