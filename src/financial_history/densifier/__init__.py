# src/financial_history/densifier/__init__.py
"""
Densifier

Turns sparse anchors and period constraints into one value per month-end.
"""

from .distribution import distribute_value, validate_noise_factor
from .stock import densify_stock
from .flow import FlowDensifier, GroupState, densify_flow
from .constraint_solver import ConstraintResolution, resolve_constraints

__all__ = [
    'distribute_value',
    'validate_noise_factor',
    'densify_stock',
    'FlowDensifier',
    'GroupState',
    'densify_flow',
    'ConstraintResolution',
    'resolve_constraints'
]
