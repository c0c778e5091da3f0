"""
Lighting fixtures: status mutations and the walkthrough navigator.
"""

from .service import LightingService
from .walkthrough import WalkthroughNavigator, apply_fixture_action, available_actions, build_hierarchy

__all__ = [
    "LightingService",
    "WalkthroughNavigator",
    "apply_fixture_action",
    "available_actions",
    "build_hierarchy",
]
