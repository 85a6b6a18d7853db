"""Legacy Quickbase XML API client."""

from quickbase_client.legacy.actions import ACTION_HOOKS, ActionHooks, resolve_hooks
from quickbase_client.legacy.client import QuickBaseLegacy

__all__ = [
    "ACTION_HOOKS",
    "ActionHooks",
    "QuickBaseLegacy",
    "resolve_hooks",
]
