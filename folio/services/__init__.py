"""Business logic services."""

from .coordinator import AuthorizationCoordinator
from .reconciler import Reconciler, ReconcileReport
from .share_policy import OpenSharePolicy, OwnerSharePolicy, SharePolicy, get_share_policy

__all__ = [
    "AuthorizationCoordinator",
    "Reconciler",
    "ReconcileReport",
    "OpenSharePolicy",
    "OwnerSharePolicy",
    "SharePolicy",
    "get_share_policy",
]
