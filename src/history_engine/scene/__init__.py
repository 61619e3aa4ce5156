"""Scene façade used to drive the history engine end to end."""

from .scene import Scene, SceneError, SceneView, Transaction
from .snapshot import Snapshot

__all__ = [
    "Scene",
    "SceneError",
    "SceneView",
    "Snapshot",
    "Transaction",
]
