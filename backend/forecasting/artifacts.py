"""
Persistence for trained sequence-model weights.

Artifacts are torch state_dicts stored under a string key such as
"spending-model" (one model shared by every user) or "<digest>/spending-model"
(one model per user, where <digest> is the SHA-256 hex of the user id so that
distinct ids never share a directory). Which form is used is decided by
`artifact_key`.
"""

import copy
import hashlib
import logging
import os
import re
from typing import Dict, Optional, Protocol

import torch

from forecasting.errors import ArtifactError
from forecasting.schemas import PredictionKind

logger = logging.getLogger(__name__)

SCOPE_USER = "user"
SCOPE_SHARED = "shared"

_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]")


def artifact_key(kind: PredictionKind, user_id: Optional[str] = None, scope: str = SCOPE_USER) -> str:
    base = f"{PredictionKind(kind).value}-model"
    if scope == SCOPE_SHARED:
        return base
    if scope != SCOPE_USER:
        raise ValueError(f"Unknown artifact scope: {scope!r}")
    if not user_id:
        raise ValueError("user_id is required for per-user artifacts")
    return f"{user_digest(user_id)}/{base}"


def user_digest(user_id: str) -> str:
    return hashlib.sha256(str(user_id).encode("utf-8")).hexdigest()

class ModelArtifactStore(Protocol):
    def load(self, key: str) -> Optional[Dict[str, torch.Tensor]]:
        ...

    def save(self, key: str, artifact: Dict[str, torch.Tensor]) -> None:
        ...


class FileArtifactStore:
    """Writes each artifact to <root>/<key>.pt with torch.save."""

    def __init__(self, root_dir: str):
        self.root_dir = root_dir

    def path_for(self, key: str) -> str:
        parts = [_UNSAFE.sub("_", p) for p in key.split("/") if p not in ("", ".", "..")]
        if not parts:
            raise ValueError(f"Invalid artifact key: {key!r}")
        return os.path.join(self.root_dir, *parts[:-1], f"{parts[-1]}.pt")

    def load(self, key):
        path = self.path_for(key)
        if not os.path.exists(path):
            return None
        try:
            state = torch.load(path, map_location="cpu")
        except Exception as e:
            raise ArtifactError(f"Could not load artifact {key!r} from {path}: {e}") from e
        logger.info("Loaded model artifact %s from %s", key, path)
        return state

    def save(self, key, artifact):
        path = self.path_for(key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        try:
            torch.save(artifact, path)
        except Exception as e:
            raise ArtifactError(f"Could not save artifact {key!r} to {path}: {e}") from e
        logger.info("Saved model artifact %s to %s", key, path)


class InMemoryArtifactStore:
    def __init__(self):
        self._artifacts: Dict[str, Dict[str, torch.Tensor]] = {}

    def load(self, key):
        state = self._artifacts.get(key)
        return copy.deepcopy(state) if state is not None else None

    def save(self, key, artifact):
        self._artifacts[key] = copy.deepcopy(artifact)

    def keys(self):
        return sorted(self._artifacts)
