import hashlib
import os

import pytest
import torch

from forecasting.artifacts import (
    SCOPE_SHARED,
    SCOPE_USER,
    FileArtifactStore,
    InMemoryArtifactStore,
    artifact_key,
    user_digest,
)
from forecasting.errors import ArtifactError
from forecasting.model import LSTMForecaster
from forecasting.schemas import PredictionKind


def test_artifact_key_shared_and_per_user():
    assert artifact_key(PredictionKind.SPENDING, "u1", SCOPE_SHARED) == "spending-model"
    assert artifact_key(PredictionKind.SAVINGS, None, SCOPE_SHARED) == "savings-model"
    assert artifact_key(PredictionKind.SPENDING, "u1", SCOPE_USER) == f"{user_digest('u1')}/spending-model"
    assert user_digest("u1") == hashlib.sha256(b"u1").hexdigest()


def test_artifact_key_distinct_for_similar_user_ids():
    ids = ["alice@x.com", "alice_x.com", "alice/x.com", "../alice", "alice"]
    keys = {artifact_key(PredictionKind.SPENDING, u, SCOPE_USER) for u in ids}
    assert len(keys) == len(ids)


def test_per_user_key_is_a_safe_path(tmp_path):
    key = artifact_key(PredictionKind.SPENDING, "../../etc/passwd", SCOPE_USER)
    path = FileArtifactStore(str(tmp_path)).path_for(key)
    assert path == os.path.join(str(tmp_path), user_digest("../../etc/passwd"), "spending-model.pt")


def test_artifact_key_validation():
    with pytest.raises(ValueError):
        artifact_key(PredictionKind.SPENDING, None, SCOPE_USER)
    with pytest.raises(ValueError):
        artifact_key(PredictionKind.SPENDING, "u1", "global")


def test_file_store_round_trip(tmp_path):
    store = FileArtifactStore(str(tmp_path))
    model = LSTMForecaster()

    assert store.load("u1/spending-model") is None
    store.save("u1/spending-model", model.state_dict())
    assert os.path.exists(tmp_path / "u1" / "spending-model.pt")

    restored = LSTMForecaster()
    restored.load_state_dict(store.load("u1/spending-model"))
    for name, tensor in model.state_dict().items():
        assert torch.equal(restored.state_dict()[name], tensor)


def test_file_store_stays_under_root(tmp_path):
    store = FileArtifactStore(str(tmp_path))
    path = store.path_for("../../spending-model")
    assert os.path.dirname(path) == str(tmp_path)


def test_file_store_corrupt_artifact(tmp_path):
    (tmp_path / "spending-model.pt").write_bytes(b"not a torch file")
    with pytest.raises(ArtifactError):
        FileArtifactStore(str(tmp_path)).load("spending-model")


def test_in_memory_store_copies():
    store = InMemoryArtifactStore()
    state = {"w": torch.zeros(2)}
    store.save("k", state)
    state["w"] += 1

    assert torch.equal(store.load("k")["w"], torch.zeros(2))
    assert store.load("missing") is None
