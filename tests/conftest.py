import pytest

import progress


@pytest.fixture(autouse=True)
def _progress_state_in_tmp(tmp_path, monkeypatch):
    """Keep the progress state file out of the working tree."""
    state = tmp_path / "progress_state.json"
    monkeypatch.setattr(progress, "STATE_FILE", state)
    monkeypatch.setattr(progress, "STATE_FILE_TMP", state.with_name(state.name + ".tmp"))
    yield state
