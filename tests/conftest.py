import pytest


@pytest.fixture(autouse=True)
def kat_path(tmp_path, monkeypatch):
    # Keep the KAT file out of the working directory
    path = tmp_path / "kat-argon2.log"
    monkeypatch.setenv("ARGON2_KAT_FILENAME", str(path))
    return path
