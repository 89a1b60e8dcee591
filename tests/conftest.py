import pytest

from spider_solitaire import common as C


@pytest.fixture(autouse=True)
def data_dir(tmp_path, monkeypatch):
    """Point settings, stats and default saves at a throwaway directory."""
    path = tmp_path / "data"
    monkeypatch.setenv("SPIDER_DATA_DIR", str(path))
    C.reset_settings()
    yield path
    C.reset_settings()
