from __future__ import annotations

import pytest

from reftidy.config.zotero import ZoteroConfig, default_zotero_resilience

_CONFIG_VARS = (
    "ZOTERO_API_KEY",
    "ZOTERO_LIBRARY_ID",
    "ZOTERO_LIBRARY_TYPE",
    "CROSSREF_MAILTO",
    "OPENALEX_MAILTO",
    "REFTIDY_DATA_DIR",
)


@pytest.fixture(autouse=True)
def _isolated_environment(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path_factory: pytest.TempPathFactory,
) -> None:
    for name in _CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("REFTIDY_DATA_DIR", str(tmp_path_factory.mktemp("reftidy-data")))


@pytest.fixture
def zotero_config() -> ZoteroConfig:
    return ZoteroConfig(
        api_key="test-key",
        library_id="12345",
        library_type="user",
        resilience=default_zotero_resilience(api_key="test-key"),
        page_size=2,
    )
