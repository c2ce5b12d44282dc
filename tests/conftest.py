"""Root test configuration: isolate tests from the developer's environment"""

import os

import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Drop any MDBLOCKS_* variables so settings come from defaults or the test."""
    for name in list(os.environ):
        if name.startswith("MDBLOCKS_"):
            monkeypatch.delenv(name)


@pytest.fixture(name="write_md")
def write_md_fixture(tmp_path):
    """Factory writing a markdown file under tmp_path and returning its path as str."""
    def _write(name: str, text: str) -> str:
        p = tmp_path / name
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
        return str(p)
    return _write
