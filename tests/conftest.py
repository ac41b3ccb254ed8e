"""Shared pytest fixtures for filesieve tests."""
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator, List

import pytest
import yaml

from filesieve.infrastructure.config_manager import set_global_config
from filesieve.rules.engine import FilterEngine
from filesieve.rules.models import FileMetadata


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Drop FILESIEVE_* variables and the global config between tests."""
    for key in list(os.environ):
        if key.startswith("FILESIEVE_"):
            monkeypatch.delenv(key)
    set_global_config(None)
    yield
    set_global_config(None)


@pytest.fixture
def engine() -> FilterEngine:
    """Engine with default settings."""
    return FilterEngine()


@pytest.fixture
def ts_files() -> List[FileMetadata]:
    """Small TypeScript project."""
    return [
        FileMetadata("src/index.ts", 1000, "text/typescript"),
        FileMetadata("src/index.test.ts", 500, "text/typescript"),
        FileMetadata("src/types/index.d.ts", 200, "text/typescript"),
        FileMetadata("src/utils/helper.ts", 800, "text/typescript"),
        FileMetadata("src/components/App.tsx", 1200, "text/typescript"),
    ]


@pytest.fixture
def complete_config() -> Dict[str, Any]:
    """Rule set using every filter dimension."""
    return {
        "include": ["src/**/*.py"],
        "exclude": ["**/migrations/**"],
        "minSize": 1,
        "maxSize": 1000,
        "contentTypes": ["text/x-python"],
    }


@pytest.fixture
def complete_files() -> List[FileMetadata]:
    """Files where each filter of complete_config excludes exactly one."""
    return [
        FileMetadata("src/app.py", 100, "text/x-python"),
        FileMetadata("src/models/user.py", 250, "text/x-python"),
        FileMetadata("docs/readme.md", 100, "text/markdown"),
        FileMetadata("src/migrations/0001_initial.py", 100, "text/x-python"),
        FileMetadata("src/big.py", 5000, "text/x-python"),
        FileMetadata("src/data.py", 10, "application/json"),
    ]


def make_files(count: int) -> List[FileMetadata]:
    """Deterministic synthetic file list."""
    extensions = ["ts", "js", "test.ts", "md", "tsx"]
    content_types = ["text/plain", "application/json", "text/typescript"]
    files = []
    for i in range(count):
        root = "node_modules/pkg" if i % 17 == 0 else f"src/mod{i % 50}"
        files.append(
            FileMetadata(
                path=f"{root}/file{i}.{extensions[i % len(extensions)]}",
                size=(i * 37) % 5000,
                content_type=content_types[i % len(content_types)],
            )
        )
    return files


@pytest.fixture
def rules_file(temp_dir: Path) -> Path:
    """YAML rule-set file."""
    path = temp_dir / "rules.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(
            {
                "filters": {
                    "include": ["**/*.ts", "!**/*.test.ts"],
                    "exclude": ["**/node_modules/**"],
                    "maxSize": 10000,
                    "contentTypes": ["text/*"],
                }
            },
            f,
        )
    return path


@pytest.fixture
def file_factory():
    """Factory for deterministic synthetic file lists."""
    return make_files
