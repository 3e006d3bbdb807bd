"""
Pytest configuration and fixtures for Child Mode Kit.
Only the host collaborators (store, scheduler, diagnostics) are faked.
"""

import shutil
import tempfile
import uuid
from pathlib import Path
from typing import Generator

import pytest

from child_mode.core.config import Settings
from child_mode.core.persistence import InMemoryKeyValueStore
from child_mode.features.restrictions import (
    ConfigurationStore,
    ContentApprovalFilter,
    SessionTimer,
)
from testing_utilities import ManualScheduler, RecordingSink


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    path = Path(tempfile.mkdtemp())
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def namespace() -> str:
    return f"TestApp_{uuid.uuid4().hex[:8]}"


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def configuration(
    namespace: str, kv_store: InMemoryKeyValueStore, sink: RecordingSink
) -> ConfigurationStore:
    return ConfigurationStore(namespace=namespace, store=kv_store, diagnostics=sink)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def timer(configuration: ConfigurationStore, scheduler: ManualScheduler) -> SessionTimer:
    return SessionTimer(configuration, scheduler=scheduler)


@pytest.fixture
def content_filter(configuration: ConfigurationStore) -> ContentApprovalFilter:
    return ContentApprovalFilter(configuration)


@pytest.fixture
def test_settings(temp_dir: Path, namespace: str) -> Settings:
    return Settings(
        namespace=namespace,
        storage_path=temp_dir / "store.json",
        tick_interval_seconds=0.01,
    )
