# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# Shared fixtures for all tests.
#
# FIXTURES:
# ---------
# - store        → RecordingStore (MemoryMetaStore that logs writes)
# - nonce        → NonceManager with a frozen clock
# - meta_group   → non-serialized Group("meta") with a, b, tags
# - make_context → build a Context over store + nonce
#
# ==============================================

import pytest

from fieldmeta.config import reset_config
from fieldmeta.context import Context
from fieldmeta.fields import Field, Group
from fieldmeta.security import NonceManager
from fieldmeta.storage import MemoryMetaStore


FROZEN_NOW = 1_700_000_000.0


class RecordingStore(MemoryMetaStore):
    """MemoryMetaStore that remembers every write call."""

    def __init__(self, data_type: str = "post"):
        super().__init__(data_type)
        self.calls = []

    def add_data(self, data_id, data_key, data_value, unique=False):
        self.calls.append(("add", data_id, data_key, data_value))
        return super().add_data(data_id, data_key, data_value, unique)

    def update_data(self, data_id, data_key, data_value, data_prev_value=""):
        self.calls.append(("update", data_id, data_key, data_value))
        return super().update_data(data_id, data_key, data_value, data_prev_value)

    def delete_data(self, data_id, data_key, data_value=""):
        self.calls.append(("delete", data_id, data_key, data_value))
        return super().delete_data(data_id, data_key, data_value)

    def writes_for(self, key):
        return [call for call in self.calls if call[2] == key]


@pytest.fixture(autouse=True)
def fresh_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def nonce():
    return NonceManager("test-secret", lifetime=86400, clock=lambda: FROZEN_NOW)


@pytest.fixture
def meta_group():
    return Group("meta", serialize_data=False, children=[
        Field("a"),
        Field("b"),
        Field("tags", limit=0),
    ])


@pytest.fixture
def make_context(store, nonce):
    def _make(fm, request=None, data_id=1, **kwargs):
        return Context(fm, store, request=request, nonce=nonce, data_id=data_id, **kwargs)
    return _make
