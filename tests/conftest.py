import pytest

from iso15118_json.messages.enums import CardinalityPolicy
from iso15118_json.settings import SettingKey, shared_settings


@pytest.fixture(autouse=True)
def default_shared_settings():
    """Each test starts with, and leaves behind, the default settings"""
    saved = dict(shared_settings)
    shared_settings[SettingKey.MESSAGE_LOG_JSON] = False
    shared_settings[SettingKey.CARDINALITY_POLICY] = CardinalityPolicy.ENFORCE
    yield
    shared_settings.clear()
    shared_settings.update(saved)
