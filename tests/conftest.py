import pytest

from helpers import RecordingTranslator


@pytest.fixture
def translator() -> RecordingTranslator:
    return RecordingTranslator()
