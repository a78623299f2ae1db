"""
Tests for the filesystem audio source.
"""

import pytest

from zettelgraph.core.audio.local import LocalAudioSource
from zettelgraph.utils.exceptions import NotFoundError, ValidationError


@pytest.mark.unit
class TestLocalAudioSource:
    async def test_store_and_fetch(self, tmp_path):
        source = LocalAudioSource(tmp_path)

        path = await source.store("owner-1/memo.webm", b"\x1aE\xdf\xa3")

        assert path.is_file()
        assert await source.fetch("owner-1/memo.webm") == b"\x1aE\xdf\xa3"

    async def test_missing_file(self, tmp_path):
        with pytest.raises(NotFoundError):
            await LocalAudioSource(tmp_path).fetch("missing.webm")

    async def test_reference_cannot_escape(self, tmp_path):
        source = LocalAudioSource(tmp_path / "audio")

        with pytest.raises(ValidationError):
            await source.fetch("../secrets.txt")
