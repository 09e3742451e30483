"""
Testes da localização de gravações no object store.
"""
from datetime import date, datetime

import pytest

from app.core.exceptions import ProcessingError, RecordingNotFoundError
from app.services.recording_locator import (
    RecordingLocator,
    build_day_prefix,
    extract_subject_name,
    extract_timestamp,
    normalize_name,
)

CALL_TIME = datetime(2024, 1, 5, 10, 30, 0)


@pytest.mark.unit
class TestFileNameParsing:
    """Leitura das posições fixas do nome de ficheiro."""

    def test_day_prefix_has_no_zero_padding(self):
        assert build_day_prefix("cmp", date(2024, 1, 5)) == "CMP/2024/1/5/"

    def test_extract_timestamp_and_subject(self, make_key):
        key = make_key("CMP", CALL_TIME, "John Smith")

        assert extract_timestamp(key) == CALL_TIME
        assert extract_subject_name(key) == "John Smith"

    @pytest.mark.parametrize("file_name", [
        "CMP/2024/1/5/short.wav",
        "CMP/2024/1/5/call_2024-13-45_10-30-00John.wav",
    ])
    def test_malformed_timestamp(self, file_name):
        with pytest.raises(ValueError):
            extract_timestamp(file_name)

    def test_subject_requires_wav_extension(self):
        with pytest.raises(ValueError):
            extract_subject_name("CMP/2024/1/5/call_2024-01-05_10-30-00John.mp3")

    def test_normalize_name(self):
        assert normalize_name("O'Brien, Mary-Jane ") == "obrienmaryjane"
        assert normalize_name(None) == ""


@pytest.mark.unit
class TestSelectBlob:
    """Escolha da chave entre as listadas."""

    def test_exact_match(self, make_key):
        keys = [
            make_key("CMP", CALL_TIME, "Alice Jones"),
            make_key("CMP", CALL_TIME, "John Smith"),
            make_key("CMP", CALL_TIME, "Zed Brown"),
        ]

        locator = RecordingLocator(blob_store=None, strict_name_match=False)

        assert locator.select_blob(keys, CALL_TIME, "john.smith") == keys[1]

    def test_fallback_to_last_timestamp_match(self, make_key):
        keys = [
            make_key("CMP", CALL_TIME, "Alice Jones"),
            make_key("CMP", CALL_TIME, "Bob Stone"),
            make_key("CMP", datetime(2024, 1, 5, 11, 0, 0), "Carol King"),
        ]

        locator = RecordingLocator(blob_store=None, strict_name_match=False)

        assert locator.select_blob(keys, CALL_TIME, "Carol King") == keys[1]

    def test_strict_name_match_disables_fallback(self, make_key):
        keys = [make_key("CMP", CALL_TIME, "Alice Jones")]

        locator = RecordingLocator(blob_store=None, strict_name_match=True)

        assert locator.select_blob(keys, CALL_TIME, "Carol King") is None

    def test_skips_malformed_and_non_wav_keys(self, make_key):
        good = make_key("CMP", CALL_TIME, "John Smith")
        keys = [
            "CMP/2024/1/5/notes.txt",
            "CMP/2024/1/5/bad.wav",
            good.replace(".wav", ".mp3"),
            good,
        ]

        locator = RecordingLocator(blob_store=None, strict_name_match=True)

        assert locator.select_blob(keys, CALL_TIME, "John Smith") == good

    def test_no_timestamp_match(self, make_key):
        keys = [make_key("CMP", datetime(2024, 1, 5, 10, 30, 1), "John Smith")]

        locator = RecordingLocator(blob_store=None, strict_name_match=False)

        assert locator.select_blob(keys, CALL_TIME, "John Smith") is None


class TestLocate:
    """Localização contra um object store local."""

    @pytest.mark.asyncio
    async def test_locate_in_day_prefix(self, blob_store, put_recording):
        put_recording("CMP", CALL_TIME, "Alice Jones")
        key = put_recording("CMP", CALL_TIME, "John Smith")
        put_recording("NYSEG", CALL_TIME, "John Smith")

        locator = RecordingLocator(blob_store, strict_name_match=False)

        assert await locator.locate("CMP", CALL_TIME, "JOHN SMITH") == key

    @pytest.mark.asyncio
    async def test_not_found(self, blob_store, put_recording):
        put_recording("CMP", datetime(2024, 1, 6, 10, 30, 0), "John Smith")

        locator = RecordingLocator(blob_store, strict_name_match=False)

        with pytest.raises(RecordingNotFoundError):
            await locator.locate("CMP", CALL_TIME, "John Smith")

    @pytest.mark.asyncio
    async def test_empty_store(self, blob_store):
        locator = RecordingLocator(blob_store, strict_name_match=False)

        with pytest.raises(RecordingNotFoundError):
            await locator.locate("RGE", CALL_TIME, "John Smith")

    @pytest.mark.asyncio
    async def test_listing_failure_is_processing_error(self, failing_store):
        locator = RecordingLocator(failing_store(failing_prefixes=("CMP/",)), strict_name_match=False)

        with pytest.raises(ProcessingError) as exc_info:
            await locator.locate("CMP", CALL_TIME, "John Smith")

        assert "CMP/2024/1/5/" in exc_info.value.detail
