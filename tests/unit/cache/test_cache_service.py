"""Test multi-tier cache service."""

from unittest.mock import patch

import pytest

from voicegate.cache.cache_service import (
    LANGUAGE_TIER,
    RESPONSE_TIER,
    TRANSCRIPT_TIER,
    CacheService,
)
from voicegate.models.speech import LanguageDetection, TranscriptResult


@pytest.fixture
def transcript():
    """Sample transcript."""
    return TranscriptResult(transcript="namaste", language="ne-NP", confidence=0.9)


class TestFromConfig:
    """Test tier construction from settings."""

    def test_should_build_tiers_with_configured_limits(self, cache_service):
        """Test default capacities and TTLs."""
        response = cache_service.tier(RESPONSE_TIER)
        transcript = cache_service.tier(TRANSCRIPT_TIER)
        language = cache_service.tier(LANGUAGE_TIER)

        assert (response.capacity, response.ttl_seconds) == (100, 300)
        assert (transcript.capacity, transcript.ttl_seconds) == (30, 60)
        assert (language.capacity, language.ttl_seconds) == (50, 120)

    def test_should_apply_eviction_policy(self, test_config, clock):
        """Test policy from settings."""
        test_config.cache_eviction_policy = "recency"
        service = CacheService.from_config(test_config, clock=clock)
        assert service.tier(RESPONSE_TIER).eviction_policy.value == "recency"


class TestResponseTier:
    """Test response caching."""

    def test_should_roundtrip_response(self, cache_service):
        """Test set then get."""
        cache_service.set_response("hello", "s1", "Hi!")
        assert cache_service.get_response("hello", "s1") == "Hi!"

    def test_should_scope_responses_to_session(self, cache_service):
        """Test same message in another session misses."""
        cache_service.set_response("hello", "s1", "Hi!")
        assert cache_service.get_response("hello", "s2") is None

    def test_should_not_leak_across_sessions_with_separators(self, cache_service):
        """Test a session id containing a separator cannot read another reply."""
        cache_service.set_response("hi:x", "y", "reply for y")
        assert cache_service.get_response("hi", "x:y") is None

    def test_should_expire_after_five_minutes(self, cache_service, clock):
        """Test response TTL."""
        cache_service.set_response("hello", "s1", "Hi!")
        clock.advance(299)
        assert cache_service.get_response("hello", "s1") == "Hi!"
        clock.advance(1)
        assert cache_service.get_response("hello", "s1") is None


class TestAudioTiers:
    """Test transcript and language caching."""

    def test_should_roundtrip_transcript(self, cache_service, transcript):
        """Test transcript by fingerprint."""
        fp = cache_service.audio_fingerprint(b"\x01" * 4000)
        cache_service.set_transcript(fp, transcript)
        assert cache_service.get_transcript(fp) == transcript

    def test_should_roundtrip_language(self, cache_service):
        """Test language by fingerprint."""
        fp = cache_service.audio_fingerprint(b"\x02" * 4000)
        detection = LanguageDetection(language="en-US", confidence=0.8)
        cache_service.set_language(fp, detection)
        assert cache_service.get_language(fp) == detection

    def test_same_head_and_tail_share_transcript(self, cache_service, transcript):
        """Test fingerprint ignores the middle of the audio."""
        head, tail = b"H" * 1024, b"T" * 1024
        first = head + b"A" * 5000 + tail
        second = head + b"B" * 5000 + tail

        cache_service.set_transcript(cache_service.audio_fingerprint(first), transcript)

        assert cache_service.get_transcript(
            cache_service.audio_fingerprint(second)
        ) == transcript

    def test_transcript_tier_keeps_thirty_entries(self, cache_service, transcript):
        """Test transcript capacity."""
        for i in range(40):
            cache_service.set_transcript(f"fp{i}", transcript)
        assert len(cache_service.tier(TRANSCRIPT_TIER)) == 30
        assert cache_service.get_transcript("fp0") is None
        assert cache_service.get_transcript("fp39") == transcript


class TestMaintenance:
    """Test clear, expiry sweep and prune."""

    def test_clear_all_empties_every_tier(self, cache_service, transcript):
        """Test clear_all."""
        cache_service.set_response("m", "s", "r")
        cache_service.set_transcript("fp", transcript)
        cache_service.set_language("fp", LanguageDetection())

        assert cache_service.clear_all() == 3
        assert cache_service.stats().total_size == 0

    def test_clear_expired_removes_only_expired(self, cache_service, clock, transcript):
        """Test sweep respects per-tier TTLs."""
        cache_service.set_response("m", "s", "r")
        cache_service.set_transcript("fp", transcript)
        clock.advance(61)

        assert cache_service.clear_expired() == 1
        assert cache_service.get_response("m", "s") == "r"

    def test_clear_expired_continues_past_failing_tier(self, cache_service, clock):
        """Test per-tier isolation."""
        cache_service.set_response("m", "s", "r")
        clock.advance(301)

        with patch.object(
            cache_service.tier(TRANSCRIPT_TIER),
            "purge_expired",
            side_effect=RuntimeError("boom"),
        ):
            assert cache_service.clear_expired() == 1

    def test_prune_trims_nearly_full_tier(self, cache_service):
        """Test response tier pruned from 95 to 72."""
        for i in range(95):
            cache_service.set_response(f"m{i}", "s", "r")

        assert cache_service.prune() == 23
        assert len(cache_service.tier(RESPONSE_TIER)) == 72


class TestStats:
    """Test statistics payload."""

    def test_should_report_tier_stats(self, cache_service):
        """Test to_dict shape."""
        cache_service.set_response("m", "s", "r")
        cache_service.get_response("m", "s")
        cache_service.get_response("x", "s")

        payload = cache_service.stats().to_dict()

        assert payload["response"]["size"] == 1
        assert payload["response"]["maxSize"] == 100
        assert payload["response"]["hitRate"] == 0.5
        assert payload["response"]["utilization"] == 0.01
        assert payload["transcript"]["size"] == 0
        assert payload["language"]["maxSize"] == 50
        assert payload["totalSize"] == 1
