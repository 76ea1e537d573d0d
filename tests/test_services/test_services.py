"""
Unit tests for the playlist and impression services.
"""

from decimal import Decimal
from typing import Any

import pytest

from tabletads.ad_server.services import ImpressionService, PlaylistService
from tabletads.common.exceptions import ValidationError
from tabletads.schemas.internal import AdCandidate
from tabletads.schemas.request import ImpressionRequest, PlaylistRequest


class TestAdCandidate:
    """Tests for media URL selection."""

    def test_first_url_wins(self) -> None:
        candidate = AdCandidate.from_row(
            {"id": "a1", "midias_urls": ["https://cdn/1.mp4", "https://cdn/2.mp4"]}
        )
        assert candidate.media_url == "https://cdn/1.mp4"

    def test_no_media(self) -> None:
        assert AdCandidate.from_row({"id": "a1", "midias_urls": []}).media_url is None
        assert AdCandidate.from_row({"id": "a1", "midias_urls": None}).media_url is None
        assert AdCandidate.from_row({"id": "a1"}).media_url is None

    def test_blank_first_url_is_not_playable(self) -> None:
        candidate = AdCandidate.from_row({"id": "a1", "midias_urls": ["", "https://cdn/2.mp4"]})
        assert candidate.media_url is None

    def test_numeric_id_is_stringified(self) -> None:
        assert AdCandidate.from_row({"id": 42}).id == "42"


class TestPlaylistService:
    """Tests for PlaylistService."""

    @pytest.mark.asyncio
    async def test_every_entry_has_media(self, fake_store: Any) -> None:
        fake_store.ads = [
            {"id": "a1", "midias_urls": ["https://cdn/a1.mp4"]},
            {"id": "a2", "midias_urls": []},
            {"id": "a3", "midias_urls": ["https://cdn/a3.mp4"]},
        ]
        service = PlaylistService(fake_store)

        response = await service.build_playlist(PlaylistRequest(lat=1.5, lng=-2.5))

        assert [entry.id for entry in response.playlist] == ["a1", "a3"]
        assert all(entry.media_url for entry in response.playlist)
        assert response.next_fetch_in_seconds == 300

    @pytest.mark.asyncio
    async def test_tokens_share_issue_time(self, fake_store: Any) -> None:
        fake_store.ads = [
            {"id": "a1", "midias_urls": ["https://cdn/a1.mp4"]},
            {"id": "a2", "midias_urls": ["https://cdn/a2.mp4"]},
        ]
        service = PlaylistService(fake_store)

        response = await service.build_playlist(PlaylistRequest(lat=1.5, lng=-2.5))

        issued = {entry.impression_token.rsplit("_", 1)[1] for entry in response.playlist}
        assert len(issued) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("lat,lng", [(0, 1.0), (1.0, None), (float("nan"), 1.0), (1.0, float("inf"))])
    async def test_unusable_coordinates(self, fake_store: Any, lat: Any, lng: Any) -> None:
        service = PlaylistService(fake_store)

        with pytest.raises(ValidationError):
            await service.build_playlist(PlaylistRequest(lat=lat, lng=lng))

        assert fake_store.fetch_calls == []


class TestImpressionService:
    """Tests for ImpressionService."""

    @pytest.mark.asyncio
    async def test_charges_flat_cost(self, fake_store: Any) -> None:
        service = ImpressionService(fake_store)

        response = await service.record_impression(ImpressionRequest(campanha_id="c1"))

        assert response.success is True
        assert fake_store.increments == [("c1", Decimal("0.10"))]

    @pytest.mark.asyncio
    async def test_insert_failure_skips_increment(self, fake_store: Any, store_unavailable: Any) -> None:
        fake_store.insert_error = store_unavailable
        service = ImpressionService(fake_store)

        response = await service.record_impression(ImpressionRequest(campanha_id="c1"))

        assert response.success is True
        assert fake_store.increments == []

    @pytest.mark.asyncio
    async def test_requires_campaign(self, fake_store: Any) -> None:
        service = ImpressionService(fake_store)

        with pytest.raises(ValidationError):
            await service.record_impression(ImpressionRequest(device_id="dev1"))
