"""Tests for chancery.remote — HttpRemote and InMemoryRemote."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from chancery.models import Character, GlobalSettings, PromptPreset, SyncStatus
from chancery.remote import HttpRemote, InMemoryRemote, RemoteError


# ---------------------------------------------------------------------------
# InMemoryRemote
# ---------------------------------------------------------------------------

class TestInMemoryRemote:
    async def test_save_and_fetch(self) -> None:
        remote = InMemoryRemote()
        c = Character(name="Rin")
        p = PromptPreset(kind="pose", name="Hero", text="tall")
        await remote.save_character(c)
        await remote.save_preset(p)
        changes = await remote.fetch_changes()
        assert changes.characters == [c]
        assert changes.presets == [p]

    async def test_stores_copies(self) -> None:
        remote = InMemoryRemote()
        c = Character(name="Rin")
        await remote.save_character(c)
        c.name = "Changed"
        changes = await remote.fetch_changes()
        assert changes.characters[0].name == "Rin"

    async def test_delete(self) -> None:
        remote = InMemoryRemote()
        c = Character(name="Rin")
        await remote.save_characters([c, Character(name="Kael")])
        await remote.delete_character(c)
        names = [x.name for x in (await remote.fetch_changes()).characters]
        assert names == ["Kael"]

    async def test_settings_absent_until_saved(self) -> None:
        remote = InMemoryRemote()
        assert await remote.fetch_global_settings() is None
        await remote.save_global_settings(GlobalSettings(default_generator="gen"))
        fetched = await remote.fetch_global_settings()
        assert fetched is not None
        assert fetched.default_generator == "gen"

    async def test_connect_reports_availability(self) -> None:
        assert await InMemoryRemote(available=True).connect() is True
        offline = InMemoryRemote(available=False)
        assert await offline.connect() is False
        assert not offline.is_available

    def test_availability_change_publishes_status(self) -> None:
        remote = InMemoryRemote(available=False)
        seen: list[SyncStatus] = []
        remote.add_status_listener(seen.append)
        remote.set_available(True)
        assert remote.is_available
        assert seen == [SyncStatus.idle()]

    def test_listener_removal(self) -> None:
        remote = InMemoryRemote()
        seen: list[SyncStatus] = []
        remove = remote.add_status_listener(seen.append)
        remove()
        remove()  # second call is harmless
        remote.set_available(False)
        assert seen == []


# ---------------------------------------------------------------------------
# HttpRemote
# ---------------------------------------------------------------------------

def _mock_response(body=None, status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.content = json.dumps(body).encode() if body is not None else b""
    resp.json.return_value = body
    resp.raise_for_status = MagicMock(
        side_effect=None if status < 400 else httpx.HTTPStatusError(
            "", request=MagicMock(), response=resp
        )
    )
    return resp


class TestHttpRemote:
    @pytest.fixture
    def remote(self) -> HttpRemote:
        return HttpRemote(base_url="https://sync.example.com/v1/", api_key="")

    async def test_unavailable_until_connected(self, remote: HttpRemote) -> None:
        assert not remote.is_available
        mock = AsyncMock(return_value=_mock_response({"status": "ok"}))
        with patch("httpx.AsyncClient.request", mock):
            assert await remote.connect() is True
        assert remote.is_available
        method, url = mock.call_args[0]
        assert (method, url) == ("GET", "https://sync.example.com/v1/health")

    async def test_connect_failure_publishes_status(self, remote: HttpRemote) -> None:
        seen: list[SyncStatus] = []
        remote.add_status_listener(seen.append)
        mock = AsyncMock(side_effect=httpx.ConnectError("refused"))
        with patch("httpx.AsyncClient.request", mock):
            assert await remote.connect() is False
        assert not remote.is_available
        assert seen[-1].state == "failure"
        assert "Cannot connect" in (seen[-1].reason or "")

    async def test_fetch_changes(self, remote: HttpRemote) -> None:
        c = Character(name="Rin")
        p = PromptPreset(kind="style", name="Anime", text="cel shaded")
        responses = [
            _mock_response([c.model_dump(mode="json", by_alias=True)]),
            _mock_response([p.model_dump(mode="json", by_alias=True)]),
        ]
        mock = AsyncMock(side_effect=responses)
        with patch("httpx.AsyncClient.request", mock):
            changes = await remote.fetch_changes()
        assert changes.characters == [c]
        assert changes.presets == [p]
        urls = [call.args[1] for call in mock.call_args_list]
        assert urls == [
            "https://sync.example.com/v1/characters",
            "https://sync.example.com/v1/presets",
        ]

    async def test_fetch_changes_bad_payload(self, remote: HttpRemote) -> None:
        mock = AsyncMock(side_effect=[_mock_response([{"nope": 1}]), _mock_response([])])
        with patch("httpx.AsyncClient.request", mock):
            with pytest.raises(RemoteError, match="Unexpected response format"):
                await remote.fetch_changes()

    async def test_settings_missing_returns_none(self, remote: HttpRemote) -> None:
        mock = AsyncMock(return_value=_mock_response({"detail": "not found"}, status=404))
        with patch("httpx.AsyncClient.request", mock):
            assert await remote.fetch_global_settings() is None

    async def test_settings_fetched(self, remote: HttpRemote) -> None:
        body = {"globalDefaults": {"lighting": "soft"}, "defaultGenerator": "gen"}
        mock = AsyncMock(return_value=_mock_response(body))
        with patch("httpx.AsyncClient.request", mock):
            settings = await remote.fetch_global_settings()
        assert settings == GlobalSettings(global_defaults={"lighting": "soft"}, default_generator="gen")

    async def test_save_character_puts_json(self, remote: HttpRemote) -> None:
        c = Character(name="Rin", profile_image_data=b"\x01\x02\x03")
        mock = AsyncMock(return_value=_mock_response())
        with patch("httpx.AsyncClient.request", mock):
            await remote.save_character(c)
        method, url = mock.call_args[0]
        assert method == "PUT"
        assert url == f"https://sync.example.com/v1/characters/{c.id}"
        body = mock.call_args.kwargs["json"]
        assert body["name"] == "Rin"
        assert body["profileImageData"] == "AQID"

    async def test_delete_preset(self, remote: HttpRemote) -> None:
        p = PromptPreset(kind="pose", name="x", text="y")
        mock = AsyncMock(return_value=_mock_response())
        with patch("httpx.AsyncClient.request", mock):
            await remote.delete_preset(p)
        assert mock.call_args[0] == ("DELETE", f"https://sync.example.com/v1/presets/{p.id}")

    async def test_bearer_token_sent_when_api_key_set(self) -> None:
        remote = HttpRemote(base_url="https://sync.example.com", api_key="secret")
        mock = AsyncMock(return_value=_mock_response())
        with patch("httpx.AsyncClient.request", mock):
            await remote.save_global_settings(GlobalSettings())
        assert mock.call_args.kwargs["headers"].get("Authorization") == "Bearer secret"

    async def test_no_auth_header_without_api_key(self, remote: HttpRemote) -> None:
        mock = AsyncMock(return_value=_mock_response())
        with patch("httpx.AsyncClient.request", mock):
            await remote.save_global_settings(GlobalSettings())
        assert "Authorization" not in mock.call_args.kwargs["headers"]

    async def test_http_error_raises_remote_error(self, remote: HttpRemote) -> None:
        mock = AsyncMock(return_value=_mock_response({"detail": "boom"}, status=500))
        with patch("httpx.AsyncClient.request", mock):
            with pytest.raises(RemoteError, match="HTTP 500"):
                await remote.save_presets([])

    async def test_timeout_raises_remote_error(self, remote: HttpRemote) -> None:
        mock = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
        with patch("httpx.AsyncClient.request", mock):
            with pytest.raises(RemoteError, match="timed out"):
                await remote.fetch_global_settings()
