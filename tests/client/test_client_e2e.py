import io

import pytest
from fastapi.testclient import TestClient

from tipjar.client.api import ApiError, TipJarApiClient
from tipjar.client.token_store import TokenStore
from tipjar.client.wallet import WalletSession


@pytest.fixture
def wallet_factory(client: TestClient, make_account):
    """Wallet sessions talking to the app through the test client"""

    def _make(account=None) -> WalletSession:
        api = TipJarApiClient(base_url="http://testserver/api", session=client, token_store=TokenStore())
        return WalletSession(account or make_account(), api)

    return _make


class TestWalletSession:
    def test_login_stores_token(self, wallet_factory):
        wallet = wallet_factory()
        assert not wallet.is_authenticated

        token = wallet.login()

        assert wallet.is_authenticated
        assert wallet.api.token_store.load() == token

    def test_logout(self, wallet_factory):
        wallet = wallet_factory()
        wallet.login()
        wallet.logout()
        assert not wallet.is_authenticated

    def test_protected_call_without_login(self, wallet_factory):
        wallet = wallet_factory()
        with pytest.raises(ApiError) as exc_info:
            wallet.api.upload_content("music", "x", "/uploads/a.mp3")
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "No token provided"


class TestCreatorFanFlow:
    """A creator publishes, a fan likes and comments, through the python client"""

    def test_flow(self, wallet_factory):
        creator, fan = wallet_factory(), wallet_factory()
        creator.login()
        fan.login()

        media = creator.api.upload_media("track.mp3", io.BytesIO(b"ID3 data"), "audio/mpeg")
        content = creator.api.upload_content("music", "Night drive", media["url"], description="Lo-fi")
        content_id = content["id"]

        listing = fan.api.list_content(category="music")
        assert [item["id"] for item in listing["content"]] == [content_id]
        by_creator = fan.api.get_content_by_creator(creator.address)
        assert by_creator["pagination"]["total"] == 1

        assert fan.api.toggle_like(content_id)["liked"] is True
        assert fan.api.get_like_count(content_id) == 1
        assert fan.api.check_liked(content_id) is True
        assert creator.api.check_liked(content_id) is False

        assert fan.api.toggle_like(content_id)["liked"] is False
        assert fan.api.get_like_count(content_id) == 0

        comment = fan.api.post_comment(content_id, "Love it")
        assert fan.api.update_comment(comment["id"], "Love it!")["text"] == "Love it!"

        with pytest.raises(ApiError) as exc_info:
            creator.api.delete_comment(comment["id"])
        assert exc_info.value.status_code == 403

        assert fan.api.delete_comment(comment["id"]) == {"message": "Comment deleted"}
        assert fan.api.get_comments(content_id)["comments"] == []

    def test_missing_content_raises(self, wallet_factory):
        wallet = wallet_factory()
        with pytest.raises(ApiError) as exc_info:
            wallet.api.get_content("nope")
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Content not found"


class TestTokenStore:
    def test_memory_only(self):
        store = TokenStore()
        assert store.load() is None
        store.save("abc")
        assert store.load() == "abc"
        store.clear()
        assert store.load() is None

    def test_persisted(self, tmp_path):
        path = tmp_path / "session" / "token"
        TokenStore(path).save("abc")

        assert path.read_text() == "abc"
        assert (path.stat().st_mode & 0o777) == 0o600
        assert TokenStore(path).load() == "abc"

        TokenStore(path).clear()
        assert not path.exists()
