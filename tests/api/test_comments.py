from fastapi import status
from fastapi.testclient import TestClient

from tipjar.models.comment import Comment


class TestCommentAPI:
    """Test cases for /api/comments"""

    def _post(self, client, headers, content_id, text="Nice track"):
        response = client.post("/api/comments", json={"contentId": content_id, "text": text}, headers=headers)
        assert response.status_code == status.HTTP_201_CREATED, response.text
        return response.json()

    def test_create_comment(self, client: TestClient, make_account, auth_headers, create_content):
        content_id = create_content(auth_headers())["id"]
        fan = make_account()

        comment = self._post(client, auth_headers(fan), content_id, "  Nice track  ")
        assert comment["text"] == "Nice track"
        assert comment["address"] == fan.address.lower()
        assert comment["contentId"] == content_id
        assert comment["deleted"] is False

    def test_create_on_missing_content(self, client: TestClient, auth_headers):
        response = client.post("/api/comments", json={"contentId": "missing", "text": "hi"}, headers=auth_headers())
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_create_validation(self, client: TestClient, auth_headers, create_content):
        headers = auth_headers()
        content_id = create_content(headers)["id"]

        blank = client.post("/api/comments", json={"contentId": content_id, "text": "   "}, headers=headers)
        assert blank.status_code == status.HTTP_400_BAD_REQUEST
        assert blank.json()["details"][0]["message"] == "Comment text is required"

        too_long = client.post("/api/comments", json={"contentId": content_id, "text": "x" * 1001}, headers=headers)
        assert too_long.status_code == status.HTTP_400_BAD_REQUEST
        assert too_long.json()["details"][0]["message"] == "Comment too long"

    def test_list_excludes_deleted(self, client: TestClient, auth_headers, create_content):
        headers = auth_headers()
        content_id = create_content(headers)["id"]
        keep = self._post(client, headers, content_id, "keep")
        gone = self._post(client, headers, content_id, "gone")

        assert client.delete(f"/api/comments/{gone['id']}", headers=headers).status_code == status.HTTP_200_OK

        data = client.get(f"/api/comments/{content_id}").json()
        assert [c["id"] for c in data["comments"]] == [keep["id"]]
        assert data["pagination"] == {"page": 1, "limit": 50, "total": 1, "pages": 1}

    def test_owner_can_edit(self, client: TestClient, auth_headers, create_content):
        headers = auth_headers()
        content_id = create_content(headers)["id"]
        comment = self._post(client, headers, content_id)

        response = client.put(f"/api/comments/{comment['id']}", json={"text": "Edited"}, headers=headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["text"] == "Edited"

    def test_non_owner_cannot_edit_or_delete(
        self, client: TestClient, make_account, auth_headers, create_content, db_session
    ):
        owner_headers = auth_headers()
        content_id = create_content(owner_headers)["id"]
        comment = self._post(client, owner_headers, content_id, "original")
        other_headers = auth_headers(make_account())

        edit = client.put(f"/api/comments/{comment['id']}", json={"text": "hijacked"}, headers=other_headers)
        assert edit.status_code == status.HTTP_403_FORBIDDEN
        assert edit.json() == {"error": "Not authorized to edit this comment"}

        delete = client.delete(f"/api/comments/{comment['id']}", headers=other_headers)
        assert delete.status_code == status.HTTP_403_FORBIDDEN
        assert delete.json() == {"error": "Not authorized to delete this comment"}

        stored = db_session.get(Comment, comment["id"])
        assert stored.text == "original"
        assert stored.deleted is False

    def test_deleted_comment_cannot_be_edited_or_deleted_again(
        self, client: TestClient, auth_headers, create_content
    ):
        headers = auth_headers()
        content_id = create_content(headers)["id"]
        comment = self._post(client, headers, content_id)

        first = client.delete(f"/api/comments/{comment['id']}", headers=headers)
        assert first.json() == {"message": "Comment deleted"}

        again = client.delete(f"/api/comments/{comment['id']}", headers=headers)
        assert again.status_code == status.HTTP_400_BAD_REQUEST
        assert again.json() == {"error": "Comment already deleted"}

        edit = client.put(f"/api/comments/{comment['id']}", json={"text": "back"}, headers=headers)
        assert edit.status_code == status.HTTP_400_BAD_REQUEST
        assert edit.json() == {"error": "Cannot edit deleted comment"}

    def test_missing_comment(self, client: TestClient, auth_headers):
        headers = auth_headers()
        assert client.put("/api/comments/nope", json={"text": "x"}, headers=headers).status_code == 404
        assert client.delete("/api/comments/nope", headers=headers).status_code == 404
