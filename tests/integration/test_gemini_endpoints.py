import base64

from mediastudio.infrastructure.providers.gemini_provider import EditedImage


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def test_gemini_routes_require_auth(client, provider):
    r = client.post("/api/gemini/generate-images", json={"prompt": "cat"})
    assert r.status_code == 401
    assert provider.calls == []


def test_edit_image(client, auth_header, provider, png_bytes):
    body = {"image": _b64(png_bytes()), "mimeType": "image/png", "prompt": "add snow.", "model": None}
    r = client.post("/api/gemini/edit-image", headers=auth_header, json=body)
    assert r.status_code == 200, r.text
    data = r.json()
    assert base64.b64decode(data["newImageBase64"]) == provider.edit_result.data
    assert data["mimeType"] == "image/png"
    assert data["text"] == "done"
    assert provider.calls == [("edit", "image/png", "add snow.", None)]


def test_edit_image_accepts_data_url(client, auth_header, provider, png_bytes):
    body = {"image": f"data:image/png;base64,{_b64(png_bytes())}", "mimeType": "image/png", "prompt": "x"}
    r = client.post("/api/gemini/edit-image", headers=auth_header, json=body)
    assert r.status_code == 200, r.text


def test_edit_image_refusal_returns_nulls(client, auth_header, provider, png_bytes):
    provider.edit_result = EditedImage(data=None, mime_type="image/png", text="I can't help with that")
    body = {"image": _b64(png_bytes()), "mimeType": "image/png", "prompt": "x"}
    data = client.post("/api/gemini/edit-image", headers=auth_header, json=body).json()
    assert data["newImageBase64"] is None
    assert data["text"] == "I can't help with that"


def test_edit_image_bad_input(client, auth_header, provider):
    bad_b64 = {"image": "@@@", "mimeType": "image/png", "prompt": "x"}
    assert client.post("/api/gemini/edit-image", headers=auth_header, json=bad_b64).status_code == 400
    bad_type = {"image": _b64(b"GIF89a"), "mimeType": "image/gif", "prompt": "x"}
    assert client.post("/api/gemini/edit-image", headers=auth_header, json=bad_type).status_code == 400
    missing = {"image": _b64(b"x"), "prompt": "x"}
    assert client.post("/api/gemini/edit-image", headers=auth_header, json=missing).status_code == 422
    assert provider.calls == []


def test_missing_api_key_is_reported(client, auth_header, provider):
    provider.configured = False
    r = client.post("/api/gemini/generate-images", headers=auth_header, json={"prompt": "cat"})
    assert r.status_code == 500
    assert r.json()["detail"] == "Image generation service is not configured on the server."


def test_generate_images(client, auth_header, provider):
    body = {"prompt": "a cat", "numberOfImages": 2, "aspectRatio": "16:9"}
    r = client.post("/api/gemini/generate-images", headers=auth_header, json=body)
    assert r.status_code == 200, r.text
    images = [base64.b64decode(i) for i in r.json()["images"]]
    assert images == [b"jpeg-1", b"jpeg-2"]
    assert provider.calls == [("images", "a cat", 2, "16:9")]


def test_generate_images_validation(client, auth_header, provider):
    for body in ({"prompt": "x", "numberOfImages": 5}, {"prompt": "x", "aspectRatio": "2:1"}, {"prompt": ""}):
        r = client.post("/api/gemini/generate-images", headers=auth_header, json=body)
        assert r.status_code == 422, body


def test_video_job_lifecycle(client, auth_header, provider):
    r = client.post("/api/gemini/generate-video", headers=auth_header, json={"prompt": "waves"})
    assert r.status_code == 202, r.text
    op = r.json()["operationName"]
    assert op.startswith("models/veo/operations/")

    pending = client.get(f"/api/gemini/video-status/{op}", headers=auth_header)
    assert pending.status_code == 200
    assert pending.json()["status"] == "pending"

    done = client.get(f"/api/gemini/video-status/{op}", headers=auth_header)
    assert done.status_code == 200
    assert done.headers["content-type"] == "video/mp4"
    assert done.content == provider.video


def test_video_with_start_image(client, auth_header, provider, png_bytes):
    body = {"prompt": "waves", "startImage": {"base64": _b64(png_bytes()), "mimeType": "image/png"}}
    r = client.post("/api/gemini/generate-video", headers=auth_header, json=body)
    assert r.status_code == 202
    assert provider.calls[-1] == ("video", "waves", True)


def test_failed_video_reports_message(client, auth_header, provider):
    provider.pending_polls = 0
    provider.video_error = "Content blocked"
    op = client.post("/api/gemini/generate-video", headers=auth_header, json={"prompt": "x"}).json()["operationName"]
    r = client.get(f"/api/gemini/video-status/{op}", headers=auth_header)
    assert r.status_code == 200
    assert r.json() == {"status": "failed", "message": "Content blocked"}


def test_video_status_is_private_to_owner(client, auth_header, provider, new_user):
    op = client.post("/api/gemini/generate-video", headers=auth_header, json={"prompt": "x"}).json()["operationName"]
    other = {"Authorization": f"Bearer {new_user()['token']}"}
    assert client.get(f"/api/gemini/video-status/{op}", headers=other).status_code == 404
    assert client.get("/api/gemini/video-status/models/veo/operations/unknown", headers=auth_header).status_code == 404
