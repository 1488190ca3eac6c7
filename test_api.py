import io

from PIL import Image

def _png_bytes(size=(8, 8)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(0, 128, 255)).save(buffer, format="PNG")
    return buffer.getvalue()

def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "message" in response.json()

def test_list_topics_uses_camel_case(client):
    response = client.get("/api/topics")
    assert response.status_code == 200
    topics = response.json()
    assert len(topics) == 8
    first = topics[0]
    assert first["id"] == "t1"
    assert first["isDeleted"] is False
    assert first["subtopics"][0]["resourceLinks"] == []
    assert first["subtopics"][0]["comments"] == []

def test_create_topic_echoes_body_with_ids(client):
    body = {
        "title": "Diving",
        "icon": "Anchor",
        "subtopics": [{
            "title": "Decompression",
            "resources": "# Tables",
            "resourceLinks": [{"type": "video", "title": "Intro", "url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ"}],
        }],
    }
    response = client.post("/api/topics", json=body)
    assert response.status_code == 200
    echoed = response.json()
    assert echoed["id"]
    assert echoed["subtopics"][0]["id"]
    link = echoed["subtopics"][0]["resourceLinks"][0]
    assert link["embedUrl"] == "https://www.youtube.com/embed/dQw4w9WgXcQ"

    ids = [t["id"] for t in client.get("/api/topics").json()]
    assert echoed["id"] in ids

def test_update_topic_overwrites_subtopics(client):
    body = {"id": "t1", "title": "Safety Second", "icon": "ShieldCheck", "subtopics": [{"id": "st1", "title": "Only one"}]}
    response = client.put("/api/topics/t1", json=body)
    assert response.status_code == 200
    assert response.json()["title"] == "Safety Second"

    topic = next(t for t in client.get("/api/topics").json() if t["id"] == "t1")
    assert [s["id"] for s in topic["subtopics"]] == ["st1"]

def test_archive_and_restore_topic(client):
    assert client.delete("/api/topics/t2").json() == {"success": True}
    topic = next(t for t in client.get("/api/topics").json() if t["id"] == "t2")
    assert topic["isDeleted"] is True

    assert client.post("/api/topics/t2/restore").json() == {"success": True}
    topic = next(t for t in client.get("/api/topics").json() if t["id"] == "t2")
    assert topic["isDeleted"] is False
    assert topic["subtopics"][0]["title"] == "Chart Reading"

def test_archive_unknown_topic_succeeds(client):
    assert client.delete("/api/topics/nope").json() == {"success": True}

def test_progress_round_trip(client):
    record = {"userId": "u2", "subtopicId": "st1", "status": "good"}
    assert client.post("/api/progress", json=record).json() == record

    updated = {**record, "status": "fully_understood"}
    client.post("/api/progress", json=updated)

    assert client.get("/api/progress/u2").json() == [updated]
    assert client.get("/api/progress/u3").json() == []

def test_progress_rejects_unknown_status(client):
    response = client.post("/api/progress", json={"userId": "u2", "subtopicId": "st1", "status": "expert"})
    assert response.status_code == 422
    assert "error" in response.json()

def test_progress_rejects_unknown_subtopic(client):
    response = client.post("/api/progress", json={"userId": "u2", "subtopicId": "does-not-exist", "status": "good"})
    assert response.status_code == 404
    assert response.json() == {"error": "Subtopic not found"}

    assert client.get("/api/progress/u2").json() == []
    assert client.get("/api/progress/summary").json()["activeLearners"] == 0

def test_module_detail_per_user(client):
    client.post("/api/progress", json={"userId": "u2", "subtopicId": "st2", "status": "good"})

    detail = client.get("/api/progress/u2/topics/t1").json()
    assert [(d["id"], d["status"]) for d in detail] == [("st1", "not_addressed"), ("st2", "good")]

    response = client.get("/api/progress/u2/topics/missing")
    assert response.status_code == 404
    assert response.json() == {"error": "Topic not found"}

def test_progress_summary(client):
    client.post("/api/progress", json={"userId": "u2", "subtopicId": "st1", "status": "fully_understood"})
    client.post("/api/progress", json={"userId": "u3", "subtopicId": "st2", "status": "basic"})

    summary = client.get("/api/progress/summary").json()
    assert summary["totalModules"] == 8
    assert summary["totalEmployees"] == 5
    assert summary["activeLearners"] == 2

    safety = next(m for m in summary["modules"] if m["topicId"] == "t1")
    # 1 fully understood out of 2 subtopics x 5 employees
    assert safety["overallPercentage"] == 10
    may = next(d for d in safety["details"] if d["userId"] == "u2")
    assert may["percentage"] == 50

def test_topic_understanding_per_user(client):
    client.post("/api/progress", json={"userId": "u2", "subtopicId": "st1", "status": "good"})

    result = client.get("/api/progress/u2/topics").json()
    safety = next(r for r in result if r["topicId"] == "t1")
    assert safety["understanding"] == 33
    assert safety["breakdown"]["counts"]["good"] == 1
    assert safety["breakdown"]["counts"]["not_addressed"] == 1

def test_get_user_and_not_found(client):
    response = client.get("/api/users/u2")
    assert response.status_code == 200
    assert response.json()["name"] == "May"

    missing = client.get("/api/users/nobody")
    assert missing.status_code == 404
    assert missing.json() == {"error": "User not found"}

def test_list_users(client):
    users = client.get("/api/users").json()
    assert [u["id"] for u in users] == ["u1", "u2", "u3", "u4", "u5", "u6"]
    assert users[0]["role"] == "admin"

def test_patch_user(client):
    response = client.patch("/api/users/u3", json={"name": "Adam B."})
    assert response.status_code == 200
    assert response.json()["name"] == "Adam B."
    assert response.json()["email"] == "adam@oceaninfinity.com"

    assert client.patch("/api/users/nobody", json={"name": "x"}).status_code == 404

def test_add_comment(client):
    body = {"subtopicId": "st3", "comment": {"userId": "u2", "text": "Learned the symbols", "drawingUrl": "data:image/png;base64,AAAA"}}
    assert client.post("/api/comments", json=body).json() == {"success": True}

    topic = next(t for t in client.get("/api/topics").json() if t["id"] == "t2")
    comment = topic["subtopics"][0]["comments"][0]
    assert comment["text"] == "Learned the symbols"
    assert comment["drawingUrl"].startswith("data:image/png")
    assert comment["userId"] == "u2"

def test_add_comment_unknown_subtopic(client):
    response = client.post("/api/comments", json={"subtopicId": "nope", "comment": {"userId": "u2", "text": "x"}})
    assert response.status_code == 404
    assert response.json() == {"error": "Subtopic not found"}

def test_login_me_logout(client):
    assert client.get("/api/me").status_code == 401

    response = client.post("/api/login", json={"email": "may@oceaninfinity.com"})
    assert response.status_code == 200
    assert response.json()["id"] == "u2"

    assert client.get("/api/me").json()["id"] == "u2"

    assert client.post("/api/logout").json() == {"success": True}
    assert client.get("/api/me").status_code == 401

def test_login_unknown_email(client):
    response = client.post("/api/login", json={"email": "ghost@oceaninfinity.com"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email"}

def test_export_topic_pdf_and_docx(client):
    pdf = client.get("/api/topics/t1/export", params={"format": "pdf"})
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")
    assert "Module_Safety_First.pdf" in pdf.headers["content-disposition"]

    docx = client.get("/api/topics/t1/export", params={"format": "docx"})
    assert docx.status_code == 200
    assert docx.content[:2] == b"PK"

def test_export_unknown_topic(client):
    assert client.get("/api/topics/nope/export").status_code == 404

def test_avatar_upload(client, avatar_dir):
    files = {"file": ("me.png", _png_bytes(), "image/png")}
    response = client.post("/api/users/u2/avatar", files=files)
    assert response.status_code == 200
    avatar = response.json()["avatar"]
    assert avatar == "/avatars/u2/avatar.png"
    assert (avatar_dir / "u2" / "avatar.png").exists()

    served = client.get(avatar)
    assert served.status_code == 200
    assert served.content == _png_bytes()

def test_avatar_upload_rejects_bad_type(client):
    files = {"file": ("notes.txt", b"hello", "text/plain")}
    response = client.post("/api/users/u2/avatar", files=files)
    assert response.status_code == 400
    assert "Invalid file type" in response.json()["error"]

def test_avatar_upload_rejects_large_file(client):
    files = {"file": ("big.png", b"\x89PNG" + b"0" * 600_000, "image/png")}
    response = client.post("/api/users/u2/avatar", files=files)
    assert response.status_code == 400
    assert "500 KB" in response.json()["error"]
