from localcooks.services.microlearning_service import FREE_PREVIEW_VIDEO


def test_progress_for_new_chef(client, chef, auth_headers):
    response = client.get(f"/api/v1/microlearning/progress/{chef.id}", headers=auth_headers(chef))
    assert response.status_code == 200
    body = response.json()
    assert body["progress"] == []
    assert body["completionConfirmed"] is False
    assert body["accessLevel"] == "limited"
    assert body["isAdmin"] is False


def test_progress_by_firebase_uid(client, chef, auth_headers):
    response = client.get(
        f"/api/v1/microlearning/progress/{chef.firebase_uid}", headers=auth_headers(chef)
    )
    assert response.status_code == 200


def test_cannot_read_another_users_progress(client, chef, make_user, auth_headers):
    other = make_user(role="chef")
    response = client.get(f"/api/v1/microlearning/progress/{other.id}", headers=auth_headers(chef))
    assert response.status_code == 403
    assert response.json()["detail"] == "Access denied"


def test_preview_video_progress(client, chef, auth_headers):
    response = client.post(
        "/api/v1/microlearning/progress",
        json={"userId": chef.id, "videoId": FREE_PREVIEW_VIDEO, "progress": 55.5},
        headers=auth_headers(chef),
    )
    assert response.status_code == 200
    item = response.json()["progress"]
    assert item["videoId"] == FREE_PREVIEW_VIDEO
    assert item["progress"] == 55.5
    assert item["completed"] is False

    listed = client.get(f"/api/v1/microlearning/progress/{chef.id}", headers=auth_headers(chef))
    assert [p["videoId"] for p in listed.json()["progress"]] == [FREE_PREVIEW_VIDEO]


def test_locked_video_for_limited_user(client, chef, auth_headers):
    response = client.post(
        "/api/v1/microlearning/progress",
        json={"userId": chef.id, "videoId": "basics-fifo", "progress": 10},
        headers=auth_headers(chef),
    )
    assert response.status_code == 403
    body = response.json()
    assert body["code"] == "microlearning_limited"
    assert body["errors"]["firstVideoOnly"] is True


def test_complete_requires_approval(client, chef, auth_headers):
    response = client.post(
        "/api/v1/microlearning/complete", json={"userId": chef.id}, headers=auth_headers(chef)
    )
    assert response.status_code == 403
    assert response.json()["errors"]["requiresApproval"] is True


def test_admin_completion_and_certificate(client, admin, auth_headers):
    headers = auth_headers(admin)

    missing = client.get(f"/api/v1/microlearning/completion/{admin.id}", headers=headers)
    assert missing.status_code == 404

    completed = client.post(
        "/api/v1/microlearning/complete", json={"userId": admin.id}, headers=headers
    )
    assert completed.status_code == 200
    assert completed.json()["completionConfirmed"] is True

    certificate = client.get(f"/api/v1/microlearning/certificate/{admin.id}", headers=headers)
    assert certificate.status_code == 200
    body = certificate.json()
    assert body["certificateUrl"].startswith(f"/api/v1/microlearning/certificates/microlearning-{admin.id}-")
    assert body["certificateUrl"].endswith(".pdf")

    completion = client.get(f"/api/v1/microlearning/completion/{admin.id}", headers=headers)
    assert completion.json()["certificateGenerated"] is True

    pdf = client.get(f"/api/v1/microlearning/certificate/{admin.id}/pdf", headers=headers)
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert f'filename="microlearning-{admin.id}.pdf"' in pdf.headers["content-disposition"]
    assert pdf.content.startswith(b"%PDF")


def test_certificate_without_completion(client, chef, auth_headers):
    response = client.get(f"/api/v1/microlearning/certificate/{chef.id}", headers=auth_headers(chef))
    assert response.status_code == 404
