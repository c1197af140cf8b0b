API = "/api/v1"


def _create_exam(client, headers, letters=False, nome="Fisica", data="2026-01-10"):
    resp = client.post(f"{API}/exams", json={
        "nome": nome,
        "tipo": "completo",
        "data": data,
        "use_letter_grades": letters,
    }, headers=headers)
    assert resp.status_code == 201
    return resp.json()


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


def test_write_requires_token(client):
    resp = client.post(f"{API}/students", json={"matricola": "M1", "nome": "Marco", "cognome": "Rossi"})
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "AUTH_FAILED"


def test_write_requires_admin(client, viewer_headers):
    resp = client.post(
        f"{API}/students",
        json={"matricola": "M1", "nome": "Marco", "cognome": "Rossi"},
        headers=viewer_headers,
    )
    assert resp.status_code == 403


def test_invalid_token_rejected(client):
    resp = client.post(f"{API}/exams", json={}, headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401


def test_reads_are_public(client):
    assert client.get(f"{API}/students").json() == []
    assert client.get(f"{API}/analytics/rankings/exams").json() == []


def test_student_crud_and_duplicate(client, admin_headers):
    payload = {"matricola": "M1", "nome": "Marco", "cognome": "Rossi"}
    created = client.post(f"{API}/students", json=payload, headers=admin_headers).json()

    dup = client.post(f"{API}/students", json=payload, headers=admin_headers)
    assert dup.status_code == 422
    assert dup.json()["error"]["code"] == "VALIDATION_ERROR"

    resp = client.patch(f"{API}/students/{created['id']}", json={"nome": "Marcello"}, headers=admin_headers)
    assert resp.json()["nome"] == "Marcello"

    assert client.delete(f"{API}/students/{created['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"{API}/students/{created['id']}").status_code == 404


def test_letter_grade_on_numeric_exam_is_422(client, admin_headers):
    exam = _create_exam(client, admin_headers, letters=False)
    resp = client.post(f"{API}/grades", json={
        "matricola": "M1",
        "exam_id": exam["id"],
        "voto_lettera": "A",
    }, headers=admin_headers)
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


def test_grade_response_shape(client, admin_headers):
    exam = _create_exam(client, admin_headers)
    resp = client.post(f"{API}/grades", json={
        "matricola": "M1",
        "exam_id": exam["id"],
        "voto_numerico": 30,
        "con_lode": True,
    }, headers=admin_headers)
    assert resp.status_code == 201
    body = resp.json()
    assert body["display"] == "30L"
    assert body["passed"] is True
    assert body["voto_lettera"] is None

    listed = client.get(f"{API}/grades", params={"exam_id": exam["id"]}).json()
    assert [g["id"] for g in listed] == [body["id"]]


def test_delete_student_cascades_over_http(client, admin_headers):
    exam = _create_exam(client, admin_headers)
    student = client.post(
        f"{API}/students",
        json={"matricola": "M1", "nome": "Marco", "cognome": "Rossi"},
        headers=admin_headers,
    ).json()
    client.post(f"{API}/grades", json={"matricola": "M1", "exam_id": exam["id"], "voto_numerico": 24},
                headers=admin_headers)

    client.delete(f"{API}/students/{student['id']}", headers=admin_headers)

    assert client.get(f"{API}/grades", params={"matricola": "M1"}).json() == []


def test_grade_csv_import_endpoint(client, admin_headers):
    exam = _create_exam(client, admin_headers)
    resp = client.post(f"{API}/grades/import", json={
        "csv_data": "M1,25\nM2,xx\nM3,15",
        "exam_id": exam["id"],
        "has_header_row": False,
    }, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["imported"] == 2
    assert resp.json()["errors"] == 1


def test_dashboard_and_rankings(client, admin_headers):
    fisica = _create_exam(client, admin_headers, nome="Fisica", data="2026-01-10")
    inglese = _create_exam(client, admin_headers, letters=True, nome="Inglese", data="2026-02-10")
    client.post(f"{API}/grades/import", json={"csv_data": "M1,25\nM2,15", "exam_id": fisica["id"]},
                headers=admin_headers)
    client.post(f"{API}/grades/import", json={"csv_data": "M1,B\nM2,F", "exam_id": inglese["id"]},
                headers=admin_headers)

    dashboard = client.get(f"{API}/analytics/dashboard", params={"exam_id": fisica["id"]}).json()
    assert dashboard["counts"]["grades"] == 2
    assert dashboard["stats"]["average"] == 25.0
    assert dashboard["stats"]["passing_percentage"] == 50.0

    students = client.get(f"{API}/analytics/rankings/students").json()
    assert [s["matricola"] for s in students] == ["M1"]
    assert students[0]["average"] == 26.5
    assert students[0]["nome"] == "Non registrato"

    by_exam = client.get(f"{API}/analytics/rankings/students", params={"exam_id": fisica["id"]}).json()
    assert [(s["matricola"], s["average"]) for s in by_exam] == [("M1", 25.0), ("M2", 15.0)]

    exams = client.get(f"{API}/analytics/rankings/exams").json()
    assert [e["nome"] for e in exams] == ["Inglese", "Fisica"]

    stats = client.get(f"{API}/exams/{fisica['id']}/stats").json()
    assert stats["grade_count"] == 2


def test_exam_stats_unknown_exam_is_404(client):
    resp = client.get(f"{API}/exams/missing/stats")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


def test_grade_template_download(client, admin_headers):
    exam = _create_exam(client, admin_headers)
    resp = client.get(f"{API}/exams/{exam['id']}/template", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )


def test_openapi_documents_error_envelope(client):
    schema = client.get(f"{API}/openapi.json").json()
    assert "ErrorResponse" in schema["components"]["schemas"]
