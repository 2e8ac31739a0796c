def test_ready(client):
    res = client.get("/api/ready")
    assert res.status_code == 200
    assert res.json() == {"ok": True, "db_ok": True}
