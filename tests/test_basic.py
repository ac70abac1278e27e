URLS = [
    "/researcher",
    "/reviewer",
    "/coordinator",
    "/director",
    "/vice-president",
    "/account",
]


def test_url(client):
    for url in URLS:
        rv = client.get(url)
        assert rv.status_code == 401, "Fetching %s anonymously results in HTTP 401" % url


def test_metrics(client):
    rv = client.get("/metrics")
    assert rv.status_code == 200


def test_not_found(client):
    rv = client.get("/no-such-page")
    assert rv.status_code == 404
    assert rv.get_json()["error"] == "NotFound"


def test_security_headers(client):
    rv = client.get("/metrics")
    assert rv.headers["X-Frame-Options"] == "deny"
    assert rv.headers["X-Content-Type-Options"] == "nosniff"
