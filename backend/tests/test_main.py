import pytest
from fastapi.testclient import TestClient

from main import ASSET_CORS_HEADERS, create_app
from src.catalog import build_catalog_store
from src.config import Settings, SingletonPolicy
from src.resolver import Resolver

from conftest import MaxRandom


def make_client(settings: Settings, policy=SingletonPolicy.SUBSTITUTE) -> TestClient:
    resolver = Resolver(settings.protected_filenames, singleton_policy=policy, rng=MaxRandom())
    app = create_app(settings, store=build_catalog_store(settings), resolver=resolver)
    return TestClient(app)


@pytest.fixture
def client(site: Settings) -> TestClient:
    return make_client(site)


def assert_asset_redirect(response, location: str) -> None:
    assert response.status_code == 302
    assert response.headers["location"] == location
    for header, value in ASSET_CORS_HEADERS.items():
        assert response.headers[header] == value


def test_root_serves_index(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.text == "<h1>home</h1>"


def test_root_without_index_is_not_found(tmp_path) -> None:
    client = make_client(Settings(base_dir=str(tmp_path)))

    assert client.get("/").status_code == 404


def test_health_reports_catalog_sizes(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "publicFiles": 4, "assetFiles": 2}


def test_public_request_serves_substitute(client: TestClient) -> None:
    response = client.get("/public/img/a.png")

    assert response.status_code == 200
    assert response.content == b"B-PNG"


def test_public_protected_name_is_served_literally(client: TestClient) -> None:
    response = client.get("/public/index.html")

    assert response.status_code == 200
    assert response.text == "<h1>home</h1>"


def test_public_unknown_extension_is_not_found(client: TestClient) -> None:
    assert client.get("/public/missing.gif").status_code == 404


def test_asset_request_redirects_to_substitute(client: TestClient) -> None:
    response = client.get("/assets/x.jpg", follow_redirects=False)

    assert_asset_redirect(response, "https://cdn.example/y.jpg")


def test_asset_unknown_extension_is_not_found(client: TestClient) -> None:
    assert client.get("/assets/missing.gif", follow_redirects=False).status_code == 404


def test_fallback_redirects_remote_match(client: TestClient) -> None:
    response = client.get("/y.jpg", follow_redirects=False)

    assert_asset_redirect(response, "https://cdn.example/y.jpg")


def test_fallback_serves_local_match_without_substitution(client: TestClient) -> None:
    response = client.get("/somewhere/a.png")

    assert response.status_code == 200
    assert response.content == b"A-PNG"


def test_fallback_without_match_is_not_found(client: TestClient) -> None:
    assert client.get("/nope.txt").status_code == 404


def test_singleton_bucket_under_default_policy_serves_only_entry(client: TestClient) -> None:
    response = client.get("/public/other.txt")

    assert response.status_code == 200
    assert response.text == "notes"


def test_singleton_bucket_passthrough_serves_literal_file(site: Settings) -> None:
    client = make_client(site, policy=SingletonPolicy.PASSTHROUGH)

    assert client.get("/public/notes.txt").text == "notes"
    assert client.get("/public/other.txt").status_code == 404
    assert client.get("/public/a.png").content == b"B-PNG"


def test_empty_catalogs_still_serve_requests(tmp_path) -> None:
    client = make_client(Settings(base_dir=str(tmp_path)))

    assert client.get("/health").json()["publicFiles"] == 0
    assert client.get("/public/a.png").status_code == 404
    assert client.get("/assets/x.jpg", follow_redirects=False).status_code == 404


def test_create_app_scans_catalogs_from_environment(site: Settings, monkeypatch) -> None:
    monkeypatch.setenv("BASE_DIR", site.base_dir)

    client = TestClient(create_app())

    assert client.get("/health").json() == {"status": "ok", "publicFiles": 4, "assetFiles": 2}
