"""Authentication dependency, verifier adapter and API contract tests."""

from __future__ import annotations

from datetime import UTC, datetime
import os
import sys
import types
import unittest
from typing import Any
from unittest.mock import patch

from fastapi import Request
from fastapi.testclient import TestClient

from blog_api.adapters.auth.base import AuthVerificationError
from blog_api.adapters.auth.firebase_auth import FirebaseTokenVerifier, principal_from_claims
from blog_api.adapters.auth.mock_auth import MockTokenVerifier
from blog_api.core.config import Settings, get_settings
from blog_api.main import create_app
from blog_api.routes.dependencies import get_article_service, get_token_verifier
from blog_api.schemas.article import Article

MEDIA_TYPE = "application/vnd.blog.v1"


class _CapturingArticleService:
    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    def create_article(self, *, owner_id: str, payload: Any) -> Article:
        self.calls.append((owner_id, payload))
        now = datetime.now(UTC)
        return Article(id="article-1", title="t", body="b", created_at=now, updated_at=now)


class _SettingsEnvCase(unittest.TestCase):
    _env_keys = (
        "BLOG_AUTH_PROVIDER",
        "BLOG_FIREBASE_PROJECT_ID",
        "BLOG_FIREBASE_AUDIENCE",
        "BLOG_REVOKED_USER_IDS",
    )

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env_keys}
        os.environ["BLOG_AUTH_PROVIDER"] = "mock"
        os.environ["BLOG_FIREBASE_PROJECT_ID"] = "test-project"
        os.environ["BLOG_FIREBASE_AUDIENCE"] = "test-audience"
        os.environ.pop("BLOG_REVOKED_USER_IDS", None)
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


class AuthApiTests(_SettingsEnvCase):
    def _seed_article(self, client: TestClient) -> str:
        response = client.post(
            "/api/articles",
            headers={"Authorization": "Bearer test:owner", "Accept": MEDIA_TYPE},
            json={"article": {"title": "Seed", "body": "Seed body"}},
        )
        self.assertEqual(response.status_code, 201)
        return response.json()["id"]

    def test_every_operation_without_credentials_returns_401_and_no_side_effect(self) -> None:
        app = create_app()
        client = TestClient(app)
        article_id = self._seed_article(client)
        writes_before = app.state.store.article_write_count

        requests = (
            ("GET", "/api/articles", None),
            ("GET", f"/api/articles/{article_id}", None),
            ("POST", "/api/articles", {"article": {"title": "T", "body": "B"}}),
            ("PATCH", f"/api/articles/{article_id}", {"article": {"title": "Changed"}}),
            ("DELETE", f"/api/articles/{article_id}", None),
        )
        header_sets = (
            {},
            {"Accept": MEDIA_TYPE},
            {"Accept": MEDIA_TYPE, "Authorization": "Bearer not-a-valid-token"},
            {"Accept": MEDIA_TYPE, "Authorization": "Basic dXNlcjpwYXNz"},
            {"Accept": MEDIA_TYPE, "Authorization": "Bearer test:"},
        )
        for method, url, body in requests:
            for headers in header_sets:
                with self.subTest(method=method, url=url, headers=headers):
                    response = client.request(method, url, headers=headers, json=body)
                    self.assertEqual(response.status_code, 401)
                    self.assertEqual(response.json()["code"], "UNAUTHORIZED")

        self.assertEqual(app.state.store.article_write_count, writes_before)
        self.assertEqual(app.state.store.count_articles(), 1)

    def test_unauthenticated_request_to_missing_article_is_401_not_404(self) -> None:
        app = create_app()
        client = TestClient(app)

        response = client.get("/api/articles/does-not-exist", headers={"Accept": MEDIA_TYPE})

        self.assertEqual(response.status_code, 401)

    def test_unauthenticated_invalid_update_is_401_not_422(self) -> None:
        app = create_app()
        client = TestClient(app)
        article_id = self._seed_article(client)

        response = client.patch(
            f"/api/articles/{article_id}",
            headers={"Accept": MEDIA_TYPE},
            json={"article": {"title": ""}},
        )

        self.assertEqual(response.status_code, 401)

    def test_revoked_principal_is_rejected(self) -> None:
        os.environ["BLOG_REVOKED_USER_IDS"] = '["gone"]'
        get_settings.cache_clear()
        app = create_app()
        client = TestClient(app)

        response = client.get("/api/articles", headers={"Authorization": "Bearer test:gone"})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], "Bearer token principal is no longer active")

    def test_valid_bearer_token_resolves_user_id_for_downstream_handler(self) -> None:
        app = create_app()
        client = TestClient(app)

        capturing_service = _CapturingArticleService()
        app.dependency_overrides[get_article_service] = lambda: capturing_service

        response = client.post(
            "/api/articles",
            headers={"Authorization": "Bearer test:user-123", "Accept": MEDIA_TYPE},
            json={"article": {"title": "Owned", "body": "Owned body"}},
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(len(capturing_service.calls), 1)
        self.assertEqual(capturing_service.calls[0][0], "user-123")
        self.assertEqual(capturing_service.calls[0][1], {"article": {"title": "Owned", "body": "Owned body"}})

    def test_auth_principal_is_attached_to_request_state(self) -> None:
        app = create_app()
        client = TestClient(app)

        capturing_service = _CapturingArticleService()
        observed_user_id: dict[str, str] = {}

        def _override_article_service(request: Request) -> _CapturingArticleService:
            observed_user_id["value"] = request.state.auth_principal.user_id
            return capturing_service

        app.dependency_overrides[get_article_service] = _override_article_service

        response = client.post(
            "/api/articles",
            headers={"Authorization": "Bearer test:user-state"},
            json={"article": {"title": "State", "body": "State body"}},
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(observed_user_id["value"], "user-state")

    def test_auth_logs_use_hashed_identifiers(self) -> None:
        app = create_app()
        client = TestClient(app)

        with self.assertLogs("blog_api.routes.dependencies", level="INFO") as captured:
            client.get(
                "/api/articles",
                headers={"Authorization": "Bearer test:very-private-user", "X-Correlation-Id": "corr-42"},
            )

        joined = "\n".join(captured.output)
        self.assertIn("auth.accepted", joined)
        self.assertNotIn("very-private-user", joined)
        self.assertNotIn("corr-42", joined)

    def test_token_verifier_override_is_used(self) -> None:
        app = create_app()
        client = TestClient(app)

        class _RejectAll(MockTokenVerifier):
            def verify_token(self, token: str):
                raise AuthVerificationError("Token revoked upstream")

        app.dependency_overrides[get_token_verifier] = lambda: _RejectAll()

        response = client.get("/api/articles", headers={"Authorization": "Bearer test:user-1"})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"code": "UNAUTHORIZED", "message": "Token revoked upstream"})

    def test_settings_aware_verifier_override_applies_to_malformed_bodies(self) -> None:
        app = create_app()
        client = TestClient(app)
        seen: list[Settings] = []

        class _RejectAll(MockTokenVerifier):
            def verify_token(self, token: str):
                raise AuthVerificationError("Token revoked upstream")

        def _verifier(settings: Settings) -> MockTokenVerifier:
            seen.append(settings)
            return _RejectAll()

        app.dependency_overrides[get_token_verifier] = _verifier

        response = client.post(
            "/api/articles",
            headers={
                "Authorization": "Bearer test:user-1",
                "Accept": MEDIA_TYPE,
                "Content-Type": "application/json",
            },
            content=b'{"article": ',
        )

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"code": "UNAUTHORIZED", "message": "Token revoked upstream"})
        self.assertTrue(seen)
        self.assertIsInstance(seen[0], Settings)

    def test_settings_override_drives_version_check_for_malformed_bodies(self) -> None:
        app = create_app()
        client = TestClient(app)
        app.dependency_overrides[get_settings] = lambda: Settings(auth_provider="mock", api_version="v2")

        response = client.post(
            "/api/articles",
            headers={
                "Authorization": "Bearer test:user-1",
                "Accept": MEDIA_TYPE,
                "Content-Type": "application/json",
            },
            content=b'{"article": ',
        )

        self.assertEqual(response.status_code, 406)
        self.assertEqual(response.json()["details"]["supported"], "application/vnd.blog.v2")


class ApiVersionApiTests(_SettingsEnvCase):
    def test_vendor_media_type_and_defaults_are_accepted(self) -> None:
        app = create_app()
        client = TestClient(app)

        for accept in (MEDIA_TYPE, f"{MEDIA_TYPE}+json", "*/*", "application/json", None):
            headers = {"Authorization": "Bearer test:user-1"}
            if accept is not None:
                headers["Accept"] = accept
            with self.subTest(accept=accept):
                self.assertEqual(client.get("/api/articles", headers=headers).status_code, 200)

    def test_unknown_vendor_version_is_406_after_authentication(self) -> None:
        app = create_app()
        client = TestClient(app)

        authenticated = client.get(
            "/api/articles",
            headers={"Authorization": "Bearer test:user-1", "Accept": "application/vnd.blog.v2"},
        )
        anonymous = client.get("/api/articles", headers={"Accept": "application/vnd.blog.v2"})

        self.assertEqual(authenticated.status_code, 406)
        self.assertEqual(authenticated.json()["code"], "UNSUPPORTED_API_VERSION")
        self.assertEqual(authenticated.json()["details"]["supported"], MEDIA_TYPE)
        self.assertEqual(anonymous.status_code, 401)

    def test_unknown_version_blocks_writes(self) -> None:
        app = create_app()
        client = TestClient(app)

        response = client.post(
            "/api/articles",
            headers={"Authorization": "Bearer test:user-1", "Accept": "application/vnd.blog.v9"},
            json={"article": {"title": "T", "body": "B"}},
        )

        self.assertEqual(response.status_code, 406)
        self.assertEqual(app.state.store.count_articles(), 0)


class OpenApiContractTests(_SettingsEnvCase):
    def test_openapi_documents_contract_response_codes(self) -> None:
        app = create_app()
        client = TestClient(app)

        response = client.get("/openapi.json")
        self.assertEqual(response.status_code, 200)
        document = response.json()
        paths = document["paths"]

        collection = paths["/api/articles"]
        item = paths["/api/articles/{articleId}"]
        self.assertEqual(set(collection["get"]["responses"].keys()), {"200", "401", "406"})
        self.assertEqual(set(collection["post"]["responses"].keys()), {"201", "401", "406", "422"})
        self.assertEqual(set(item["get"]["responses"].keys()), {"200", "401", "404", "406"})
        self.assertEqual(set(item["patch"]["responses"].keys()), {"200", "401", "404", "406", "422"})
        self.assertEqual(set(item["delete"]["responses"].keys()), {"204", "401", "404", "406"})
        self.assertNotIn("403", item["get"]["responses"])

        for method in ("get", "patch", "delete"):
            not_found_content = item[method]["responses"]["404"]["content"]
            schema = next(iter(not_found_content.values()))["schema"]
            self.assertEqual(schema["$ref"], "#/components/schemas/NoLeakNotFoundError")

        for operation in (collection["post"], item["patch"]):
            request_schema = operation["requestBody"]["content"]["application/json"]["schema"]
            self.assertEqual(request_schema["$ref"], "#/components/schemas/ArticleWriteRequest")

        schemas = document["components"]["schemas"]
        self.assertIn("article", schemas["ArticleWriteRequest"]["properties"])
        self.assertIn("ArticleAttributes", schemas)
        self.assertNotIn("owner_id", schemas["Article"]["properties"])


class AuthAdapterTests(unittest.TestCase):
    def test_mock_verifier_accepts_test_tokens(self) -> None:
        principal = MockTokenVerifier().verify_token("test:user-9")
        self.assertEqual(principal.user_id, "user-9")

    def test_mock_verifier_rejects_malformed_tokens(self) -> None:
        verifier = MockTokenVerifier()
        for token in ("", "user-9", "prod:user-9", "test:", "test:  ", "test:user:extra"):
            with self.subTest(token=token):
                with self.assertRaises(AuthVerificationError):
                    verifier.verify_token(token)

    def test_mock_verifier_rejects_revoked_principals(self) -> None:
        verifier = MockTokenVerifier(revoked_user_ids=frozenset({"gone"}))
        with self.assertRaises(AuthVerificationError):
            verifier.verify_token("test:gone")

    def test_token_verifier_follows_configured_provider(self) -> None:
        mock_settings = Settings(auth_provider="mock")
        firebase_settings = Settings(auth_provider="firebase", firebase_project_id="proj")

        self.assertIsInstance(get_token_verifier(mock_settings), MockTokenVerifier)
        self.assertIsInstance(get_token_verifier(firebase_settings), FirebaseTokenVerifier)

    def test_firebase_claims_resolve_user_id(self) -> None:
        verifier = FirebaseTokenVerifier(project_id="proj", audience="proj")
        principal = verifier.principal_from_claims(
            {"uid": "firebase-user", "aud": "proj", "iss": "https://securetoken.google.com/proj"}
        )
        self.assertEqual(principal.user_id, "firebase-user")

    def test_firebase_claims_with_wrong_audience_or_no_subject_are_rejected(self) -> None:
        verifier = FirebaseTokenVerifier(project_id="proj", audience="proj")
        for claims in (
            {"uid": "u", "aud": "other", "iss": "https://securetoken.google.com/proj"},
            {"aud": "proj", "iss": "https://securetoken.google.com/proj"},
        ):
            with self.subTest(claims=claims):
                with self.assertRaises(AuthVerificationError):
                    verifier.principal_from_claims(claims)

    def test_firebase_issuer_must_match_project_exactly(self) -> None:
        for issuer in ("https://evil.example/proj", "https://securetoken.google.com/proj-other", None):
            with self.subTest(issuer=issuer):
                with self.assertRaises(AuthVerificationError) as context:
                    principal_from_claims(
                        {"uid": "u", "aud": "proj", "iss": issuer},
                        project_id="proj",
                        audience=None,
                    )
                self.assertEqual(str(context.exception), "Invalid bearer token issuer")

    def test_firebase_verifier_rejects_revoked_principals(self) -> None:
        verifier = FirebaseTokenVerifier(project_id="proj", audience="proj", revoked_user_ids=frozenset({"gone"}))
        claims = {"aud": "proj", "iss": "https://securetoken.google.com/proj"}

        with self.assertRaises(AuthVerificationError):
            verifier.principal_from_claims({**claims, "uid": "gone"})
        self.assertEqual(verifier.principal_from_claims({**claims, "uid": "kept"}).user_id, "kept")

    def test_configured_revoked_ids_reach_firebase_verifier(self) -> None:
        settings = Settings(auth_provider="firebase", firebase_project_id="proj", revoked_user_ids=frozenset({"gone"}))
        verifier = get_token_verifier(settings)

        with self.assertRaises(AuthVerificationError):
            verifier.principal_from_claims({"uid": "gone", "aud": "proj", "iss": "https://securetoken.google.com/proj"})

    def test_firebase_verifier_falls_back_to_sub_claim(self) -> None:
        fake_auth = types.SimpleNamespace(verify_id_token=lambda token, check_revoked: {"sub": "from-sub", "aud": "a"})
        fake_admin = types.ModuleType("firebase_admin")
        fake_admin._apps = {"default": object()}
        fake_admin.auth = fake_auth

        with patch.dict(sys.modules, {"firebase_admin": fake_admin, "firebase_admin.auth": fake_auth}):
            principal = FirebaseTokenVerifier(project_id=None, audience="a").verify_token("token")

        self.assertEqual(principal.user_id, "from-sub")
