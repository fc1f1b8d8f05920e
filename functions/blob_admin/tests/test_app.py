import unittest

from fastapi.testclient import TestClient

from blob_admin.app import create_app
from blob_admin.dependencies import get_blob_store, get_session_store
from blob_admin.sessions import InMemorySessionStore
from blob_admin.storage import InMemoryBlobStore

PREFIX = "/.netlify/functions"


class BackendApiTests(unittest.TestCase):
    def setUp(self):
        self.sessions = InMemorySessionStore()
        self.blobs = InMemoryBlobStore()
        app = create_app()
        app.dependency_overrides[get_session_store] = lambda: self.sessions
        app.dependency_overrides[get_blob_store] = lambda: self.blobs
        self.client = TestClient(app)
        self.token = self.sessions.create(
            {
                "id": "u-1",
                "username": "admin",
                "role": "admin",
                "password_hash": "secret",
            }
        )
        self.auth = {"Authorization": f"Bearer {self.token}"}

    def test_me_returns_public_fields_only(self):
        response = self.client.get(f"{PREFIX}/me", headers=self.auth)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {"user": {"id": "u-1", "username": "admin", "role": "admin"}},
        )
        self.assertNotIn("password_hash", response.text)

    def test_me_accepts_session_cookie(self):
        response = self.client.get(
            f"{PREFIX}/me", headers={"Cookie": f"session={self.token}"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["username"], "admin")

    def test_me_unauthenticated(self):
        response = self.client.get(f"{PREFIX}/me")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Unauthorized"})

    def test_me_unknown_token(self):
        response = self.client.get(
            f"{PREFIX}/me", headers={"Authorization": "Bearer nope"}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Unauthorized"})

    def test_me_session_without_username_is_unauthorized(self):
        token = self.sessions.create({"id": "u-2"})
        response = self.client.get(
            f"{PREFIX}/me", headers={"Authorization": f"Bearer {token}"}
        )
        self.assertEqual(response.status_code, 401)

    def test_me_rejects_other_methods_regardless_of_auth(self):
        for headers in ({}, self.auth):
            response = self.client.post(f"{PREFIX}/me", headers=headers)
            self.assertEqual(response.status_code, 405)
            self.assertEqual(response.text, "Method Not Allowed")
        for method in ("PUT", "PATCH", "DELETE", "OPTIONS"):
            response = self.client.request(method, f"{PREFIX}/me", headers=self.auth)
            self.assertEqual(response.status_code, 405, method)
            self.assertEqual(response.text, "Method Not Allowed")
            self.assertTrue(response.headers["content-type"].startswith("text/plain"))
        response = self.client.head(f"{PREFIX}/me", headers=self.auth)
        self.assertEqual(response.status_code, 405)
        self.assertTrue(response.headers["content-type"].startswith("text/plain"))

    def test_upload_blobs_persists_snapshot(self):
        response = self.client.post(
            f"{PREFIX}/uploadBlobs",
            headers=self.auth,
            json={"storeName": "users", "key": "all_users", "data": [{"id": 1}]},
        )
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["message"], "Successfully uploaded all_users to users")
        self.assertTrue(payload["timestamp"].endswith("Z"))
        self.assertEqual(self.blobs.get_json("users", "all_users"), [{"id": 1}])
        self.assertIn("users/all_users.json", self.blobs.stored_objects)

    def test_upload_blobs_overwrites_previous_value(self):
        for data in ({"v": 1}, {"v": 2}):
            response = self.client.post(
                f"{PREFIX}/uploadBlobs",
                headers=self.auth,
                json={"storeName": "records", "key": "data", "data": data},
            )
            self.assertEqual(response.status_code, 200)
        self.assertEqual(self.blobs.get_json("records", "data"), {"v": 2})

    def test_upload_blobs_requires_auth(self):
        response = self.client.post(
            f"{PREFIX}/uploadBlobs",
            json={"storeName": "records", "key": "data", "data": {}},
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Unauthorized"})
        self.assertEqual(self.blobs.stored_objects, {})

    def test_upload_blobs_rejects_unknown_store_and_key(self):
        response = self.client.post(
            f"{PREFIX}/uploadBlobs",
            headers=self.auth,
            json={"storeName": "secrets", "key": "data", "data": {}},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("Unknown store", response.json()["error"])

        response = self.client.post(
            f"{PREFIX}/uploadBlobs",
            headers=self.auth,
            json={"storeName": "stats", "key": "data", "data": {}},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("Invalid key", response.json()["error"])
        self.assertEqual(self.blobs.stored_objects, {})

    def test_upload_blobs_missing_fields(self):
        response = self.client.post(
            f"{PREFIX}/uploadBlobs",
            headers=self.auth,
            json={"storeName": "records"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("Invalid request body", response.json()["error"])

    def test_upload_blobs_storage_failure(self):
        class BrokenStore:
            def put_json(self, store_name, key, payload):
                raise OSError("disk full")

        self.client.app.dependency_overrides[get_blob_store] = lambda: BrokenStore()
        response = self.client.post(
            f"{PREFIX}/uploadBlobs",
            headers=self.auth,
            json={"storeName": "records", "key": "data", "data": {}},
        )
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Failed to upload data"})

    def test_upload_blobs_rejects_get(self):
        response = self.client.get(f"{PREFIX}/uploadBlobs", headers=self.auth)
        self.assertEqual(response.status_code, 405)
        self.assertEqual(response.text, "Method Not Allowed")
        response = self.client.options(f"{PREFIX}/uploadBlobs")
        self.assertEqual(response.status_code, 405)
        self.assertEqual(response.text, "Method Not Allowed")

    def test_error_body_documented_in_openapi(self):
        schema = self.client.get("/openapi.json").json()
        for path, method, status in (
            ("/me", "get", "401"),
            ("/uploadBlobs", "post", "400"),
            ("/uploadBlobs", "post", "500"),
        ):
            response = schema["paths"][PREFIX + path][method]["responses"][status]
            ref = response["content"]["application/json"]["schema"]["$ref"]
            self.assertTrue(ref.endswith("/ErrorResponse"), ref)
        self.assertIn("error", schema["components"]["schemas"]["ErrorResponse"]["properties"])

if __name__ == "__main__":
    unittest.main()
