"""
Unit tests for the in-memory contents connector.

These tests verify the fake contents API without external dependencies.
"""

import base64

from iconsync.connectors.test_connector import ContentsTestConnector, blob_sha
from iconsync.core.connector import ConnectorRequest


URL = "https://api.github.com/repos/test-owner/test-repo/contents/figma-icons-manifest.json"


def put(content, sha=None):
    body = {"message": "m", "content": base64.b64encode(content).decode("ascii")}
    if sha:
        body["sha"] = sha
    return ConnectorRequest(uri=URL, method="PUT", json_body=body)


class TestContentsTestConnector:
    """Tests for ContentsTestConnector."""

    def test_blob_sha_matches_git(self):
        """Same value as `git hash-object` for 'hello\\n'."""
        assert blob_sha(b"hello\n") == "ce013625030ba8dba906f756967f9e9ca394464a"

    def test_get_missing(self):
        response = ContentsTestConnector().fetch(ConnectorRequest(uri=URL))
        assert response.status_code == 404

    def test_get_existing(self):
        connector = ContentsTestConnector(files={"figma-icons-manifest.json": "{}"})

        response = connector.fetch(ConnectorRequest(uri=URL))

        assert response.status_code == 200
        assert response.payload["sha"] == blob_sha(b"{}")

    def test_create_then_update(self):
        connector = ContentsTestConnector()

        created = connector.fetch(put(b"one"))
        updated = connector.fetch(put(b"two", sha=blob_sha(b"one")))

        assert created.status_code == 201
        assert updated.status_code == 200
        assert connector.read_text("test-owner/test-repo", "figma-icons-manifest.json") == "two"
        assert connector.commit_count == 2

    def test_update_without_sha(self):
        connector = ContentsTestConnector(files={"figma-icons-manifest.json": "{}"})
        assert connector.fetch(put(b"new")).status_code == 422

    def test_update_with_stale_sha(self):
        connector = ContentsTestConnector(files={"figma-icons-manifest.json": "{}"})
        assert connector.fetch(put(b"new", sha=blob_sha(b"older"))).status_code == 409

    def test_branches_kept_apart(self):
        connector = ContentsTestConnector(files={"figma-icons-manifest.json": "{}"})
        body = {"message": "m", "content": base64.b64encode(b"icons").decode("ascii"), "branch": "icons"}

        created = connector.fetch(ConnectorRequest(uri=URL, method="PUT", json_body=body))

        assert created.status_code == 201
        assert created.payload["content"]["html_url"] == (
            "https://github.test/test-owner/test-repo/blob/icons/figma-icons-manifest.json"
        )
        assert connector.read_text("test-owner/test-repo", "figma-icons-manifest.json") == "{}"
        assert connector.read_text("test-owner/test-repo", "figma-icons-manifest.json", branch="icons") == "icons"

    def test_get_reads_ref(self):
        connector = ContentsTestConnector(files={"figma-icons-manifest.json": "{}"})

        assert connector.fetch(ConnectorRequest(uri=URL, params={"ref": "icons"})).status_code == 404
        assert connector.fetch(ConnectorRequest(uri=URL, params={"ref": "main"})).status_code == 200

    def test_simulated_timeout(self):
        response = ContentsTestConnector(simulate_timeout=True).fetch(ConnectorRequest(uri=URL))

        assert response.status_code == 0
        assert response.timed_out is True

    def test_request_history_and_reset(self):
        connector = ContentsTestConnector()
        connector.fetch(ConnectorRequest(uri=URL))
        connector.fetch(put(b"x"))

        assert [r.method for r in connector.request_history] == ["GET", "PUT"]

        connector.reset()

        assert connector.request_history == []
        assert connector.get_name() == "contents_test"
