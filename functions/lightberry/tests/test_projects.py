import threading
import unittest
from unittest.mock import MagicMock

from lightberry.db import InMemoryProjectStore, ProjectRecord
from lightberry.fallback import OperationOutcome
from lightberry.projects import (
    STORE_UNAVAILABLE,
    DataMode,
    ProjectService,
    ProjectValidationError,
    clean_project_fields,
)
from lightberry.static_projects import static_projects

VALID_FIELDS = {
    "title": "  Signal Garden ",
    "description": "Generative plant growth driven by radio noise.",
    "visit_url": " https://example.com/signal-garden ",
}


class CleanProjectFieldsTests(unittest.TestCase):
    def test_trims_and_defaults_image_url(self):
        cleaned = clean_project_fields(VALID_FIELDS)
        self.assertEqual(cleaned["title"], "Signal Garden")
        self.assertEqual(cleaned["visit_url"], "https://example.com/signal-garden")
        self.assertEqual(cleaned["image_url"], "")

    def test_missing_required_fields(self):
        with self.assertRaises(ProjectValidationError) as ctx:
            clean_project_fields({"title": "x", "description": "   "})
        self.assertEqual(ctx.exception.fields, ["description", "visit_url"])

    def test_partial_rejects_blanked_required_field(self):
        self.assertEqual(
            clean_project_fields({"image_url": " /a.png "}, partial=True),
            {"image_url": "/a.png"},
        )
        with self.assertRaises(ProjectValidationError):
            clean_project_fields({"title": ""}, partial=True)


class StaticModeTests(unittest.TestCase):
    def setUp(self):
        self.local = InMemoryProjectStore(seed=static_projects())
        self.service = ProjectService(local=self.local)

    def test_list_returns_static_projects(self):
        result = self.service.list_projects()
        self.assertEqual(result.outcome, OperationOutcome.NOT_CONFIGURED)
        self.assertTrue(result.is_using_fallback)
        self.assertIsNone(result.error)
        self.assertEqual(len(result.data), 5)
        self.assertEqual(result.data[0].title, "Chaos Calculator")
        self.assertEqual(self.service.data_mode(result), DataMode.DEMO)

    def test_writes_go_to_local_store(self):
        created = self.service.create_project(VALID_FIELDS)
        self.assertTrue(created.ok)
        self.assertEqual(self.local.count_projects(), 6)

        deleted = self.service.delete_project(created.data.id)
        self.assertTrue(deleted.data)
        self.assertEqual(self.local.count_projects(), 5)

    def test_get_unknown_project(self):
        result = self.service.get_project("missing")
        self.assertEqual(result.outcome, OperationOutcome.NOT_FOUND)
        self.assertIsNone(result.data)


class RemoteModeTests(unittest.TestCase):
    def setUp(self):
        self.local = InMemoryProjectStore(seed=static_projects())
        self.remote = MagicMock()
        self.service = ProjectService(local=self.local, remote=self.remote, timeout=1)

    def test_live_list_is_cached_for_offline_fallback(self):
        live = [ProjectRecord(id="r1", title="Remote", description="d", visit_url="u")]
        self.remote.list_projects.return_value = live

        result = self.service.list_projects()
        self.assertIs(result.data, live)
        self.assertEqual(self.service.data_mode(result), DataMode.LIVE)

        self.remote.list_projects.side_effect = RuntimeError("down")
        offline = self.service.list_projects()
        self.assertTrue(offline.is_using_fallback)
        self.assertEqual(offline.error, "down")
        self.assertEqual([p.id for p in offline.data], ["r1"])
        self.assertEqual(self.service.data_mode(offline), DataMode.OFFLINE)

    def test_failure_without_cache_uses_static_projects(self):
        self.remote.list_projects.side_effect = ConnectionError("refused")
        result = self.service.list_projects()
        self.assertEqual(result.outcome, OperationOutcome.ERRORED)
        self.assertEqual(len(result.data), 5)

    def test_timeout_uses_fallback(self):
        release = threading.Event()
        self.addCleanup(release.set)
        self.remote.list_projects.side_effect = lambda: release.wait(5)
        self.service.timeout = 0.05

        result = self.service.list_projects()
        self.assertEqual(result.outcome, OperationOutcome.TIMED_OUT)
        self.assertIn("timed out", result.error)
        self.assertEqual(len(result.data), 5)

    def test_create_rejects_incomplete_input_before_remote_call(self):
        for missing in ("title", "description", "visit_url"):
            fields = dict(VALID_FIELDS)
            fields[missing] = "  "
            with self.assertRaises(ProjectValidationError):
                self.service.create_project(fields)
        self.remote.create_project.assert_not_called()

    def test_get_falls_back_to_local_copy_on_error(self):
        self.remote.get_project.side_effect = RuntimeError("down")
        result = self.service.get_project("2")
        self.assertEqual(result.outcome, OperationOutcome.ERRORED)
        self.assertEqual(result.data.title, "Quantum Todo")


class RemoteInMemoryStoreTests(unittest.TestCase):
    def setUp(self):
        self.remote = InMemoryProjectStore()
        self.service = ProjectService(
            local=InMemoryProjectStore(seed=static_projects()), remote=self.remote
        )

    def test_delete_unknown_reports_not_found(self):
        result = self.service.delete_project("does-not-exist")
        self.assertEqual(result.outcome, OperationOutcome.NOT_FOUND)
        self.assertFalse(result.data)

    def test_update_keeps_id_and_created_at(self):
        created = self.service.create_project(VALID_FIELDS).data
        updated = self.service.update_project(
            created.id, {"title": "Renamed", "image_url": "/img.png"}
        ).data
        self.assertEqual(updated.id, created.id)
        self.assertEqual(updated.created_at, created.created_at)
        self.assertEqual(updated.title, "Renamed")
        self.assertEqual(updated.description, created.description)

    def test_update_requires_id(self):
        with self.assertRaises(ProjectValidationError):
            self.service.update_project("", {"title": "x"})


class UnbuildableStoreTests(unittest.TestCase):
    def setUp(self):
        self.local = InMemoryProjectStore(seed=static_projects())
        self.service = ProjectService(local=self.local, remote=None, configured=True)

    def test_reads_report_error_and_offline_mode(self):
        result = self.service.list_projects()
        self.assertEqual(result.outcome, OperationOutcome.ERRORED)
        self.assertEqual(result.error, STORE_UNAVAILABLE)
        self.assertEqual(len(result.data), 5)
        self.assertEqual(self.service.data_mode(result), DataMode.OFFLINE)

    def test_writes_fail_without_touching_local_store(self):
        created = self.service.create_project(VALID_FIELDS)
        self.assertEqual(created.outcome, OperationOutcome.ERRORED)
        self.assertIsNone(created.data)

        deleted = self.service.delete_project("1")
        self.assertFalse(deleted.ok)
        self.assertEqual(self.local.count_projects(), 5)


class InMemoryProjectStoreTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryProjectStore(seed=static_projects())

    def test_concurrent_creates_are_all_kept(self):
        def create_many():
            for _ in range(50):
                self.store.create_project(clean_project_fields(VALID_FIELDS))

        threads = [threading.Thread(target=create_many) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(self.store.count_projects(), 5 + 8 * 50)

    def test_update_swaps_in_a_new_record(self):
        before = self.store.projects["2"]
        updated = self.store.update_project("2", {"title": "Renamed", "id": "other"})

        self.assertEqual(updated.id, "2")
        self.assertEqual(updated.title, "Renamed")
        self.assertEqual(before.title, "Quantum Todo")
        self.assertIsNot(self.store.projects["2"], before)
        self.assertEqual(self.store.get_project("2").title, "Renamed")


if __name__ == "__main__":
    unittest.main()
