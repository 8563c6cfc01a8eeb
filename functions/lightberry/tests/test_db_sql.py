import unittest

from lightberry.db import ProjectNotFoundError, SqlProjectStore
from lightberry.static_projects import static_projects


class SqlProjectStoreTests(unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the hosted store logic.
    """

    def setUp(self):
        self.store = SqlProjectStore("sqlite+pysqlite:///:memory:")

    def _create(self, title="Neural Canvas"):
        return self.store.create_project(
            {
                "title": title,
                "description": "desc",
                "visit_url": "https://example.com/x",
            }
        )

    def test_create_and_get(self):
        created = self._create()
        self.assertTrue(created.id)
        self.assertEqual(created.image_url, "")
        self.assertIsNotNone(created.created_at)

        fetched = self.store.get_project(created.id)
        self.assertEqual(fetched.title, "Neural Canvas")
        self.assertEqual(fetched.created_at, created.created_at)

    def test_list_is_newest_first(self):
        for project in static_projects():
            self.store.insert_project(project)
        titles = [p.title for p in self.store.list_projects()]
        self.assertEqual(titles[0], "Chaos Calculator")
        self.assertEqual(titles[-1], "Neural Canvas")
        self.assertEqual(self.store.count_projects(), 5)

    def test_update_only_touches_editable_fields(self):
        created = self._create()
        updated = self.store.update_project(
            created.id, {"title": "Renamed", "id": "other", "created_at": 0}
        )
        self.assertEqual(updated.id, created.id)
        self.assertEqual(updated.title, "Renamed")
        self.assertEqual(updated.created_at, created.created_at)

    def test_delete(self):
        created = self._create()
        self.store.delete_project(created.id)
        self.assertEqual(self.store.count_projects(), 0)
        with self.assertRaises(ProjectNotFoundError):
            self.store.delete_project(created.id)

    def test_missing_project(self):
        with self.assertRaises(ProjectNotFoundError):
            self.store.get_project("missing")
        with self.assertRaises(ProjectNotFoundError):
            self.store.update_project("missing", {"title": "x"})

    def test_admin_users(self):
        self.assertIsNone(self.store.get_admin_user("admin@example.com"))
        saved = self.store.save_admin_user("Admin@Example.com", "hash-1")
        self.store.save_admin_user("admin@example.com", "hash-2")

        user = self.store.get_admin_user("admin@example.com")
        self.assertEqual(user.user_id, saved.user_id)
        self.assertEqual(user.password_hash, "hash-2")

    def test_ping(self):
        self.store.ping()


if __name__ == "__main__":
    unittest.main()
