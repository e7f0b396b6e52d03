import unittest

from fastapi.testclient import TestClient

from tutordesk.api import ClassesRestAPI
from tutordesk.core.entities import ScheduledClass


class TestClassesRestAPI(unittest.TestCase):
    def setUp(self) -> None:
        self.api = ClassesRestAPI()
        self.client = TestClient(self.api.app)
        self.repository = self.api.repository
        for week in range(3):
            self.repository.save(ScheduledClass(
                "Algebra", "t1", "s1", series_id="series-1", class_id=f"alg-{week}",
            ))
        self.repository.save(ScheduledClass("Physics", "t1", "s2", class_id="phy-0"))

    def test_health(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")

    def test_create_and_fetch_class(self) -> None:
        response = self.client.post("/classes", json={
            "subject": "Chemistry", "teacher_id": "t2", "student_id": "s3",
        })
        self.assertEqual(response.status_code, 201)
        class_id = response.json()["id"]

        fetched = self.client.get(f"/classes/{class_id}")
        self.assertEqual(fetched.status_code, 200)
        self.assertEqual(fetched.json()["subject"], "Chemistry")

    def test_list_by_series(self) -> None:
        response = self.client.get("/classes", params={"series_id": "series-1"})
        self.assertEqual(len(response.json()), 3)
        self.assertEqual(len(self.client.get("/classes").json()), 4)

    def test_delete_single_occurrence(self) -> None:
        response = self.client.delete("/classes/alg-0", params={"scope": "single"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Class deleted (single instance)")
        self.assertIsNone(self.repository.find_by_id("alg-0"))
        self.assertEqual(self.repository.count(), 3)

    def test_delete_whole_series(self) -> None:
        response = self.client.delete("/classes/alg-1", params={"scope": "series"})
        body = response.json()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(body["count"], 3)
        self.assertEqual(body["message"], "Deleted series (3 classes)")
        self.assertEqual(self.repository.count(), 1)

    def test_delete_type_alias(self) -> None:
        response = self.client.delete("/classes/alg-2", params={"deleteType": "series"})
        self.assertEqual(response.json()["count"], 3)

    def test_series_scope_on_single_class_deletes_only_it(self) -> None:
        response = self.client.delete("/classes/phy-0", params={"scope": "series"})
        self.assertEqual(response.json()["count"], 1)
        self.assertEqual(self.repository.count(), 3)

    def test_missing_class_returns_not_found_message(self) -> None:
        response = self.client.delete("/classes/nope")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"message": "Class not found"})

        self.client.delete("/classes/phy-0")
        again = self.client.delete("/classes/phy-0")
        self.assertEqual(again.status_code, 404)

    def test_invalid_scope(self) -> None:
        response = self.client.delete("/classes/alg-0", params={"scope": "everything"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Invalid scope. Use single | series")
        self.assertIsNotNone(self.repository.find_by_id("alg-0"))


if __name__ == "__main__":
    unittest.main(verbosity=2)
