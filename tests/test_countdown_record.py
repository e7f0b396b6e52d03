import unittest

from tutordesk.core.entities import CountdownRecord, compute_seconds_left
from tutordesk.core.enums import DeleteScope, DEFAULT_MESSAGE
from tutordesk.core.exceptions import ValidationError

from fakes import BASE_MS


class TestCountdownRecord(unittest.TestCase):
    def test_seconds_left_rounds_up_and_never_goes_negative(self) -> None:
        self.assertEqual(compute_seconds_left(BASE_MS + 5000, BASE_MS), 5)
        self.assertEqual(compute_seconds_left(BASE_MS + 4001, BASE_MS), 5)
        self.assertEqual(compute_seconds_left(BASE_MS + 1, BASE_MS), 1)
        self.assertEqual(compute_seconds_left(BASE_MS, BASE_MS), 0)
        self.assertEqual(compute_seconds_left(BASE_MS - 9000, BASE_MS), 0)
        self.assertEqual(compute_seconds_left(None, BASE_MS), 0)

    def test_persisted_shape_omits_runtime_fields(self) -> None:
        record = CountdownRecord.pending("c1", DeleteScope.SERIES, "Deleting Math", BASE_MS).with_error("boom")
        self.assertEqual(
            record.to_dict(),
            {
                "active": True,
                "targetId": "c1",
                "scope": "series",
                "message": "Deleting Math",
                "endsAtEpochMs": BASE_MS,
            },
        )

    def test_from_dict_accepts_valid_record(self) -> None:
        record = CountdownRecord.from_dict(
            {"active": True, "targetId": "c1", "scope": "single", "endsAtEpochMs": BASE_MS}
        )
        self.assertTrue(record.active)
        self.assertEqual(record.target_id, "c1")
        self.assertIs(record.scope, DeleteScope.SINGLE)
        self.assertEqual(record.message, DEFAULT_MESSAGE)
        self.assertEqual(record.ends_at_ms, BASE_MS)
        self.assertEqual(record.error, "")

    def test_from_dict_rejects_invalid_records(self) -> None:
        valid = {"active": True, "targetId": "c1", "scope": "single", "endsAtEpochMs": BASE_MS}
        broken = [
            None,
            [],
            "text",
            dict(valid, active=False),
            dict(valid, targetId=""),
            dict(valid, targetId=None),
            dict(valid, scope="everything"),
            dict(valid, scope=None),
            dict(valid, endsAtEpochMs=None),
            dict(valid, endsAtEpochMs="soon"),
            dict(valid, endsAtEpochMs=0),
            dict(valid, endsAtEpochMs=True),
        ]
        for payload in broken:
            with self.subTest(payload=payload):
                with self.assertRaises(ValidationError):
                    CountdownRecord.from_dict(payload)

    def test_same_cycle_compares_target_scope_and_deadline(self) -> None:
        a = CountdownRecord.pending("c1", DeleteScope.SINGLE, None, BASE_MS)
        self.assertTrue(a.same_cycle(a.with_error("x")))
        self.assertFalse(a.same_cycle(CountdownRecord.pending("c1", DeleteScope.SINGLE, None, BASE_MS + 1)))
        self.assertFalse(a.same_cycle(CountdownRecord.pending("c2", DeleteScope.SINGLE, None, BASE_MS)))
        self.assertFalse(a.same_cycle(CountdownRecord.inactive()))


if __name__ == "__main__":
    unittest.main(verbosity=2)
