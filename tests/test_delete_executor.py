import unittest
from unittest.mock import MagicMock

import requests

from tutordesk.core.enums import DeleteOutcomeKind, DeleteScope
from tutordesk.core.exceptions import NetworkError
from tutordesk.core.interfaces import EndpointResponse
from tutordesk.services import DeleteExecutor, HttpDeleteEndpoint, RefreshBus

from fakes import FakeEndpoint


class TestClassification(unittest.TestCase):
    def test_status_codes_map_to_outcomes(self) -> None:
        cases = [
            (200, DeleteOutcomeKind.SUCCESS),
            (204, DeleteOutcomeKind.SUCCESS),
            (404, DeleteOutcomeKind.ALREADY_GONE),
            (400, DeleteOutcomeKind.FAILURE),
            (403, DeleteOutcomeKind.FAILURE),
            (500, DeleteOutcomeKind.FAILURE),
        ]
        for status_code, kind in cases:
            with self.subTest(status_code=status_code):
                outcome = DeleteExecutor.classify(EndpointResponse(status_code))
                self.assertIs(outcome.kind, kind)

    def test_failure_message_prefers_server_text(self) -> None:
        outcome = DeleteExecutor.classify(EndpointResponse(500, "Failed to delete class: db down"))
        self.assertEqual(outcome.message, "Failed to delete class: db down")
        self.assertEqual(outcome.status_code, 500)
        self.assertEqual(DeleteExecutor.classify(EndpointResponse(500)).message, "Failed to delete class")


class TestDeleteExecutor(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.bus = RefreshBus()
        self.refreshes = []
        self.bus.subscribe("list-view", lambda: self.refreshes.append(1))

    async def test_success_calls_once_and_refreshes_once(self) -> None:
        endpoint = FakeEndpoint(200)
        executor = DeleteExecutor(endpoint, self.bus)
        outcome = await executor.execute("c1", DeleteScope.SERIES)

        self.assertTrue(outcome.succeeded)
        self.assertEqual(endpoint.calls, [("c1", DeleteScope.SERIES)])
        self.assertEqual(len(self.refreshes), 1)

    async def test_not_found_refreshes_like_success(self) -> None:
        executor = DeleteExecutor(FakeEndpoint(404), self.bus)
        outcome = await executor.execute("c1", DeleteScope.SINGLE)
        self.assertIs(outcome.kind, DeleteOutcomeKind.ALREADY_GONE)
        self.assertTrue(outcome.succeeded)
        self.assertEqual(len(self.refreshes), 1)

    async def test_failure_does_not_refresh(self) -> None:
        executor = DeleteExecutor(FakeEndpoint(500, "nope"), self.bus)
        outcome = await executor.execute("c1", DeleteScope.SINGLE)
        self.assertIs(outcome.kind, DeleteOutcomeKind.FAILURE)
        self.assertEqual(outcome.message, "nope")
        self.assertEqual(self.refreshes, [])

    async def test_network_errors_become_failures(self) -> None:
        executor = DeleteExecutor(FakeEndpoint(raise_network_error=True), self.bus)
        outcome = await executor.execute("c1", DeleteScope.SINGLE)
        self.assertIs(outcome.kind, DeleteOutcomeKind.FAILURE)
        self.assertEqual(outcome.message, "Failed to delete class")

    async def test_unexpected_errors_never_escape(self) -> None:
        endpoint = FakeEndpoint()

        async def explode(target_id, scope):
            raise KeyError("bug")

        endpoint.delete_class = explode
        outcome = await DeleteExecutor(endpoint).execute("c1", DeleteScope.SINGLE)
        self.assertIs(outcome.kind, DeleteOutcomeKind.FAILURE)

    async def test_statistics_count_outcomes(self) -> None:
        endpoint = FakeEndpoint(200)
        executor = DeleteExecutor(endpoint)
        await executor.execute("c1", DeleteScope.SINGLE)
        endpoint.status_code = 404
        await executor.execute("c1", DeleteScope.SINGLE)
        self.assertEqual(executor.get_statistics(), {"success": 1, "already_gone": 1, "failure": 0})


class TestHttpDeleteEndpoint(unittest.IsolatedAsyncioTestCase):
    def make_response(self, status_code, payload=None):
        response = MagicMock()
        response.status_code = status_code
        if payload is None:
            response.json.side_effect = ValueError("no json")
        else:
            response.json.return_value = payload
        return response

    async def test_sends_scope_and_token(self) -> None:
        session = MagicMock()
        session.delete.return_value = self.make_response(200, {"message": "Class deleted (single instance)"})
        endpoint = HttpDeleteEndpoint("http://api.test/", token="secret", timeout=7, session=session)

        response = await endpoint.delete_class("abc/1", DeleteScope.SERIES)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.message, "Class deleted (single instance)")
        args, kwargs = session.delete.call_args
        self.assertEqual(args[0], "http://api.test/classes/abc%2F1")
        self.assertEqual(kwargs["params"], {"scope": "series"})
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer secret")
        self.assertEqual(kwargs["timeout"], 7)

    async def test_non_json_error_body(self) -> None:
        session = MagicMock()
        session.delete.return_value = self.make_response(502)
        endpoint = HttpDeleteEndpoint("http://api.test", session=session)
        response = await endpoint.delete_class("c1", DeleteScope.SINGLE)
        self.assertEqual(response.status_code, 502)
        self.assertIsNone(response.message)

    async def test_transport_errors_raise_network_error(self) -> None:
        session = MagicMock()
        session.delete.side_effect = requests.exceptions.ConnectionError("refused")
        endpoint = HttpDeleteEndpoint("http://api.test", session=session)
        with self.assertRaises(NetworkError):
            await endpoint.delete_class("c1", DeleteScope.SINGLE)


if __name__ == "__main__":
    unittest.main(verbosity=2)
