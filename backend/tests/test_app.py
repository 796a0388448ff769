import unittest

from fastapi.testclient import TestClient

from backend.app import create_app
from backend.db import InMemoryHistoryStore
from backend.dependencies import get_commit_queue, get_history_store
from backend.queue import InMemoryCommitQueue


class BackendApiTests(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(create_app())
        db = get_history_store()
        if isinstance(db, InMemoryHistoryStore):
            db.reset()
        queue = get_commit_queue()
        if isinstance(queue, InMemoryCommitQueue):
            queue.items.clear()

    def _apply(self, state, action, **extra):
        response = self.client.post(
            "/api/calculator/apply", json={"state": state, "action": action, **extra}
        )
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()

    def test_list_units(self):
        response = self.client.get("/api/units")
        self.assertEqual(response.status_code, 200)
        categories = response.json()["categories"]
        self.assertEqual(
            [c["key"] for c in categories], ["length", "area", "volume", "angle"]
        )
        length = categories[0]
        self.assertEqual(length["default_from_unit"], "ft")
        self.assertIn(
            {
                "key": "ft",
                "name": "Foot",
                "abbreviation": "ft",
                "system": "Imperial",
                "to_base": 0.3048,
            },
            length["units"],
        )

    def test_get_unknown_category(self):
        self.assertEqual(self.client.get("/api/units/area").status_code, 200)
        self.assertEqual(self.client.get("/api/units/currency").status_code, 404)

    def test_convert(self):
        response = self.client.post(
            "/api/convert",
            json={"category": "area", "from_unit": "sqft", "to_unit": "sqm", "value": "100"},
        )
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["result"], "9.290304")
        self.assertEqual(payload["hint"], "1 ft² = 0.09290304 m²")

    def test_convert_unknown_unit_is_error_string(self):
        response = self.client.post(
            "/api/convert",
            json={"category": "length", "from_unit": "ft", "to_unit": "ly", "value": "1"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["result"], "Error")
        self.assertEqual(response.json()["hint"], "")

    def test_convert_rejects_malformed_input(self):
        response = self.client.post(
            "/api/convert",
            json={"category": "length", "from_unit": "ft", "to_unit": "m", "value": "1.2.3"},
        )
        self.assertEqual(response.status_code, 422)

        partial = self.client.post(
            "/api/convert",
            json={"category": "length", "from_unit": "ft", "to_unit": "m", "value": "-"},
        )
        self.assertEqual(partial.status_code, 200)
        self.assertEqual(partial.json()["result"], "")

    def test_quick_reference(self):
        response = self.client.post(
            "/api/convert/reference",
            json={"category": "angle", "from_unit": "turn", "to_unit": "deg"},
        )
        self.assertEqual(response.status_code, 200)
        rows = response.json()["rows"]
        self.assertEqual(len(rows), 7)
        self.assertEqual(rows[0], {"input": 1, "output": "360"})

    def test_calculation_is_saved_to_history(self):
        state = {"display": "0"}
        state = self._apply(state, "digit", digit="2")["state"]
        step = self._apply(state, "operation", operation="add")
        self.assertEqual(step["pending_symbol"], "+")
        state = self._apply(step["state"], "digit", digit="3")["state"]
        result = self._apply(state, "evaluate")
        self.assertEqual(result["state"]["display"], "5")
        self.assertEqual(result["commits"], [{"expression": "2 + 3", "result": "5"}])

        history = self.client.get("/api/history").json()["entries"]
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0]["expression"], "2 + 3")
        self.assertEqual(history[0]["result"], "5")
        self.assertEqual(history[0]["group"], "Today")

    def test_division_by_zero_is_not_saved(self):
        state = {
            "display": "0",
            "previous_value": "8",
            "pending_operation": "div",
            "waiting_for_operand": False,
        }
        result = self._apply(state, "evaluate")
        self.assertEqual(result["state"]["display"], "Error")
        self.assertEqual(result["commits"], [])
        self.assertEqual(self.client.get("/api/history").json()["entries"], [])

    def test_invalid_actions(self):
        missing = self.client.post(
            "/api/calculator/apply", json={"action": "operation"}
        )
        self.assertEqual(missing.status_code, 400)
        bad_digit = self.client.post(
            "/api/calculator/apply", json={"action": "digit", "digit": "12"}
        )
        self.assertEqual(bad_digit.status_code, 422)
        bad_action = self.client.post(
            "/api/calculator/apply", json={"action": "sqrt"}
        )
        self.assertEqual(bad_action.status_code, 422)

    def test_state_must_hold_a_numeral(self):
        for state in (
            {"display": "abc"},
            {"display": ""},
            {"display": "-"},
            {"display": "5", "previous_value": "12abc"},
        ):
            with self.subTest(state=state):
                response = self.client.post(
                    "/api/calculator/apply",
                    json={"state": state, "action": "digit", "digit": "5"},
                )
                self.assertEqual(response.status_code, 422)

        recall = self.client.post(
            "/api/calculator/apply", json={"action": "recall", "result": "12abc"}
        )
        self.assertEqual(recall.status_code, 422)

    def test_state_accepts_exponent_and_error_displays(self):
        large = self._apply(
            {"display": "1e+21", "previous_value": "2", "pending_operation": "mul"},
            "evaluate",
        )
        self.assertEqual(large["state"]["display"], "2e+21")
        self.assertEqual(large["commits"], [{"expression": "2 * 1e+21", "result": "2e+21"}])

        fresh = self._apply(
            {"display": "Error", "waiting_for_operand": True}, "digit", digit="7"
        )
        self.assertEqual(fresh["state"]["display"], "7")

    def test_keyboard(self):
        state = {"display": "0"}
        for key in ["9", "*", "9", "Enter"]:
            payload = self.client.post(
                "/api/calculator/key", json={"state": state, "key": key}
            ).json()
            state = payload["state"]
        self.assertEqual(state["display"], "81")
        self.assertEqual(payload["commits"], [{"expression": "9 * 9", "result": "81"}])

        ignored = self.client.post(
            "/api/calculator/key", json={"state": state, "key": "Tab"}
        ).json()
        self.assertEqual(ignored["state"], state)
        self.assertEqual(ignored["commits"], [])

    def test_history_crud(self):
        first = self.client.post(
            "/api/history", json={"expression": "1 + 1", "result": "2"}
        )
        self.assertEqual(first.status_code, 201)
        second = self.client.post(
            "/api/history", json={"expression": "2 * 3", "result": "6"}
        )
        entries = self.client.get("/api/history").json()["entries"]
        self.assertEqual(
            [e["id"] for e in entries], [second.json()["id"], first.json()["id"]]
        )
        limited = self.client.get("/api/history", params={"limit": 1}).json()
        self.assertEqual(len(limited["entries"]), 1)

        fetched = self.client.get(f"/api/history/{second.json()['id']}")
        self.assertEqual(fetched.status_code, 200)
        self.assertEqual(fetched.json()["expression"], "2 * 3")
        self.assertEqual(fetched.json()["group"], "Today")
        self.assertEqual(self.client.get("/api/history/nope").status_code, 404)

        deleted = self.client.delete(f"/api/history/{first.json()['id']}")
        self.assertEqual(deleted.status_code, 204)
        missing = self.client.delete(f"/api/history/{first.json()['id']}")
        self.assertEqual(missing.status_code, 404)

        cleared = self.client.delete("/api/history")
        self.assertEqual(cleared.json(), {"status": "ok", "removed": 1})
        self.assertEqual(self.client.get("/api/history").json()["entries"], [])


if __name__ == "__main__":
    unittest.main()
