import unittest
from unittest.mock import MagicMock

import requests

from quiz.remote import SubmissionApiClient, SubmissionApiError
from shared.types import UserProfile


def fake_response(status_code: int, body=None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


class SubmissionApiClientTests(unittest.TestCase):
    def setUp(self):
        self.session = MagicMock()
        self.client = SubmissionApiClient(
            "http://localhost:8000/", timeout=5, session=self.session
        )
        self.profile = UserProfile(
            id="google-1234",
            email="sam@example.com",
            name="Sam Lee",
            phone_number="555-123-4567",
            answers={"gender": "Female"},
        )

    def test_submit_posts_payload_with_bearer_token(self):
        self.session.post.return_value = fake_response(
            200, {"success": True, "quiz": {"id": "abc", "status": "pending"}}
        )
        record = self.client.submit_quiz(self.profile, "token-1")

        self.assertEqual(record, {"id": "abc", "status": "pending"})
        args, kwargs = self.session.post.call_args
        self.assertEqual(args[0], "http://localhost:8000/api/submit-quiz")
        self.assertEqual(kwargs["headers"], {"Authorization": "Bearer token-1"})
        self.assertEqual(kwargs["timeout"], 5)
        self.assertEqual(
            kwargs["json"],
            {
                "userId": "google-1234",
                "email": "sam@example.com",
                "name": "Sam Lee",
                "phoneNumber": "555-123-4567",
                "answers": {"gender": "Female"},
            },
        )

    def test_submit_error_uses_backend_message(self):
        self.session.post.return_value = fake_response(401, {"error": "No token provided"})
        with self.assertRaises(SubmissionApiError) as ctx:
            self.client.submit_quiz(self.profile, "")
        self.assertEqual(str(ctx.exception), "No token provided")
        self.assertEqual(ctx.exception.status_code, 401)

    def test_submit_error_without_json_body(self):
        self.session.post.return_value = fake_response(502, ValueError("not json"))
        with self.assertRaises(SubmissionApiError) as ctx:
            self.client.submit_quiz(self.profile, "token-1")
        self.assertEqual(str(ctx.exception), "Failed to save quiz")

    def test_transport_failure(self):
        self.session.post.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(SubmissionApiError):
            self.client.submit_quiz(self.profile, "token-1")

    def test_success_without_quiz_record(self):
        for body in [{"success": True}, ValueError("not json"), ["quiz"]]:
            with self.subTest(body=body):
                self.session.post.return_value = fake_response(200, body)
                with self.assertRaises(SubmissionApiError) as ctx:
                    self.client.submit_quiz(self.profile, "token-1")
                self.assertEqual(ctx.exception.status_code, 200)

    def test_error_body_that_is_not_an_object(self):
        self.session.post.return_value = fake_response(500, ["oops"])
        with self.assertRaises(SubmissionApiError) as ctx:
            self.client.submit_quiz(self.profile, "token-1")
        self.assertEqual(str(ctx.exception), "Failed to save quiz")


if __name__ == "__main__":
    unittest.main()
