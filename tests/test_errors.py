import unittest
from types import MappingProxyType

from lazyfetch.builder import RequestDescriptor
from lazyfetch.errors import (
    TRANSPORT_FAILURE_STATUS,
    cause_message,
    from_exception,
    from_response,
    redact,
    to_error_message,
)
from lazyfetch.response import Response


class ErrorLike:
    def __init__(self, message, cause=None):
        self.message = message
        self.cause = cause


class TestCauseMessage(unittest.TestCase):
    def test_string(self):
        self.assertEqual(cause_message("bad"), "bad")

    def test_without_cause(self):
        self.assertEqual(cause_message(ValueError("Invalid URL")), "Invalid URL")

    def test_string_cause(self):
        error = TypeError("fetch failed")
        error.cause = "bad"
        self.assertEqual(cause_message(error), "bad")

    def test_error_cause(self):
        error = TypeError("fetch failed")
        error.cause = Exception("bad")
        self.assertEqual(cause_message(error), "bad")

    def test_dunder_cause(self):
        try:
            try:
                raise ConnectionRefusedError("connect ECONNREFUSED 127.0.0.1:8")
            except ConnectionRefusedError as e:
                raise TypeError("fetch failed") from e
        except TypeError as error:
            self.assertEqual(cause_message(error), "connect ECONNREFUSED 127.0.0.1:8")

    def test_deepest_non_empty_message_wins(self):
        error = ErrorLike("fetch failed", ErrorLike("socket hang up", ErrorLike("")))
        self.assertEqual(cause_message(error), "socket hang up")

        error = ErrorLike("fetch failed", ErrorLike("tls", ErrorLike("self-signed certificate")))
        self.assertEqual(cause_message(error), "self-signed certificate")

    def test_cycle_terminates(self):
        first = ErrorLike("first")
        second = ErrorLike("second", first)
        first.cause = second
        self.assertEqual(cause_message(first), "second")

    def test_empty_chain(self):
        self.assertEqual(cause_message(Exception()), "Unknown Error")


class TestToErrorMessage(unittest.TestCase):
    def test_string_body(self):
        self.assertEqual(to_error_message("Bad credentials"), "Bad credentials")

    def test_message_and_documentation_url(self):
        data = {"message": "Not Found", "documentation_url": "https://docs.example.com"}
        self.assertEqual(to_error_message(data), "Not Found - https://docs.example.com")

    def test_message_with_errors(self):
        data = {"message": "Validation Failed", "errors": ["a", {"code": "invalid"}]}
        self.assertEqual(
            to_error_message(data), 'Validation Failed: "a", {"code":"invalid"}'
        )

    def test_mapping_without_message(self):
        self.assertEqual(to_error_message({"error": "x"}), 'Unknown error: {"error":"x"}')

    def test_list_body_is_compact_json(self):
        self.assertEqual(
            to_error_message([{"code": "a"}, 1]), 'Unknown error: [{"code":"a"},1]'
        )

    def test_binary_or_empty_body_uses_fallback(self):
        self.assertEqual(to_error_message(b"\x00", "Service Unavailable"), "Service Unavailable")
        self.assertEqual(to_error_message("", "Not Found"), "Not Found")
        self.assertEqual(to_error_message(None), "Unknown error")


class TestNormalize(unittest.TestCase):
    def setUp(self):
        self.descriptor = RequestDescriptor(
            method="GET",
            url="https://api.example.com/login?client_id=1&client_secret=s3cr3t&access_token=tok",
            headers=MappingProxyType({"authorization": "token abc123", "accept": "*/*"}),
        )

    def test_redact(self):
        redacted = redact(self.descriptor)
        self.assertEqual(redacted.headers["authorization"], "token [REDACTED]")
        self.assertEqual(redacted.headers["accept"], "*/*")
        self.assertEqual(
            redacted.url,
            "https://api.example.com/login?client_id=1&client_secret=[REDACTED]&access_token=[REDACTED]",
        )
        # The original descriptor is untouched.
        self.assertEqual(self.descriptor.headers["authorization"], "token abc123")

    def test_from_exception(self):
        error = from_exception(OSError("getaddrinfo ENOTFOUND"), self.descriptor)
        self.assertEqual(error.status, TRANSPORT_FAILURE_STATUS)
        self.assertEqual(error.message, "getaddrinfo ENOTFOUND")
        self.assertIsNone(error.response)
        self.assertEqual(error.request.headers["authorization"], "token [REDACTED]")

    def test_from_response(self):
        response = Response(401, self.descriptor.url, {}, {"message": "Bad credentials"})
        error = from_response(response, self.descriptor, "Unauthorized")
        self.assertEqual(error.status, 401)
        self.assertEqual(error.message, "Bad credentials")
        self.assertIs(error.response, response)
        self.assertEqual(str(error), "Bad credentials")


if __name__ == "__main__":
    unittest.main()
