import logging
import unittest

from helpers import RecordingFetch, StubResponse, json_response

from lazyfetch import Client, RequestError


class TestClient(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.fetch = RecordingFetch(json_response({"ok": True}))
        self.client = Client(
            base_url="https://api.example.com/",
            headers={"Accept": "application/vnd.example+json"},
            request={"fetch": self.fetch},
        )

    async def test_get_with_query_parameters(self):
        response = await self.client.get("/orgs/{org}/repos", org="octo", type="public")

        self.assertEqual(response.data, {"ok": True})
        url, init = self.fetch.calls[0]
        self.assertEqual(url, "https://api.example.com/orgs/octo/repos?type=public")
        self.assertEqual(init["method"], "GET")
        self.assertEqual(init["headers"]["accept"], "application/vnd.example+json")
        self.assertIsNone(init["body"])

    async def test_verbs(self):
        for verb in ("put", "patch", "delete", "head"):
            await getattr(self.client, verb)("/things/1")
        methods = [init["method"] for _, init in self.fetch.calls]
        self.assertEqual(methods, ["PUT", "PATCH", "DELETE", "HEAD"])

    async def test_defaults_returns_new_client(self):
        other_fetch = RecordingFetch(StubResponse(status=204))
        scoped = self.client.defaults(
            headers={"Authorization": "token abc"}, request={"fetch": other_fetch}
        )

        response = await scoped.delete("/things/1")

        self.assertEqual(response.status, 204)
        _, init = other_fetch.calls[0]
        self.assertEqual(init["headers"]["authorization"], "token abc")
        self.assertEqual(init["headers"]["accept"], "application/vnd.example+json")
        self.assertNotIn("authorization", self.client.headers)
        self.assertEqual(self.fetch.calls, [])

    async def test_per_call_options_do_not_leak(self):
        await self.client.get("/a", request={"redirect": "manual"})
        await self.client.get("/b")

        redirects = [init["redirect"] for _, init in self.fetch.calls]
        self.assertEqual(redirects, ["manual", "follow"])

    async def test_hook_can_mutate_the_request(self):
        seen = []

        async def auth_hook(send, endpoint):
            seen.append(endpoint.url)
            return await send(endpoint.with_headers(authorization="bearer xyz"))

        client = self.client.defaults(request={"hook": auth_hook})
        await client.get("/user")

        self.assertEqual(seen, ["https://api.example.com/user"])
        _, init = self.fetch.calls[0]
        self.assertEqual(init["headers"]["authorization"], "bearer xyz")

    async def test_hook_sees_normalized_errors(self):
        failing = RecordingFetch(StubResponse(status=401, status_text="Unauthorized"))
        caught = []

        async def hook(send, endpoint):
            try:
                return await send(endpoint)
            except RequestError as error:
                caught.append(error.status)
                raise

        client = Client(request={"fetch": failing, "hook": hook})
        with self.assertRaises(RequestError):
            await client.get("https://api.example.com/user")
        self.assertEqual(caught, [401])

    async def test_errors_carry_redacted_request(self):
        failing = RecordingFetch(StubResponse(status=401, status_text="Unauthorized"))
        client = self.client.defaults(
            headers={"Authorization": "token secret"}, request={"fetch": failing}
        )
        with self.assertRaises(RequestError) as ctx:
            await client.get("/user")

        self.assertEqual(ctx.exception.message, "Unauthorized")
        self.assertEqual(ctx.exception.request.headers["authorization"], "token [REDACTED]")

    async def test_custom_log(self):
        log = logging.getLogger("app.github")
        fetch = RecordingFetch(StubResponse(headers={"deprecation": "true", "sunset": "soon"}))
        with self.assertLogs("app.github", level="WARNING") as logs:
            await self.client.get("/legacy", request={"fetch": fetch, "log": log})
        self.assertIn("is deprecated", logs.output[0])

    def test_endpoint(self):
        endpoint = self.client.endpoint("POST /repos/{repo}/issues", repo="r", title="t")
        self.assertEqual(endpoint.url, "https://api.example.com/repos/r/issues")
        self.assertEqual(endpoint.body, {"title": "t"})


if __name__ == "__main__":
    unittest.main()
