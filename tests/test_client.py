import json
import unittest

import httpx

from hotel_search.client import call_upstream, parse_upstream_response
from hotel_search.errors import UpstreamCallError


class ParseUpstreamResponseTests(unittest.TestCase):
    def test_extracts_structured_content_from_sse(self):
        payload = (
            'event: message\n'
            'data: {"jsonrpc":"2.0","result":{"structuredContent":{"offers":[{"hotelId":10}]}}}\n\n'
            'data: [DONE]\n'
        )
        parsed = parse_upstream_response(payload, "text/event-stream")
        self.assertEqual(parsed, {"offers": [{"hotelId": 10}]})

    def test_falls_back_to_json_text_content(self):
        payload = json.dumps(
            {"jsonrpc": "2.0", "result": {"content": [{"type": "text", "text": '{"offers": []}'}]}}
        )
        parsed = parse_upstream_response(payload, "application/json")
        self.assertEqual(parsed, {"offers": []})

    def test_returns_none_when_no_structured_result(self):
        payload = '{"jsonrpc":"2.0","result":{"content":[{"type":"text","text":"No JSON here"}]}}'
        self.assertIsNone(parse_upstream_response(payload, "application/json"))

    def test_jsonrpc_error_raises(self):
        payload = '{"jsonrpc":"2.0","error":{"code":-32602,"message":"unknown advertiser"}}'
        with self.assertRaises(UpstreamCallError) as ctx:
            parse_upstream_response(payload, "application/json")
        self.assertIn("unknown advertiser", str(ctx.exception))


class CallUpstreamTests(unittest.TestCase):
    def test_posts_tools_call_with_bearer_token(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"jsonrpc": "2.0", "result": {"structuredContent": {"offers": []}}})

        result = call_upstream(
            "get_offers",
            {"advertiserId": 100},
            url="https://offers.example/mcp",
            api_key="secret",
            retry_attempts=0,
            transport=httpx.MockTransport(handler),
        )

        self.assertEqual(result, {"offers": []})
        body = json.loads(seen[0].content)
        self.assertEqual(body["method"], "tools/call")
        self.assertEqual(body["params"], {"name": "get_offers", "arguments": {"advertiserId": 100}})
        self.assertEqual(seen[0].headers["Authorization"], "Bearer secret")

    def test_retries_then_succeeds(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) == 1:
                return httpx.Response(503)
            return httpx.Response(200, json={"jsonrpc": "2.0", "result": {"structuredContent": {"offers": []}}})

        with self.assertLogs("hotel_search.client", level="WARNING"):
            result = call_upstream(
                "get_offers",
                {},
                url="https://offers.example/mcp",
                retry_attempts=2,
                transport=httpx.MockTransport(handler),
            )

        self.assertEqual(result, {"offers": []})
        self.assertEqual(len(attempts), 2)

    def test_raises_when_attempts_exhausted(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with self.assertLogs("hotel_search.client", level="WARNING") as logs:
            with self.assertRaises(UpstreamCallError):
                call_upstream(
                    "get_offers",
                    {},
                    url="https://offers.example/mcp",
                    retry_attempts=1,
                    transport=httpx.MockTransport(handler),
                )

        self.assertTrue(any("upstream_call_exhausted" in line for line in logs.output))


if __name__ == "__main__":
    unittest.main()
