#!/usr/bin/env python3
"""Tests for the HTTP fetch primitive."""

import unittest
from unittest.mock import MagicMock, patch

import requests

from fanatic import downloader
from fanatic.exceptions import TransportError

TEST_URL = "https://www.kcrw.com/music/shows/henry-rollins"


def make_response(status_code=200, reason="OK", text="<html></html>"):
    resp = MagicMock()
    resp.headers = {"Content-Type": "text/html; charset=utf-8"}
    resp.status_code = status_code
    resp.reason = reason
    resp.text = text
    resp.content = text.encode("utf-8")
    return resp


class TestNormalizeURL(unittest.TestCase):
    """Tests for normalize_url."""

    def test_simple_url(self):
        self.assertEqual(downloader.normalize_url(TEST_URL), TEST_URL)

    def test_url_with_space(self):
        self.assertEqual(
            downloader.normalize_url("https://example.com/a b.json"),
            "https://example.com/a%20b.json",
        )

    def test_already_encoded_url_is_unchanged(self):
        url = "https://example.com/a%20b.json"
        self.assertEqual(downloader.normalize_url(url), url)


class TestFetchText(unittest.TestCase):
    """Tests for fetch_text."""

    def setUp(self):
        self.session = MagicMock()
        patcher = patch.object(
            downloader, "_get_thread_request_session", return_value=self.session
        )
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_returns_body(self):
        resp = make_response(text="<html>ok</html>")
        self.session.get.return_value = resp

        body = downloader.fetch_text(TEST_URL, "agent/1.0", 7)

        self.assertEqual(body, "<html>ok</html>")
        self.session.get.assert_called_once_with(
            TEST_URL, headers={"User-Agent": "agent/1.0"}, timeout=7
        )
        resp.close.assert_called_once()

    def test_non_2xx_status_raises(self):
        for status, reason in [(404, "Not Found"), (500, "Internal Server Error"), (301, "Moved")]:
            with self.subTest(status=status):
                resp = make_response(status_code=status, reason=reason)
                self.session.get.return_value = resp
                with self.assertRaises(TransportError) as ctx:
                    downloader.fetch_text(TEST_URL, "agent", 5)
                self.assertEqual(ctx.exception.status_code, status)
                self.assertEqual(ctx.exception.reason, reason)
                self.assertEqual(ctx.exception.url, TEST_URL)
                self.assertIn(f"status code error: {status}", str(ctx.exception))
                resp.close.assert_called_once()

    def test_2xx_statuses_succeed(self):
        self.session.get.return_value = make_response(status_code=203, text="fine")
        self.assertEqual(downloader.fetch_text(TEST_URL, "agent", 5), "fine")

    def test_request_exception_raises_transport_error(self):
        self.session.get.side_effect = requests.ConnectionError("connection refused")
        with self.assertRaises(TransportError) as ctx:
            downloader.fetch_text(TEST_URL, "agent", 5)
        self.assertIsNone(ctx.exception.status_code)
        self.assertIn("request failed", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, requests.ConnectionError)

    def test_timeout_raises_transport_error(self):
        self.session.get.side_effect = requests.Timeout("read timed out")
        with self.assertRaises(TransportError):
            downloader.fetch_text(TEST_URL, "agent", 1)


def make_real_response(body: bytes, content_type: str) -> requests.Response:
    resp = requests.Response()
    resp.status_code = 200
    resp.reason = "OK"
    resp.url = TEST_URL
    resp.headers["Content-Type"] = content_type
    resp._content = body
    resp._content_consumed = True
    return resp


class TestBodyDecoding(unittest.TestCase):
    """Tests for choosing the body encoding."""

    def setUp(self):
        self.session = MagicMock()
        patcher = patch.object(
            downloader, "_get_thread_request_session", return_value=self.session
        )
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_meta_charset_wins_without_header_charset(self):
        page = '<html><head><meta charset="utf-8"></head><body>Café Noir</body></html>'
        self.session.get.return_value = make_real_response(page.encode("utf-8"), "text/html")

        body = downloader.fetch_text(TEST_URL, "agent", 5)

        self.assertIn("Café Noir", body)
        self.assertNotIn("CafÃ©", body)

    def test_header_charset_is_honoured(self):
        page = "<html><body>Café</body></html>"
        self.session.get.return_value = make_real_response(
            page.encode("latin-1"), "text/html; charset=ISO-8859-1"
        )

        self.assertIn("Café", downloader.fetch_text(TEST_URL, "agent", 5))

    def test_json_body_is_left_to_requests(self):
        payload = '{"title": "Café"}'
        self.session.get.return_value = make_real_response(
            payload.encode("utf-8"), "application/json"
        )

        self.assertEqual(downloader.fetch_text(TEST_URL, "agent", 5), payload)


class TestThreadSessions(unittest.TestCase):
    """Tests for the per-thread session registry."""

    def test_same_thread_reuses_session(self):
        first = downloader._get_thread_request_session()
        second = downloader._get_thread_request_session()
        self.assertIs(first, second)
        self.assertIn(first, downloader._SESSION_REGISTRY)


if __name__ == "__main__":
    unittest.main()
