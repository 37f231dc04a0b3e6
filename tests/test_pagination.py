import unittest

import httpx

from freshdesk_gateway.pagination import (
    clamp_page,
    clamp_per_page,
    cursor_from_response,
    parse_link_header,
)


class TestParseLinkHeader(unittest.TestCase):
    def test_next_and_prev(self):
        header = '<https://x/api/v2/tickets?page=3>; rel="next", <https://x/api/v2/tickets?page=1>; rel="prev"'
        result = parse_link_header(header)
        self.assertEqual(result.get("next"), 3)
        self.assertEqual(result.get("prev"), 1)

    def test_only_next(self):
        result = parse_link_header('<https://x/api/v2/tickets?page=2>; rel="next"')
        self.assertEqual(result["next"], 2)
        self.assertIsNone(result["prev"])

    def test_per_page_is_not_the_page(self):
        header = '<https://x/api/v2/contacts?per_page=30&page=4>; rel="next"'
        self.assertEqual(parse_link_header(header)["next"], 4)

    def test_empty(self):
        self.assertEqual(parse_link_header(""), {"next": None, "prev": None})
        self.assertEqual(parse_link_header(None), {"next": None, "prev": None})

    def test_invalid_format(self):
        self.assertEqual(parse_link_header("invalid format"), {"next": None, "prev": None})

    def test_unknown_relation_ignored(self):
        header = '<https://x/api/v2/tickets?page=9>; rel="last", <https://x/api/v2/tickets?page=2>; rel="next"'
        self.assertEqual(parse_link_header(header), {"next": 2, "prev": None})

    def test_url_without_page(self):
        self.assertEqual(parse_link_header('<https://x/api/v2/tickets>; rel="next"')["next"], None)

    def test_comma_inside_url(self):
        header = (
            '<https://x/api/v2/tickets?tag=vip,billing&page=2>; rel="next", '
            '<https://x/api/v2/tickets?tag=vip,billing&page=1>; rel="prev"'
        )
        self.assertEqual(parse_link_header(header), {"next": 2, "prev": 1})


class TestClamping(unittest.TestCase):
    def test_page_below_one(self):
        self.assertEqual(clamp_page(0), 1)
        self.assertEqual(clamp_page(-5), 1)
        self.assertEqual(clamp_page(None), 1)
        self.assertEqual(clamp_page(7), 7)

    def test_per_page_range(self):
        self.assertEqual(clamp_per_page(0), 1)
        self.assertEqual(clamp_per_page(101), 100)
        self.assertEqual(clamp_per_page(50), 50)
        self.assertEqual(clamp_per_page(None), 30)


class TestCursorFromResponse(unittest.TestCase):
    def test_cursor(self):
        response = httpx.Response(
            200,
            json=[],
            headers={"Link": '<https://x/api/v2/tickets?page=3&per_page=10>; rel="next"'},
        )
        cursor = cursor_from_response(response, page=2, per_page=10)
        self.assertEqual(cursor.current_page, 2)
        self.assertEqual(cursor.per_page, 10)
        self.assertEqual(cursor.next_page, 3)
        self.assertIsNone(cursor.prev_page)

    def test_no_link_header(self):
        cursor = cursor_from_response(httpx.Response(200, json=[]), page=1, per_page=30)
        self.assertIsNone(cursor.next_page)
        self.assertIsNone(cursor.prev_page)
