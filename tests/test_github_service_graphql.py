import unittest
from unittest.mock import patch, MagicMock

import requests

from github_service_graphql import (
    MissingCredentialError, RateLimitUsage, RepositoryPaginator, TransportError,
    build_repositories_query, execute_graphql_query, fetch_viewer_repositories
)


def make_page(names, end_cursor, has_next_page, cost=1, remaining=4999):
    return {
        "data": {
            "viewer": {
                "repositories": {
                    "totalCount": 3,
                    "pageInfo": {"endCursor": end_cursor, "hasNextPage": has_next_page},
                    "nodes": [
                        {
                            "name": name,
                            "owner": {"login": "octocat"},
                            "isPrivate": False,
                            "defaultBranchRef": {"name": "main"},
                            "viewerPermission": "ADMIN",
                        }
                        for name in names
                    ],
                }
            },
            "rateLimit": {"cost": cost, "remaining": remaining},
        }
    }


class TestExecuteGraphQLQuery(unittest.TestCase):

    @patch('github_service_graphql.requests.post')
    def test_execute_graphql_query(self, mock_post):
        mock_response = MagicMock()
        mock_response.raise_for_status.return_value = None
        mock_response.json.return_value = {"data": {"viewer": {}}}
        mock_post.return_value = mock_response

        result = execute_graphql_query("fake_token", "query", api_url="https://example.test/graphql")

        self.assertEqual(result, {"data": {"viewer": {}}})
        call_args = mock_post.call_args
        self.assertEqual(call_args[0][0], "https://example.test/graphql")
        self.assertEqual(call_args[1]['headers']['Authorization'], "token fake_token")
        self.assertEqual(call_args[1]['json'], {"query": "query"})
        self.assertIsNone(call_args[1]['timeout'])

    @patch('github_service_graphql.requests.post')
    def test_execute_graphql_query_http_error(self, mock_post):
        mock_response = MagicMock()
        mock_response.status_code = 401
        mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=mock_response)
        mock_post.return_value = mock_response

        with self.assertRaises(TransportError) as ctx:
            execute_graphql_query("bad_token", "query")
        self.assertIn("401", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, requests.exceptions.HTTPError)

    @patch('github_service_graphql.requests.post')
    def test_execute_graphql_query_connection_error(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectionError("boom")

        with self.assertRaises(TransportError):
            execute_graphql_query("fake_token", "query")

    @patch('github_service_graphql.requests.post')
    def test_execute_graphql_query_errors_without_data(self, mock_post):
        mock_response = MagicMock()
        mock_response.raise_for_status.return_value = None
        mock_response.json.return_value = {"errors": [{"message": "Bad credentials"}]}
        mock_post.return_value = mock_response

        with self.assertRaises(TransportError) as ctx:
            execute_graphql_query("fake_token", "query")
        self.assertIn("Bad credentials", str(ctx.exception))

    @patch('github_service_graphql.requests.post')
    def test_execute_graphql_query_non_object_body(self, mock_post):
        """Test that null, list and string JSON bodies are reported as invalid data."""
        for body in [None, [], ["data"], "data"]:
            mock_response = MagicMock()
            mock_response.raise_for_status.return_value = None
            mock_response.json.return_value = body
            mock_post.return_value = mock_response

            with self.assertRaises(TransportError) as ctx:
                execute_graphql_query("fake_token", "query")
            self.assertEqual(str(ctx.exception), "Invalid data format received.")

    @patch('github_service_graphql.requests.post')
    def test_execute_graphql_query_null_errors(self, mock_post):
        mock_response = MagicMock()
        mock_response.raise_for_status.return_value = None
        mock_response.json.return_value = {"data": None, "errors": None}
        mock_post.return_value = mock_response

        with self.assertRaises(TransportError) as ctx:
            execute_graphql_query("fake_token", "query")
        self.assertEqual(str(ctx.exception), "Invalid data format received.")


class TestBuildRepositoriesQuery(unittest.TestCase):

    def test_first_page_has_no_after_argument(self):
        query = build_repositories_query()
        self.assertNotIn("after:", query)
        self.assertIn("first: 100", query)
        self.assertIn("affiliations: [OWNER, ORGANIZATION_MEMBER, COLLABORATOR]", query)

    def test_cursor_is_passed_as_after_argument(self):
        query = build_repositories_query("Y3Vyc29yOjEwMA==")
        self.assertIn('after: "Y3Vyc29yOjEwMA=="', query)

    def test_query_selects_required_fields(self):
        query = build_repositories_query()
        for field in ["totalCount", "endCursor", "hasNextPage", "name", "login", "isPrivate",
                      "defaultBranchRef", "viewerPermission", "rateLimit", "cost", "remaining"]:
            self.assertIn(field, query)


class TestRateLimitUsage(unittest.TestCase):

    def test_record_sums_cost_and_overwrites_remaining(self):
        usage = RateLimitUsage()
        usage.record({"cost": 1, "remaining": 4999})
        usage.record({"cost": 2, "remaining": 4997})
        self.assertEqual(usage.cost, 3)
        self.assertEqual(usage.remaining, 4997)


class TestRepositoryPaginator(unittest.TestCase):

    def test_missing_token_fails_before_any_call(self):
        mock_runner = MagicMock()
        for token in [None, ""]:
            with self.assertRaises(MissingCredentialError):
                RepositoryPaginator(token, query_runner=mock_runner)
        self.assertEqual(mock_runner.call_count, 0)

    def test_fetch_all_follows_cursors(self):
        """Test that three pages are fetched in order, each with the previous cursor."""
        mock_runner = MagicMock(side_effect=[
            make_page(["r1", "r2"], "c1", True),
            make_page(["r3"], "c2", True),
            make_page(["r4", "r5"], "c3", False),
        ])

        repositories, _ = RepositoryPaginator("fake_token", query_runner=mock_runner).fetch_all()

        self.assertEqual(mock_runner.call_count, 3)
        queries = [call[0][1] for call in mock_runner.call_args_list]
        self.assertNotIn("after:", queries[0])
        self.assertIn('after: "c1"', queries[1])
        self.assertIn('after: "c2"', queries[2])
        self.assertEqual([repo.name for repo in repositories], ["r1", "r2", "r3", "r4", "r5"])

    def test_fetch_all_accumulates_rate_limit(self):
        """Test that costs are summed while remaining keeps the last value."""
        mock_runner = MagicMock(side_effect=[
            make_page(["r1"], "c1", True, cost=1, remaining=4999),
            make_page(["r2"], "c2", True, cost=1, remaining=4998),
            make_page(["r3"], "c3", False, cost=2, remaining=4996),
        ])

        _, usage = RepositoryPaginator("fake_token", query_runner=mock_runner).fetch_all()

        self.assertEqual(usage.cost, 4)
        self.assertEqual(usage.remaining, 4996)

    def test_fetch_all_passes_token_and_settings(self):
        mock_runner = MagicMock(return_value=make_page([], None, False))

        paginator = RepositoryPaginator("fake_token", api_url="https://ghe.test/api/graphql",
                                        timeout=5.0, query_runner=mock_runner)
        repositories, usage = paginator.fetch_all()

        self.assertEqual(repositories, [])
        self.assertEqual(usage.cost, 1)
        call_args = mock_runner.call_args
        self.assertEqual(call_args[0][0], "fake_token")
        self.assertEqual(call_args[1], {"api_url": "https://ghe.test/api/graphql", "timeout": 5.0})

    def test_fetch_all_stops_on_transport_error(self):
        """Test that a failing page ends the loop without retrying."""
        mock_runner = MagicMock(side_effect=[
            make_page(["r1"], "c1", True),
            TransportError("Error communicating with GitHub API."),
        ])

        with self.assertRaises(TransportError):
            RepositoryPaginator("fake_token", query_runner=mock_runner).fetch_all()
        self.assertEqual(mock_runner.call_count, 2)

    @patch('github_service_graphql.execute_graphql_query')
    def test_fetch_viewer_repositories(self, mock_query):
        mock_query.return_value = make_page(["solo"], None, False, cost=1, remaining=10)

        repositories, usage = fetch_viewer_repositories("fake_token")

        self.assertEqual([repo.name for repo in repositories], ["solo"])
        self.assertEqual(usage.remaining, 10)

    def test_fetch_viewer_repositories_missing_token(self):
        with patch('github_service_graphql.execute_graphql_query') as mock_query:
            with self.assertRaises(MissingCredentialError):
                fetch_viewer_repositories(None)
            mock_query.assert_not_called()


if __name__ == '__main__':
    unittest.main()
