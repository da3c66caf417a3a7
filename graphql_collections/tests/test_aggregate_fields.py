# Copyright 2021-present Kensho Technologies, LLC.
from datetime import datetime, timezone
import unittest

from graphql import GraphQLInt, GraphQLNonNull, graphql_sync, is_equal_type
import pytest

from .. import get_graphql_schema
from ..collection import Criteria
from ..exceptions import ConfigurationError
from .in_memory_collections import InMemoryCollection, get_blog_collections


def _execute_query(schema, query):
    """Execute the query, asserting that it succeeds, and return its data."""
    result = graphql_sync(schema, query)
    if result.errors:
        raise AssertionError("Query {} failed: {}".format(query, result.errors))
    return result.data


class AggregateFieldsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.collections = get_blog_collections()
        self.schema = get_graphql_schema(self.collections, expose_aggregate_fields=True)

    def test_aggregate_fields_are_opt_in(self) -> None:
        default_schema = get_graphql_schema(get_blog_collections())
        for field_name in ("getLatestUsers", "getFirstUsers", "countUsers"):
            self.assertNotIn(field_name, default_schema.query_type.fields)
            self.assertIn(field_name, self.schema.query_type.fields)
        self.assertNotIn("start", default_schema.query_type.fields["users"].args)

    def test_aggregate_field_arguments(self) -> None:
        query_fields = self.schema.query_type.fields
        self.assertEqual(["count", "start", "end"], list(query_fields["getLatestUsers"].args))
        count_argument = query_fields["getLatestUsers"].args["count"]
        self.assertTrue(is_equal_type(GraphQLNonNull(GraphQLInt), count_argument.type))
        self.assertEqual(["start", "end"], list(query_fields["countArticles"].args))
        self.assertEqual(GraphQLInt, query_fields["countArticles"].type)
        self.assertEqual(
            ["limit", "skip", "sort", "firstName", "lastName", "age", "createdAt", "start", "end"],
            list(query_fields["users"].args),
        )

    def test_get_latest_and_first(self) -> None:
        query = """{
            getLatestUsers(count: 2) {
                id
            }
            getFirstUsers(count: 1) {
                id
            }
        }"""
        expected_data = {
            "getLatestUsers": [{"id": 3}, {"id": 2}],
            "getFirstUsers": [{"id": 1}],
        }
        self.assertEqual(expected_data, _execute_query(self.schema, query))
        self.assertEqual(
            [
                ("find", Criteria(limit=2, sort="createdAt DESC")),
                ("find", Criteria(limit=1, sort="createdAt ASC")),
            ],
            self.collections["user"].calls,
        )

    def test_get_latest_in_range(self) -> None:
        query = """{
            getLatestUsers(count: 5, end: "2021-01-01") {
                id
            }
        }"""
        self.assertEqual(
            {"getLatestUsers": [{"id": 2}, {"id": 1}]}, _execute_query(self.schema, query)
        )

    def test_count(self) -> None:
        query = """{
            countUsers
            countArticles
        }"""
        self.assertEqual({"countUsers": 3, "countArticles": 3}, _execute_query(self.schema, query))

        query = """{
            countUsers(start: "2020-01-01")
        }"""
        self.assertEqual({"countUsers": 2}, _execute_query(self.schema, query))
        expected_criteria = Criteria(
            where={"createdAt": {">": datetime(2020, 1, 1, tzinfo=timezone.utc)}}, populate=False
        )
        self.assertEqual(("count", expected_criteria), self.collections["user"].calls[-1])

    def test_timestamp_range_on_plural_field(self) -> None:
        query = """{
            users(start: "2020-01-01T00:00:00Z", end: "2021-01-01T00:00:00+00:00") {
                id
            }
        }"""
        self.assertEqual({"users": [{"id": 2}]}, _execute_query(self.schema, query))
        expected_where = {
            "createdAt": {
                ">": datetime(2020, 1, 1, tzinfo=timezone.utc),
                "<": datetime(2021, 1, 1, tzinfo=timezone.utc),
            }
        }
        self.assertEqual(
            ("find", Criteria(where=expected_where)), self.collections["user"].calls[-1]
        )

    def test_timestamps_are_converted_to_utc(self) -> None:
        query = """{
            countUsers(start: "2020-06-01T02:00:00+02:00")
        }"""
        self.assertEqual({"countUsers": 1}, _execute_query(self.schema, query))

    def test_timestamp_range_merged_with_where(self) -> None:
        schema = get_graphql_schema(
            self.collections, expose_query_language=True, expose_aggregate_fields=True
        )
        query = """{
            users(where: {createdAt: {not: "unknown"}}, start: "2020-01-01") {
                id
            }
        }"""
        self.assertEqual({"users": [{"id": 2}, {"id": 3}]}, _execute_query(schema, query))
        expected_where = {
            "createdAt": {"not": "unknown", ">": datetime(2020, 1, 1, tzinfo=timezone.utc)}
        }
        self.assertEqual(
            ("find", Criteria(where=expected_where)), self.collections["user"].calls[-1]
        )

    def test_invalid_timestamp(self) -> None:
        query = """{
            countUsers(start: "not a timestamp")
            countArticles
        }"""
        result = graphql_sync(self.schema, query)
        self.assertEqual({"countUsers": None, "countArticles": 3}, result.data)
        self.assertEqual(1, len(result.errors))
        self.assertIn("start", result.errors[0].message)

    def test_count_argument_is_required(self) -> None:
        query = """{
            getLatestUsers {
                id
            }
        }"""
        result = graphql_sync(self.schema, query)
        self.assertIsNone(result.data)
        self.assertEqual(1, len(result.errors))

    def test_custom_timestamp_attribute(self) -> None:
        schema = get_graphql_schema(
            self.collections, expose_aggregate_fields=True, timestamp_attribute="age"
        )
        query = """{
            getLatestUsers(count: 1) {
                id
            }
        }"""
        self.assertEqual({"getLatestUsers": [{"id": 1}]}, _execute_query(schema, query))

    def test_attribute_named_like_range_argument(self) -> None:
        collection = InMemoryCollection(
            "event",
            {"id": {"type": "integer", "primaryKey": True}, "start": {"type": "string"}},
            [],
        )
        with pytest.warns(Warning, match="event.start"):
            schema = get_graphql_schema([collection], expose_aggregate_fields=True)
        self.assertEqual(
            ["limit", "skip", "sort", "start", "end"], list(schema.query_type.fields["events"].args)
        )

        # Without aggregate fields, "start" is an ordinary filter.
        schema = get_graphql_schema([collection])
        self.assertEqual(
            ["limit", "skip", "sort", "start"], list(schema.query_type.fields["events"].args)
        )

    def test_collections_without_count(self) -> None:
        class CollectionWithoutCount:
            identity = "user"
            primary_key = "id"
            attributes = {"id": {"type": "integer", "primaryKey": True}}

            def find_one(self, criteria):
                return None

            def find(self, criteria):
                return []

        get_graphql_schema([CollectionWithoutCount()])
        with self.assertRaises(ConfigurationError):
            get_graphql_schema([CollectionWithoutCount()], expose_aggregate_fields=True)
