from graphql import graphql_sync
from sqlalchemy import MetaData, create_engine

from graphql_collections import HasMany, get_graphql_schema
from graphql_collections.sqlalchemy import get_collections_from_sqlalchemy_metadata


engine = create_engine("<connection string>")

# Reflect the default database schema.
metadata = MetaData()
metadata.reflect(bind=engine)

# Expose each table as a collection. Columns with a foreign key to another of the tables become
# relations, and the inverse sides of those relations have to be declared explicitly.
collections = get_collections_from_sqlalchemy_metadata(
    {"animal": metadata.tables["animal"], "owner": metadata.tables["owner"]},
    engine,
    has_many={"owner": {"animals": HasMany("animal", "owner")}},
)
schema = get_graphql_schema(collections, expose_query_language=True)

# Write GraphQL query.
graphql_query = """
{
    owners(where: {name: {startsWith: "B"}}, sort: "name ASC") {
        name
        animals {
            name
        }
    }
}
"""

# Execute query.
query_results = graphql_sync(schema, graphql_query).data
