# Copyright 2021-present Kensho Technologies, LLC.
from .config import SchemaGenerationConfig  # noqa
from .graphql_schema import (  # noqa
    get_graphql_schema,
    get_graphql_schema_from_config,
    get_mutations,
)
from .registry import SchemaRegistry  # noqa
