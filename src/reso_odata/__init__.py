from .builder import QueryBuilder, ReplicationQueryBuilder
from .client import ResoClient
from .config import ClientConfig, load_env
from .envelope import FieldValue, JsonKind, ODataEnvelope, Record, ReplicationResponse
from .exceptions import (
    ConfigurationError,
    ConflictingClauseError,
    FieldTypeError,
    FilterCompileError,
    HttpStatusError,
    InvalidDirectionError,
    InvalidFieldError,
    InvalidFilterError,
    InvalidLimitError,
    MalformedResponseError,
    MissingResourceError,
    NotFoundError,
    PaginationStalledError,
    QueryValidationError,
    RequestTimeoutError,
    ResoError,
    TransportError,
)
from .executor import QueryExecutor
from .expressions import OrderBy, OrderDirection, format_literal
from .filters import FilterBuilder, FilterExpression, compile_filter
from .operators import FilterOperator
from .pagination import ReplicationPaginator
from .ports import ITransport, TransportResponse
from .query import Query, ReplicationQuery
from .shortcuts import (
    build_count_query,
    build_query,
    build_query_by_key,
    build_query_with_expand,
    build_query_with_order,
    build_query_with_pagination,
    build_query_with_select,
    build_replication_query,
    count_records,
)
from .transport import HttpTransport

__all__ = [
    # Query values and builders
    "Query",
    "QueryBuilder",
    "ReplicationQuery",
    "ReplicationQueryBuilder",
    # Expressions
    "FilterBuilder",
    "FilterExpression",
    "FilterOperator",
    "OrderBy",
    "OrderDirection",
    "compile_filter",
    "format_literal",
    # Execution
    "QueryExecutor",
    "ReplicationPaginator",
    "ResoClient",
    # Responses
    "FieldValue",
    "JsonKind",
    "ODataEnvelope",
    "Record",
    "ReplicationResponse",
    # Transport and configuration
    "ClientConfig",
    "HttpTransport",
    "ITransport",
    "TransportResponse",
    "load_env",
    # Exceptions
    "ResoError",
    "ConfigurationError",
    "QueryValidationError",
    "MissingResourceError",
    "ConflictingClauseError",
    "InvalidLimitError",
    "InvalidDirectionError",
    "InvalidFilterError",
    "InvalidFieldError",
    "FilterCompileError",
    "TransportError",
    "RequestTimeoutError",
    "HttpStatusError",
    "NotFoundError",
    "MalformedResponseError",
    "FieldTypeError",
    "PaginationStalledError",
    # Shortcuts
    "build_count_query",
    "build_query",
    "build_query_by_key",
    "build_query_with_expand",
    "build_query_with_order",
    "build_query_with_pagination",
    "build_query_with_select",
    "build_replication_query",
    "count_records",
]
