from .retry_client import DEFAULT_RETRY_POLICY, GRAPHQL_RETRY_POLICY, RetryPolicy, fetch_with_retry

__all__ = ["DEFAULT_RETRY_POLICY", "GRAPHQL_RETRY_POLICY", "RetryPolicy", "fetch_with_retry"]
