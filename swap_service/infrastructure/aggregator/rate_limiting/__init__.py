"""Outbound rate limiting для aggregator calls."""

from .redis_token_bucket import RedisTokenBucket, bucket_key_for
from .token_bucket import TokenBucket

__all__ = ["TokenBucket", "RedisTokenBucket", "bucket_key_for"]
