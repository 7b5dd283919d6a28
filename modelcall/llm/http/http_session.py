#!/usr/bin/env python3
"""Shared HTTP session with a pooled adapter."""

import requests
from requests.adapters import HTTPAdapter


def create_session(pool_connections: int = 10, pool_maxsize: int = 10) -> requests.Session:
    """
    Build the single Session a client reuses for every call.

    max_retries=0 on the adapter: urllib3 must not retry on its own, every
    retry goes through RetryPolicy so backoff and cancellation stay observable.
    """
    session = requests.Session()

    adapter = HTTPAdapter(
        pool_connections=pool_connections,
        pool_maxsize=pool_maxsize,
        max_retries=0
    )
    session.mount('https://', adapter)
    session.mount('http://', adapter)

    return session
