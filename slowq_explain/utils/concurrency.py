"""Concurrency helpers for batch diagnosis."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Optional


def create_thread_pool(max_workers: Optional[int] = None) -> ThreadPoolExecutor:
    """Thread pool whose workers are named after the diagnostics service."""

    return ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="slowq-explain")
