"""
Test execution components for wptrun.

This module provides the per-test lifecycle controller, the page bindings
channel, the testharness and reftest executors, and page leasing.
"""

from .controller import TestController
from .bindings import PageBindings
from .executor import Executor, ExecutorState, TestharnessExecutor, RefTestExecutor
from .page_pool import PagePool

__all__ = [
    "TestController",
    "PageBindings",
    "Executor",
    "ExecutorState",
    "TestharnessExecutor",
    "RefTestExecutor",
    "PagePool",
]
