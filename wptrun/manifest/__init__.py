"""WPT manifest access for wptrun."""

from .reader import ManifestReader, TestExtras, TestharnessItem, RefTestItem

__all__ = ["ManifestReader", "TestExtras", "TestharnessItem", "RefTestItem"]
