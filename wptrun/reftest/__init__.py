"""Reference-test verdicts for wptrun."""

from .comparator import RefTestComparator, RELATIONS

__all__ = ["RefTestComparator", "RELATIONS"]
