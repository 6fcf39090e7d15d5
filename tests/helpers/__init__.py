"""Test helper utilities for propmatch tests."""

from .fakes import (
    CallLog,
    InMemoryCandidateRepository,
    InMemoryContactHistory,
    InMemoryCriteriaProvider,
    InMemoryPropertyProvider,
    make_client,
    make_property,
)
from .fixture_data import SAMPLE_CRM_PATH, FixtureRecords, load_fixture_records, seed_database

__all__ = [
    "CallLog",
    "FixtureRecords",
    "InMemoryCandidateRepository",
    "InMemoryContactHistory",
    "InMemoryCriteriaProvider",
    "InMemoryPropertyProvider",
    "SAMPLE_CRM_PATH",
    "load_fixture_records",
    "make_client",
    "make_property",
    "seed_database",
]
