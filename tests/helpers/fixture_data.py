"""Fixture-based CRM data for integration tests and the sample seeding script.

This module loads properties, clients and contact events from a YAML file
and writes them through the SQL repositories, so tests and demos run
against deterministic data.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import yaml
from sqlalchemy.orm import Session

from propmatch.domain.models import ClientRecord, ContactEvent, PropertyRecord
from propmatch.persistence.repositories import (
    ClientRepository,
    ContactHistoryRepository,
    PropertyRepository,
)

SAMPLE_CRM_PATH = Path(__file__).parent.parent / "fixtures" / "sample_crm.yaml"


@dataclass
class FixtureRecords:
    """Domain records parsed from a fixture file."""

    properties: List[PropertyRecord] = field(default_factory=list)
    clients: List[ClientRecord] = field(default_factory=list)
    contact_events: List[ContactEvent] = field(default_factory=list)


def load_fixture_records(fixture_path: Path = SAMPLE_CRM_PATH) -> FixtureRecords:
    """Load CRM records from a YAML file.

    Args:
        fixture_path: YAML file with top-level keys properties, clients and
            contact_events (camelCase or snake_case field names)

    Returns:
        FixtureRecords with validated domain models

    Raises:
        FileNotFoundError: If the fixture file doesn't exist
        yaml.YAMLError: If YAML parsing fails
    """
    if not fixture_path.exists():
        raise FileNotFoundError(f"Fixture file not found: {fixture_path}")

    with open(fixture_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    return FixtureRecords(
        properties=[PropertyRecord.model_validate(item) for item in data.get("properties", [])],
        clients=[ClientRecord.model_validate(item) for item in data.get("clients", [])],
        contact_events=[
            ContactEvent.model_validate(item) for item in data.get("contact_events", [])
        ],
    )


def seed_database(session: Session, records: FixtureRecords) -> None:
    """Insert fixture records through the repositories."""
    properties = PropertyRepository(session)
    clients = ClientRepository(session)
    history = ContactHistoryRepository(session)

    for record in records.properties:
        properties.add(record)
    for record in records.clients:
        clients.add(record)
    for event in records.contact_events:
        history.record_event(
            event.agent_id,
            event.candidate_id,
            event.event_type,
            occurred_at=event.occurred_at,
            notes=event.notes,
        )
