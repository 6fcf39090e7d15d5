"""Adapters from CRM records to CandidateSnapshot.

Properties and clients are both scored through CandidateSnapshot so the
scorer has a single code path for both matching directions.
"""

from propmatch.domain.models import ClientRecord, PropertyRecord

from .models import CandidateKind, CandidateSnapshot


def snapshot_from_property(record: PropertyRecord) -> CandidateSnapshot:
    """Build the read-only scoring view of a property listing."""
    return CandidateSnapshot(
        candidate_id=record.id,
        kind=CandidateKind.PROPERTY,
        label=record.title,
        price=record.price,
        living_area=record.living_area_sqm,
        rooms=record.rooms,
        city=record.address_city,
        postal_code=record.address_postal_code,
        state=record.address_state,
        features=record.feature_set(),
        property_type=record.property_type,
        listing_type=record.listing_type,
        status=record.status,
        created_at=record.created_at,
    )


def snapshot_from_client(record: ClientRecord) -> CandidateSnapshot:
    """Build the read-only view of a client as a reverse-matching candidate.

    The numeric fields carry the upper bounds of the client's preferences
    (what they can pay, how much space they want) for sorting and display;
    scoring itself uses ``criteria``.
    """
    criteria = record.search_criteria
    return CandidateSnapshot(
        candidate_id=record.id,
        kind=CandidateKind.CLIENT,
        label=record.full_name,
        price=criteria.max_budget if criteria else None,
        living_area=criteria.max_living_area if criteria else None,
        rooms=criteria.max_rooms if criteria else None,
        city=record.address_city,
        postal_code=record.address_postal_code,
        created_at=record.created_at,
        criteria=criteria,
    )
