"""Property lookups used by appointment scheduling."""

from uuid import UUID

from sqlalchemy.orm import Session

from realty_api.db.models import Property


def get_property(
    db: Session,
    property_id: UUID,
    for_update: bool = False,
) -> Property | None:
    """
    Get property by ID.

    With for_update the row stays locked until the transaction ends, which
    serialises concurrent bookings of the same property.
    """
    query = db.query(Property).filter(Property.id == property_id)
    if for_update:
        query = query.with_for_update()
    return query.first()
