"""The batch status decision."""

from events.exceptions import CapacityExceededError
from events.models import Registration


def decide_status(
    *,
    capacity: int,
    max_capacity: int | None,
    waitlist_enabled: bool,
    requires_approval: bool,
    occupancy: int,
    waitlisted: int,
    batch_size: int,
) -> Registration.Status:
    """Decide the single status shared by every registration of a batch.

    Rules are evaluated in order and the first match wins:

    1. events requiring approval put the whole batch in PENDING, whatever the occupancy;
    2. a batch that fits within ``capacity`` is CONFIRMED;
    3. with the waitlist enabled and a ``max_capacity`` set, a batch that keeps every
       non-cancelled registration within ``max_capacity`` is WAITLISTED;
    4. otherwise the batch is rejected.

    Args:
        capacity: confirmed seats of the event.
        max_capacity: ceiling for confirmed, pending and waitlisted registrations together.
        waitlist_enabled: whether the event queues registrations beyond capacity.
        requires_approval: whether every registration needs an admin decision.
        occupancy: current CONFIRMED + PENDING registrations.
        waitlisted: current WAITLISTED registrations.
        batch_size: number of registrants submitted together.

    Raises:
        ValueError: if the batch is empty.
        CapacityExceededError: if no status can take the batch.
    """
    if batch_size < 1:
        raise ValueError("A registration batch needs at least one registrant.")
    if requires_approval:
        return Registration.Status.PENDING
    if occupancy + batch_size <= capacity:
        return Registration.Status.CONFIRMED
    if waitlist_enabled and max_capacity is not None and occupancy + waitlisted + batch_size <= max_capacity:
        return Registration.Status.WAITLISTED
    raise CapacityExceededError(
        requested=batch_size,
        occupancy=occupancy,
        waitlisted=waitlisted,
        capacity=capacity,
        max_capacity=max_capacity,
    )
