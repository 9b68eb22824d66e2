from organizer_pool.services.pool.allocator import OrganizerPool, organizer_pool
from organizer_pool.services.pool.availability import AvailabilityEvaluator, NoOrganizerAvailable
from organizer_pool.services.pool.state_tracker import PoolStateTracker

__all__ = [
    "AvailabilityEvaluator",
    "NoOrganizerAvailable",
    "OrganizerPool",
    "PoolStateTracker",
    "organizer_pool",
]
