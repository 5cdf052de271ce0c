class PlanningError(Exception):
    pass


class PersistenceError(PlanningError):
    """The persistence collaborator answered ``success: false`` on a read."""
