class InvalidOperationError(RuntimeError):
    """
    Raised when an operation can not be performed given the current state of a resource
    (e.g. deleting from a table that does not exist yet).
    """


class PersonNotFound(LookupError):
    """
    Raised by :class:`PeopleService <academy.services.people_service.PeopleService>` when no person matches.
    """

    def __init__(self, name: str):
        super().__init__(f"No person named '{name}'")
        self.name = name
