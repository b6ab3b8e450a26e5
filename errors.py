class TrackerError(Exception):
    pass


class NotInitialized(TrackerError):
    """A day-number or dose query was made before a treatment start date was saved."""


class InvalidIndex(TrackerError):
    def __init__(self, medication_id: str, index: int, length: int):
        super().__init__(
            f"dose index {index} out of range for {medication_id!r} (has {length} doses)"
        )
        self.medication_id = medication_id
        self.index = index
        self.length = length


class MalformedPersistedData(TrackerError):
    pass
