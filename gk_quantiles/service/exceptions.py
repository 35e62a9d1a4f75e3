class SummaryNotFoundError(KeyError):
    """Exception raised when a named summary does not exist"""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self):
        return f"Summary not found: {self.name}"


class SummaryExistsError(ValueError):
    """Exception raised when creating a summary under a name already in use"""
    pass
