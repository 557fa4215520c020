class NotAuthenticatedError(Exception):
    """A mutation needs a signed-in user and there is none"""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)
        self.message = message
