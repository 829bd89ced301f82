class OrderWorkflowError(Exception):
    """
    Raised inside a checkout transaction to abort it.

    Carries the service error code so the caller can turn the rollback into
    a failed ServiceResult once the atomic block has exited.
    """

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message
