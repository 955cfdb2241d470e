class EmptyClusterError(RuntimeError):
    """Raised when a nearest-point query runs against a cluster with no points."""

    def __init__(self, message: str = "Cluster is empty; seed it with add() first") -> None:
        super().__init__(message)
