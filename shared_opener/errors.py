class OrchestrationError(Exception):
    """Base class for copy-and-open failures shown to the user."""


class NoDestinationConfigured(OrchestrationError):
    def __init__(self):
        super().__init__("The working folder is not set.\nChoose one in Settings first.")


class DestinationCreateFailed(OrchestrationError):
    def __init__(self, folder: str, cause: OSError):
        self.folder = folder
        self.cause = cause
        super().__init__(f"Cannot create the working folder:\n{folder}\n{cause.strerror or cause}")


class SourceNotFound(OrchestrationError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"Original file not found:\n{path}\n\nCheck the shared folder connection."
        )


class CopyFailed(OrchestrationError):
    def __init__(self, source: str, destination: str, cause: OSError):
        self.source = source
        self.destination = destination
        self.cause = cause
        super().__init__(f"Failed to copy the file:\n{source}\n→ {destination}\n{cause.strerror or cause}")
