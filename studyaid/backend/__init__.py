from .client import BackendClient, History, Note, SubmitResult

__all__ = ["BackendClient", "History", "Note", "SubmitResult"]
