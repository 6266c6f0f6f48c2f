"""
Domain errors raised by the orchestration layer.

Every error carries a plain-language ``user_message`` that routers can
hand back to the user as-is. Transport and protocol failures of the
remote client are chained as ``__cause__`` so the logs keep the
distinction while the user sees one generic message.
"""

from typing import Optional


class ElieError(Exception):
    """Base class for user-reportable failures."""

    user_message = "Something went wrong. Please try again."

    def __init__(self, user_message: Optional[str] = None):
        if user_message is not None:
            self.user_message = user_message
        super().__init__(self.user_message)


# Preconditions, detected before any remote call

class Offline(ElieError):
    user_message = "No internet connection. Please check your connection and try again."


class MissingConfiguration(ElieError):
    user_message = "API configuration is missing. Please configure it in Settings."


class MissingAssistantBinding(ElieError):
    """Assistant id or vector store id is blank.

    ``message`` is the synthetic bot message persisted in the
    conversation, when there was a conversation to write it to.
    """

    user_message = "Assistant config is missing. Please update your settings."

    def __init__(self, message=None, user_message: Optional[str] = None):
        self.message = message
        super().__init__(user_message)


class NotFound(ElieError):
    user_message = "The requested item was not found."


# Workflow failures

class RunFailed(ElieError):
    user_message = "We had trouble processing your request. Please check your connection."


class RunTimeout(RunFailed):
    user_message = "The assistant took too long to answer. Please try again."


class IngestionFailed(ElieError):
    user_message = "We couldn't upload your file. Please try again."


class UploadFailed(IngestionFailed):
    user_message = "We couldn't upload your file. Please try again."


class RegistrationFailed(IngestionFailed):
    user_message = "File registration failed. Your file was not saved."


class RemoteOperationFailed(ElieError):
    """A management call (assistants, vector stores, file deletion) failed."""

    user_message = "We couldn't complete that request right now. Please try again later."
