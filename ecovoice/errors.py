# ecovoice/errors.py
from .schemas import Notice


class EcoVoiceError(Exception):
    """Base error. Every failure degrades to a notice shown to the user."""

    status_code = 500
    title = "Something went wrong"

    def __init__(self, description: str = "", title: str = None):
        if title:
            self.title = title
        self.description = description
        super().__init__(description or self.title)

    @property
    def notice(self) -> Notice:
        return Notice(title=self.title, description=self.description, variant="destructive")


class FormValidationError(EcoVoiceError):
    status_code = 400
    title = "Please check the form"


class RecognitionError(EcoVoiceError):
    status_code = 400
    title = "Voice Recognition Error"


class PersistenceError(EcoVoiceError):
    status_code = 503
    title = "Could not save your data"


class StorageCorruptError(PersistenceError):
    title = "Saved data is unreadable"


class NotFoundError(EcoVoiceError):
    status_code = 404
    title = "Not found"


class ConflictError(EcoVoiceError):
    status_code = 409
    title = "Already exists"
