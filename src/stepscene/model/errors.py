"""
Error taxonomy shared by the model, the controllers and the view.
"""


class StepSceneError(Exception):
    """Base class for all errors raised by stepscene."""


class ValidationError(StepSceneError, ValueError):
    """Input rejected at the boundary, before any state was touched."""


class NotFoundError(StepSceneError, KeyError):
    """A referenced node, connection or saved model does not exist."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""


class PersistenceError(StepSceneError, OSError):
    """The saved-model collection could not be read or written."""
