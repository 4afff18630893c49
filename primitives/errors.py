"""Error taxonomy for witness computation and proving.

Every error is fatal to the call that raised it. Errors carry optional
context (the artifact path, the step index) that is rendered into the message
so callers can surface them verbatim.
"""

from typing import Optional


class ProverError(Exception):
    """Base class for all proving pipeline failures."""

    def __init__(self, message: str, *, artifact: Optional[str] = None,
                 step: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.artifact = artifact
        self.step = step

    def with_context(self, *, artifact: Optional[str] = None,
                     step: Optional[int] = None) -> 'ProverError':
        """Attach context that is not already set. Returns self for re-raising."""
        if self.artifact is None:
            self.artifact = artifact
        if self.step is None:
            self.step = step
        return self

    def __str__(self) -> str:
        context = []
        if self.artifact is not None:
            context.append(f"artifact {self.artifact}")
        if self.step is not None:
            context.append(f"step {self.step}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class ArtifactIOError(ProverError):
    """An artifact file is missing or unreadable."""


class FormatError(ProverError):
    """An artifact could not be deserialized, or is of an unsupported variant."""


class AbiMismatch(ProverError):
    """An input value does not match the declared parameter signature."""


class ExecutionFailure(ProverError):
    """Witness execution failed on a structurally valid input."""


class SetupError(ProverError):
    """Public parameter generation failed."""


class ProofError(ProverError):
    """Proof generation or folding failed."""
