"""pathvars exceptions."""

from typing import List
from dataclasses import dataclass


EXIT_VALIDATION = 2


@dataclass
class ValidationError:
    """One problem found in a catalog, located by its YAML path."""
    message: str
    path: str = ""

    def __str__(self) -> str:
        if self.path:
            return f"Validation error at {self.path}: {self.message}"
        return f"Validation error: {self.message}"


class CatalogValidationError(Exception):
    """Raised when a metadata catalog fails validation.

    The catalog loader collects every problem it finds before raising,
    so the CLI can report all of them and map to the validation exit code.
    """

    exit_code = EXIT_VALIDATION

    def __init__(self, errors: List[ValidationError]):
        self.errors = errors
        super().__init__("\n".join(str(error) for error in errors))
