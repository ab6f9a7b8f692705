"""
ValidationResult — outcome of multi-stage validation of a model payload.
"""
from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass
class ValidationResult:
    """Result of validating span suggestions or structured extraction output."""

    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    data: Optional[Any] = None      # cleaned payload (e.g. list of candidates)
    dropped: int = 0                # items removed during normalization
