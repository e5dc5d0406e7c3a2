"""
Formula check use case — validate formula.yml and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pqrs_bin.core.config.loader import ConfigError, find_formula_file, load_descriptor
from pqrs_bin.core.models.descriptor import Descriptor


@dataclass
class FormulaCheckResult:
    """Result of formula validation."""

    valid: bool = False
    descriptor: Descriptor | None = None
    formula_path: Path | None = None
    builtin: bool = False
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "formula_path": str(self.formula_path) if self.formula_path else None,
            "builtin": self.builtin,
            "errors": self.errors,
            "warnings": self.warnings,
            "formula": self.descriptor.to_dict() if self.descriptor else None,
        }


def check_formula(formula_path: Path | None = None) -> FormulaCheckResult:
    """Validate a formula and report issues.

    Args:
        formula_path: Optional explicit path to formula.yml.  Without
            one, a formula.yml above the cwd is used, else the built-in
            formula.
    """
    result = FormulaCheckResult()

    if formula_path is None:
        formula_path = find_formula_file()

    if formula_path is None:
        from pqrs_bin.core.data import BUILTIN_FORMULA_FILE

        formula_path = BUILTIN_FORMULA_FILE
        result.builtin = True

    result.formula_path = formula_path

    try:
        descriptor = load_descriptor(formula_path)
        result.descriptor = descriptor
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    # Semantic checks
    if not descriptor.description:
        result.warnings.append("No description set.")

    if not descriptor.homepage:
        result.warnings.append("No homepage set.")

    if "/latest/" in descriptor.url:
        result.warnings.append(
            "Download URL points at the 'latest' release; the checksum will "
            "stop matching when upstream publishes a new one. Pin the URL to "
            f"v{descriptor.version}."
        )

    if descriptor.url.startswith("http://"):
        result.warnings.append("Download URL is not HTTPS.")

    result.valid = len(result.errors) == 0
    return result
