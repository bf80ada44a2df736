"""Pydantic models for maintenance scan reports."""

from pydantic import BaseModel

from models.types import CheckStatus, Severity


class ScanCheck(BaseModel):
    """Outcome of one automated bug-scan check."""

    name: str
    status: CheckStatus
    message: str


class SecurityFinding(BaseModel):
    """One security-scan finding."""

    severity: Severity
    category: str
    finding: str
    recommendation: str
    auto_fixed: bool = False
