"""
Risk Engine — KYB risk classification from the compliance questionnaire.
Evaluated when a case is submitted.
"""
from typing import Any, List, Tuple


class RiskEngine:
    """Rule-based risk level for an onboarding case."""

    @staticmethod
    def evaluate(compliance: Any) -> Tuple[str, List[str]]:
        """Evaluate risk level from compliance answers.

        Args:
            compliance: ComplianceAnswers row (or anything with the same attributes).

        Returns:
            Tuple of (risk_level, [reasons]) with risk_level in low | medium | high.
        """
        risk_level = "low"
        reasons: List[str] = []

        def raise_to(level: str):
            nonlocal risk_level
            order = ("low", "medium", "high")
            if order.index(level) > order.index(risk_level):
                risk_level = level

        # Rule 1: Politically Exposed Person
        pep = getattr(compliance, "pep_confirmation", None)
        if pep == "yes":
            raise_to("high")
            reasons.append("PEP Declared")
        elif pep == "unsure":
            raise_to("medium")
            reasons.append("PEP Status Unconfirmed")

        # Rule 2: Cash-intensive business
        if getattr(compliance, "cash_activity", None):
            raise_to("medium")
            reasons.append("Cash Activity")

        # Rule 3: Undisclosed controllers
        if getattr(compliance, "other_controllers", None):
            raise_to("medium")
            reasons.append("Additional Controllers")

        # Rule 4: High volume with international counterparties
        if (
            getattr(compliance, "expected_monthly_volume_band", None) == "200k_plus"
            and getattr(compliance, "customer_location", None) == "international"
        ):
            raise_to("medium")
            reasons.append("High-Volume International Activity")

        return risk_level, reasons

    @staticmethod
    def requires_edd(risk_level: str) -> bool:
        """Check if EDD (Enhanced Due Diligence) is required."""
        return risk_level == "high"
