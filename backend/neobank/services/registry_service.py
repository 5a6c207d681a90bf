"""
Registry Service — company prefill by trade license (simulated registry).
In production, this integrates with the issuing authority's registry API.
"""
from typing import Optional

ISSUING_AUTHORITIES = {
    "ded_dubai": "DED Dubai (Department of Economic Development)",
    "dmcc": "DMCC (Dubai Multi Commodities Centre)",
    "difc": "DIFC (Dubai International Financial Centre)",
    "jafza": "JAFZA (Jebel Ali Free Zone)",
    "dafza": "DAFZA (Dubai Airport Free Zone)",
    "tecom": "TECOM (Technology, Electronic Commerce and Media)",
    "dso": "DSO (Dubai Silicon Oasis)",
    "rakez": "RAKEZ (Ras Al Khaimah Economic Zone)",
    "other": "Other",
}

# Simulated registry record
DEMO_COMPANY = {
    "company_legal_name": "TechServe Solutions LLC",
    "legal_form": "Limited Liability Company",
    "registered_address": "Office 1205, Business Bay Tower, Dubai, UAE",
    "business_activity": "IT Consulting and Software Development Services",
}


class RegistryService:
    """Looks up company details for a trade license."""

    @staticmethod
    def lookup(issuing_authority: str, trade_license_number: str) -> Optional[dict]:
        """Return registry details, or None when the license is not on file.

        Raises:
            ValueError: on an unknown issuing authority or empty license number.
        """
        if issuing_authority not in ISSUING_AUTHORITIES:
            raise ValueError(f"Unknown issuing authority '{issuing_authority}'")
        if not trade_license_number or not trade_license_number.strip():
            raise ValueError("Please enter issuing authority and license number")

        if "DEMO" in trade_license_number or "12345" in trade_license_number:
            return dict(DEMO_COMPANY)
        return None
