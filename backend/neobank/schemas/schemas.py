"""
Pydantic Schemas — Request & Response models for API validation.
"""
from datetime import date, datetime
from typing import Optional, Dict, List, Literal
from pydantic import BaseModel, ConfigDict, Field

TransactionType = Literal["credit", "debit"]
TransactionFilter = Literal["all", "credit", "debit"]
CardType = Literal["virtual", "physical"]
ExpenseStatus = Literal["pending", "approved", "rejected", "reimbursed"]
InvoiceStatus = Literal["draft", "sent", "viewed", "paid", "overdue", "cancelled"]
PaymentStatus = Literal["draft", "pending_approval", "scheduled", "processing", "completed", "failed", "cancelled"]
CaseStatus = Literal["draft", "submitted", "in_review", "needs_info", "approved", "not_approved"]
DocType = Literal["trade_license", "moa_aoa", "emirates_id_front", "emirates_id_back", "passport", "proof_of_address"]
DocStatus = Literal["missing", "uploaded", "validating", "accepted", "rejected"]
RejectionReason = Literal["expired", "unreadable", "mismatch_name", "missing_pages", "other"]
PrefillSource = Literal["registry_lookup", "manual_entry"]
AccountUsePurpose = Literal["invoice_clients", "pay_suppliers", "both"]
VolumeBand = Literal["0_50k", "50_200k", "200k_plus"]
CustomerLocation = Literal["uae", "gcc", "international"]
PepConfirmation = Literal["no", "yes", "unsure"]
PersonRole = Literal["owner", "director", "authorized_signatory"]


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ──────────────── Account ────────────────

class AccountResponse(ORMModel):
    id: str
    organization_id: str
    organization_name: Optional[str] = None
    account_name: str
    account_number: str
    iban: Optional[str] = None
    balance: float
    available_balance: float
    currency: str
    status: str
    is_primary: bool


class LedgerEntry(BaseModel):
    id: str
    type: TransactionType
    amount: float
    currency: str
    description: str
    counterparty_name: Optional[str] = None
    reference: Optional[str] = None
    category: Optional[str] = None
    created_at: datetime
    display_date: Optional[str] = None
    status: Optional[str] = None
    source: Literal["account", "card", "expense"]


class LedgerStats(BaseModel):
    credits: float
    debits: float
    credit_count: int
    debit_count: int


class LedgerResponse(BaseModel):
    transactions: List[LedgerEntry]
    total_count: int
    stats: LedgerStats


# ──────────────── Dashboard ────────────────

class RecentTransaction(BaseModel):
    id: str
    type: TransactionType
    amount: float
    currency: str
    description: str
    category: Optional[str] = None
    created_at: datetime
    relative_time: str
    source: Literal["account", "card"]


class FlowSummary(BaseModel):
    incoming_total: float
    incoming_count: int
    outgoing_total: float
    outgoing_count: int


class PendingInvoices(BaseModel):
    total: float
    count: int


class OrganizationResponse(ORMModel):
    id: str
    name: str
    legal_form: Optional[str] = None
    jurisdiction: Optional[str] = None
    trade_license_number: Optional[str] = None
    business_activity: Optional[str] = None
    website: Optional[str] = None


class DashboardResponse(BaseModel):
    account: Optional[AccountResponse] = None
    organization: Optional[OrganizationResponse] = None
    transactions: List[RecentTransaction]
    transaction_summary: FlowSummary
    pending_invoices: PendingInvoices
    kyb_status: Optional[CaseStatus] = None


# ──────────────── Cards ────────────────

class CardControlResponse(ORMModel):
    daily_limit: Optional[float] = None
    monthly_limit: Optional[float] = None
    per_transaction_limit: Optional[float] = None
    online_enabled: bool
    contactless_enabled: bool
    atm_enabled: bool
    international_enabled: bool
    allowed_categories: List[str] = []
    blocked_categories: List[str] = []


class CardStats(BaseModel):
    total_spent: float
    transaction_count: int
    avg_transaction: int


class CardResponse(ORMModel):
    id: str
    card_type: CardType
    cardholder_name: str
    card_number_last4: Optional[str] = None
    monthly_limit: Optional[float] = None
    spending_limit: Optional[float] = None
    status: str
    expires_at: Optional[date] = None
    expiry_display: str = "N/A"
    created_at: datetime
    controls: Optional[CardControlResponse] = None
    stats: Optional[CardStats] = None


class CardCreateRequest(BaseModel):
    card_type: CardType
    cardholder_name: str = Field(..., min_length=1, max_length=128)
    monthly_limit: float = Field(..., gt=0)


class CardControlsUpdate(BaseModel):
    monthly_limit: Optional[float] = Field(None, gt=0)
    per_transaction_limit: Optional[float] = Field(None, gt=0)
    online_enabled: Optional[bool] = None
    contactless_enabled: Optional[bool] = None
    atm_enabled: Optional[bool] = None
    international_enabled: Optional[bool] = None
    allowed_categories: Optional[List[str]] = None


class CardFreezeRequest(BaseModel):
    freeze: bool


class CardTransactionResponse(ORMModel):
    id: str
    card_id: str
    amount: float
    currency: str
    merchant_name: Optional[str] = None
    merchant_category: Optional[str] = None
    status: str
    declined_reason: Optional[str] = None
    created_at: datetime


class MutationResponse(BaseModel):
    success: bool = True
    message: str


class CardMutationResponse(MutationResponse):
    card: CardResponse


# ──────────────── Expenses ────────────────

class ExpenseResponse(ORMModel):
    id: str
    description: Optional[str] = None
    amount: float
    currency: str
    expense_date: date
    category: Optional[str] = None
    vendor: Optional[str] = None
    receipt_url: Optional[str] = None
    needs_approval: bool
    status: ExpenseStatus
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    created_at: datetime


class ExpenseStats(BaseModel):
    this_month: float
    pending: float
    pending_count: int


class CategorySlice(BaseModel):
    name: str
    value: float
    color: str


class ExpensesResponse(BaseModel):
    expenses: List[ExpenseResponse]
    stats: ExpenseStats
    category_data: List[CategorySlice]


class ExpenseDetails(BaseModel):
    amount: float = Field(..., gt=0)
    description: str
    category: str
    vendor: Optional[str] = None


class ExpenseStatusUpdate(BaseModel):
    status: ExpenseStatus
    expense_data: Optional[ExpenseDetails] = None


class ExpenseMutationResponse(MutationResponse):
    expense: ExpenseResponse


# ──────────────── Invoices ────────────────

class LineItem(BaseModel):
    description: str = Field(..., min_length=1)
    quantity: float = Field(1, gt=0)
    unit_price: float = Field(..., ge=0)
    amount: float = Field(..., ge=0)


class LineItemResponse(ORMModel, LineItem):
    id: str


class InvoiceCreateRequest(BaseModel):
    client_name: str = Field(..., min_length=1)
    client_email: Optional[str] = None
    client_address: Optional[str] = None
    issue_date: date
    due_date: Optional[date] = None
    line_items: List[LineItem] = []
    tax_rate: float = Field(0, ge=0, le=100)
    currency: Optional[str] = None
    notes: Optional[str] = None
    send_immediately: bool = False


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus


class InvoiceResponse(ORMModel):
    id: str
    invoice_number: str
    client_name: str
    client_email: Optional[str] = None
    client_address: Optional[str] = None
    issue_date: date
    due_date: Optional[date] = None
    subtotal: float
    tax_rate: Optional[float] = None
    tax_amount: Optional[float] = None
    total: float
    currency: str
    notes: Optional[str] = None
    status: InvoiceStatus
    sent_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    created_at: datetime
    line_items: List[LineItemResponse] = []


class InvoiceStats(BaseModel):
    total_outstanding: float
    paid_last_30_days: float
    overdue: float


class InvoicesResponse(BaseModel):
    invoices: List[InvoiceResponse]
    stats: InvoiceStats
    next_invoice_number: str


class InvoiceMutationResponse(MutationResponse):
    invoice: InvoiceResponse


# ──────────────── Payments ────────────────

class BeneficiaryResponse(ORMModel):
    id: str
    name: str
    bank_name: Optional[str] = None
    iban: Optional[str] = None
    account_number: Optional[str] = None
    swift_code: Optional[str] = None
    country: Optional[str] = None
    currency: str
    email: Optional[str] = None
    phone: Optional[str] = None
    vendor_type: Optional[str] = None
    is_active: bool
    created_at: datetime


class BeneficiaryCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)
    bank_name: str = Field(..., min_length=1, max_length=256)
    iban: str = Field(..., min_length=15, max_length=42)
    vendor_type: str = Field("supplier", max_length=64)


class PaymentResponse(ORMModel):
    id: str
    beneficiary_id: Optional[str] = None
    beneficiary_name: Optional[str] = None
    amount: float
    currency: str
    reference: Optional[str] = None
    purpose: Optional[str] = None
    status: PaymentStatus
    scheduled_date: Optional[date] = None
    processed_at: Optional[datetime] = None
    created_at: datetime
    date_display: str = "N/A"


class PaymentCreateRequest(BaseModel):
    beneficiary_id: str
    amount: float = Field(..., gt=0)
    currency: str = Field("AED", min_length=3, max_length=3)
    reference: Optional[str] = Field(None, max_length=256)
    purpose: Optional[str] = Field(None, max_length=256)


class PaymentLinkResponse(ORMModel):
    id: str
    amount: float
    currency: str
    description: Optional[str] = None
    link_code: str
    expires_at: Optional[datetime] = None
    is_paid: bool
    paid_at: Optional[datetime] = None
    created_at: datetime


class PaymentLinkCreateRequest(BaseModel):
    amount: float = Field(..., gt=0)
    description: Optional[str] = Field(None, max_length=512)


class PaymentsResponse(BaseModel):
    beneficiaries: List[BeneficiaryResponse]
    payments: List[PaymentResponse]
    payment_links: List[PaymentLinkResponse]


class BeneficiaryMutationResponse(MutationResponse):
    beneficiary: BeneficiaryResponse


class PaymentMutationResponse(MutationResponse):
    payment: PaymentResponse


class PaymentLinkMutationResponse(MutationResponse):
    payment_link: PaymentLinkResponse


# ──────────────── Onboarding ────────────────

class CaseResponse(ORMModel):
    id: str
    user_id: str
    status: CaseStatus
    progress_percent: int
    entity_type: str
    sla_text: Optional[str] = None
    risk_level: str
    created_at: datetime
    submitted_at: Optional[datetime] = None
    updated_at: datetime


class CaseUpdateRequest(BaseModel):
    sla_text: Optional[str] = None
    entity_type: Optional[str] = None


class SectionChecks(BaseModel):
    company: bool
    ownership: bool
    compliance: bool
    documents: bool
    can_submit: bool


class CaseOverview(BaseModel):
    case: CaseResponse
    progress: int
    checks: SectionChecks
    next_route: str


class CompanyProfileResponse(ORMModel):
    case_id: str
    trade_license_number: Optional[str] = None
    issuing_authority: Optional[str] = None
    company_legal_name: Optional[str] = None
    legal_form: Optional[str] = None
    registered_address: Optional[str] = None
    business_activity: Optional[str] = None
    operating_address: Optional[str] = None
    website: Optional[str] = None
    prefill_source: Optional[PrefillSource] = None
    confirmed_by_user: bool


class CompanyProfileUpdate(BaseModel):
    trade_license_number: Optional[str] = None
    issuing_authority: Optional[str] = None
    company_legal_name: Optional[str] = None
    legal_form: Optional[str] = None
    registered_address: Optional[str] = None
    business_activity: Optional[str] = None
    operating_address: Optional[str] = None
    website: Optional[str] = None
    prefill_source: Optional[PrefillSource] = None
    confirmed_by_user: Optional[bool] = None


class RegistryLookupRequest(BaseModel):
    issuing_authority: str
    trade_license_number: str


class RegistryLookupResponse(BaseModel):
    found: bool
    prefill_source: PrefillSource
    data: Optional[Dict[str, str]] = None
    message: str


class PersonPayload(BaseModel):
    id: Optional[str] = None
    full_name: Optional[str] = None
    dob: Optional[str] = None
    nationality: Optional[str] = None
    roles: List[PersonRole] = ["owner", "director", "authorized_signatory"]
    ownership_percent: int = Field(100, ge=0, le=100)
    email: Optional[str] = None
    phone: Optional[str] = None
    is_uae_resident: bool = True
    emirates_id_number: Optional[str] = None


class PersonResponse(ORMModel, PersonPayload):
    id: str
    case_id: str


class ComplianceResponse(ORMModel):
    case_id: str
    account_use_purpose: Optional[AccountUsePurpose] = None
    expected_monthly_volume_band: Optional[VolumeBand] = None
    customer_location: Optional[CustomerLocation] = None
    cash_activity: Optional[bool] = None
    pep_confirmation: Optional[PepConfirmation] = None
    other_controllers: bool = False


class ComplianceUpdate(BaseModel):
    account_use_purpose: Optional[AccountUsePurpose] = None
    expected_monthly_volume_band: Optional[VolumeBand] = None
    customer_location: Optional[CustomerLocation] = None
    cash_activity: Optional[bool] = None
    pep_confirmation: Optional[PepConfirmation] = None
    other_controllers: Optional[bool] = None


class DocumentResponse(ORMModel):
    id: str
    case_id: str
    document_type: DocType
    status: DocStatus
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    checksum: Optional[str] = None
    expiry_date: Optional[date] = None
    validation_notes: Optional[str] = None
    rejection_reason_code: Optional[RejectionReason] = None
    uploaded_at: Optional[datetime] = None


class DocumentRow(BaseModel):
    type: DocType
    label: str
    description: str
    required: bool
    status: DocStatus
    status_label: str
    file_name: Optional[str] = None
    uploaded_at: Optional[datetime | str] = None
    rejection_reason_code: Optional[str] = None


class VerificationSummary(BaseModel):
    sections: Dict[str, List[DocumentRow]]
    required_count: int
    accepted_count: int
    all_required_accepted: bool


class DocumentsResponse(BaseModel):
    documents: List[DocumentResponse]
    verification: VerificationSummary


class DocumentReviewRequest(BaseModel):
    status: Literal["validating", "accepted", "rejected"]
    rejection_reason_code: Optional[RejectionReason] = None
    validation_notes: Optional[str] = None
    expiry_date: Optional[date] = None


class CaseTransitionRequest(BaseModel):
    status: Literal["in_review", "needs_info", "approved", "not_approved"]
    note: Optional[str] = None


class EventResponse(ORMModel):
    id: str
    case_id: str
    event_type: str
    actor: Literal["user", "system"]
    metadata: Optional[Dict] = Field(None, validation_alias="event_metadata")
    created_at: datetime


class ProgressResponse(BaseModel):
    case_id: str
    progress: int
    checks: SectionChecks


# ──────────────── Local drafts ────────────────

class DraftCompany(BaseModel):
    issuing_authority: str = ""
    trade_license_number: str = ""
    company_legal_name: str = ""
    legal_form: str = ""
    registered_address: str = ""
    business_activity: str = ""
    operating_address: Optional[str] = None
    website: Optional[str] = None
    prefill_source: Optional[PrefillSource] = None
    confirmed_by_user: bool = False


class DraftOwner(BaseModel):
    full_name: str = ""
    dob: str = ""
    nationality: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    emirates_id_number: Optional[str] = None
    roles: List[str] = ["owner", "director", "authorized_signatory"]
    ownership_percent: int = 100
    is_uae_resident: bool = True


class DraftCompliance(BaseModel):
    account_use_purpose: str = ""
    expected_monthly_volume_band: str = ""
    customer_location: str = ""
    cash_activity: bool = False
    pep_confirmation: str = ""
    other_controllers: bool = False


class DraftDocument(BaseModel):
    file_name: str
    file_data: str
    status: Literal["uploaded", "validating", "accepted", "rejected"] = "uploaded"
    uploaded_at: str
    rejection_reason_code: Optional[RejectionReason] = None


class OnboardingDraft(BaseModel):
    company: DraftCompany = Field(default_factory=DraftCompany)
    owner: DraftOwner = Field(default_factory=DraftOwner)
    compliance: DraftCompliance = Field(default_factory=DraftCompliance)
    documents: Dict[str, DraftDocument] = Field(default_factory=dict)
    submitted: bool = False
    documents_skipped: bool = False
    created_at: str = ""


class DraftResponse(BaseModel):
    draft_id: str
    data: OnboardingDraft
    progress: int


class DraftDocumentRequest(BaseModel):
    file_name: str = Field(..., min_length=1)
    file_data: str = Field(..., description="base64 data URL (image or PDF)")


# ──────────────── Generic ────────────────

class HealthResponse(BaseModel):
    status: str
    database: str
    version: str
    uptime_seconds: float

