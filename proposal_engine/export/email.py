"""Email template for submitting a generated response."""

from typing import Optional
from urllib.parse import quote

from pydantic import BaseModel, Field

from proposal_engine.document.editing import iter_nodes
from proposal_engine.models.document import DocumentNode, GeneratedDocument
from proposal_engine.models.enums import BlockType

DEFAULT_ATTACHMENT = "RFQ_Response.pdf"


class Contact(BaseModel):
    name: str = ""
    email: Optional[str] = None


class ContactInfo(BaseModel):
    """Submission details that are not part of the document itself."""

    rfq_number: Optional[str] = None
    company_name: Optional[str] = None
    submission_email: list[str] = Field(default_factory=list)
    primary_contact: Optional[Contact] = None
    secondary_contact: Optional[Contact] = None


class EmailTemplate(BaseModel):
    subject: str
    body: str
    to: list[str] = Field(default_factory=list)
    cc: list[str] = Field(default_factory=list)
    attachments: list[str] = Field(default_factory=list)


def _submission_text(document: GeneratedDocument) -> Optional[DocumentNode]:
    for node in iter_nodes(document.blocks):
        if node.type != BlockType.TEXT:
            continue
        text = node.text.lower()
        if "submission" in text or "contact" in text:
            return node
    return None


def build_email_template(
    document: GeneratedDocument,
    contact: Optional[ContactInfo] = None,
    attach_pdf: bool = True,
) -> EmailTemplate:
    """Subject, body and recipients for emailing ``document``.

    The body quotes the first Text node that mentions submission or contact
    details. Missing contact fields fall back to the document metadata.
    """
    contact = contact or ContactInfo()
    rfq_number = contact.rfq_number or document.metadata.contract_id
    company = contact.company_name or document.metadata.company_name
    addressee = (
        contact.primary_contact.name
        if contact.primary_contact and contact.primary_contact.name
        else "Contracting Officer"
    )
    submission = _submission_text(document)

    lines = [
        f"Dear {addressee},",
        "",
        f"Please find attached our complete RFQ response for {rfq_number or 'the current solicitation'}.",
        "",
    ]
    if submission is not None:
        lines += [submission.text, ""]
    lines += [
        "Key Points:",
        "• Complete response package attached",
        "• All required forms included",
        "• Technical specifications addressed",
        "• Pricing and terms provided",
        "• Compliance requirements met",
        "",
        "Please let us know if you need any additional information or clarification.",
        "",
        "Best regards,",
        company or "Your Company",
    ]

    cc = []
    if contact.secondary_contact and contact.secondary_contact.email:
        cc.append(contact.secondary_contact.email)

    return EmailTemplate(
        subject=f"RFQ Response Submission - {rfq_number or 'Current RFQ'}",
        body="\n".join(lines),
        to=list(contact.submission_email),
        cc=cc,
        attachments=[DEFAULT_ATTACHMENT] if attach_pdf else [],
    )


def mailto_link(template: EmailTemplate) -> str:
    """``mailto:`` URL carrying recipients, subject and body."""
    params = [f"subject={quote(template.subject)}", f"body={quote(template.body)}"]
    if template.cc:
        params.append(f"cc={quote(','.join(template.cc), safe='@,')}")
    recipients = quote(",".join(template.to), safe="@,")
    return f"mailto:{recipients}?{'&'.join(params)}"
