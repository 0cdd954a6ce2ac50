"""Serializers over the final document tree."""

from .email import Contact, ContactInfo, EmailTemplate, build_email_template, mailto_link
from .pdf import filter_nodes, render_html, render_pdf

__all__ = [
    "Contact",
    "ContactInfo",
    "EmailTemplate",
    "build_email_template",
    "mailto_link",
    "filter_nodes",
    "render_html",
    "render_pdf",
]
