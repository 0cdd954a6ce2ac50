"""Unit tests for HTML, PDF and email export."""

import sys
import types
from urllib.parse import unquote

import pytest

from proposal_engine.document import flatten_tree
from proposal_engine.errors import ExportError
from proposal_engine.export import (
    Contact,
    ContactInfo,
    build_email_template,
    filter_nodes,
    mailto_link,
    render_html,
    render_pdf,
)


def _ids(nodes):
    return [n.id for n in flatten_tree(nodes)]


class TestFilterNodes:
    """Tests for export-time node filtering."""

    def test_no_filters_keeps_everything(self, document):
        assert _ids(filter_nodes(document.blocks)) == _ids(document.blocks)

    def test_exclude_submission_info(self, document):
        kept = _ids(filter_nodes(document.blocks, exclude_submission_info=True))
        assert "submission" not in kept
        assert "intro" in kept

    def test_exclude_forms(self, document):
        kept = _ids(filter_nodes(document.blocks, exclude_forms=True))
        assert "sf1449" not in kept
        assert "forms" in kept

    def test_root_always_kept(self, document):
        root = document.blocks[0].model_copy(update={"text": "Submission package"})
        kept = filter_nodes([root], exclude_submission_info=True)
        assert [n.id for n in kept] == ["title"]

    def test_source_tree_untouched(self, document):
        before = _ids(document.blocks)
        filter_nodes(document.blocks, exclude_submission_info=True, exclude_forms=True)
        assert _ids(document.blocks) == before


class TestRenderHtml:
    """Tests for the HTML serializer."""

    def test_structure(self, document):
        html = render_html(document)

        assert html.startswith("<!DOCTYPE html>")
        assert '<h1 id="title">RFQ Response W91247-24-Q-0042</h1>' in html
        assert '<h2 id="overview">Company Overview</h2>' in html
        assert '<div class="form" id="sf1449">' in html
        assert "Company Name" in html
        assert "Carolina Interiors &amp; Construction LLC" in html

    def test_depth_first_order(self, document):
        html = render_html(document)
        positions = [html.index(marker) for marker in (
            "Company Overview", "We install", "Submission contact", "Required Forms", "SF-1449",
        )]
        assert positions == sorted(positions)

    def test_required_marker(self, document):
        assert 'Company Name <span class="required">*</span>' in render_html(document)

    def test_text_escaped(self, document):
        node = document.blocks[0].children[0].children[0]
        changed = node.model_copy(update={"text": "<script>alert(1)</script>"})
        overview = document.blocks[0].children[0].model_copy(
            update={"children": [changed]}
        )
        root = document.blocks[0].model_copy(update={"children": [overview]})
        html = render_html(document.model_copy(update={"blocks": [root]}))

        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_filters_applied(self, document):
        html = render_html(document, exclude_submission_info=True, exclude_forms=True)
        assert "co@army.mil" not in html
        assert 'class="form"' not in html


class TestRenderPdf:
    """Tests for PDF output through WeasyPrint."""

    def test_missing_weasyprint(self, document, tmp_path, monkeypatch):
        monkeypatch.setitem(sys.modules, "weasyprint", None)

        with pytest.raises(ExportError, match="WeasyPrint"):
            render_pdf(document, tmp_path / "out.pdf")

    def test_writes_file(self, document, tmp_path, monkeypatch):
        rendered = {}

        class FakeHTML:
            def __init__(self, string):
                rendered["html"] = string

            def write_pdf(self, target):
                with open(target, "wb") as f:
                    f.write(b"%PDF-1.7 fake")

        fake_module = types.ModuleType("weasyprint")
        fake_module.HTML = FakeHTML
        monkeypatch.setitem(sys.modules, "weasyprint", fake_module)

        path = render_pdf(document, tmp_path / "nested" / "out.pdf")

        assert path.read_bytes().startswith(b"%PDF")
        # Submission details are excluded from PDFs by default
        assert "co@army.mil" not in rendered["html"]

    def test_render_failure(self, document, tmp_path, monkeypatch):
        class BrokenHTML:
            def __init__(self, string):
                pass

            def write_pdf(self, target):
                raise OSError("no fonts")

        fake_module = types.ModuleType("weasyprint")
        fake_module.HTML = BrokenHTML
        monkeypatch.setitem(sys.modules, "weasyprint", fake_module)

        with pytest.raises(ExportError, match="no fonts"):
            render_pdf(document, tmp_path / "out.pdf")


class TestEmailTemplate:
    """Tests for the submission email."""

    def test_defaults_from_metadata(self, document):
        template = build_email_template(document)

        assert template.subject == "RFQ Response Submission - W91247-24-Q-0042"
        assert template.body.startswith("Dear Contracting Officer,")
        assert template.body.endswith("Carolina Interiors & Construction LLC")
        assert "Submission contact: Jane Ortiz, co@army.mil" in template.body
        assert template.attachments == ["RFQ_Response.pdf"]
        assert template.to == []

    def test_contact_overrides(self, document):
        contact = ContactInfo(
            rfq_number="RFQ-77",
            submission_email=["bids@army.mil"],
            primary_contact=Contact(name="Jane Ortiz"),
            secondary_contact=Contact(name="Sam Lee", email="sam@army.mil"),
        )
        template = build_email_template(document, contact, attach_pdf=False)

        assert template.subject == "RFQ Response Submission - RFQ-77"
        assert template.body.startswith("Dear Jane Ortiz,")
        assert template.to == ["bids@army.mil"]
        assert template.cc == ["sam@army.mil"]
        assert template.attachments == []

    def test_mailto_link(self, document):
        contact = ContactInfo(
            submission_email=["bids@army.mil", "co@army.mil"],
            secondary_contact=Contact(email="sam@army.mil"),
        )
        link = mailto_link(build_email_template(document, contact))

        assert link.startswith("mailto:bids@army.mil,co@army.mil?subject=")
        assert "cc=sam@army.mil" in link
        assert " " not in link
        assert "Dear Contracting Officer," in unquote(link)
