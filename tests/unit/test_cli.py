"""Unit tests for the command-line interface."""

from typer.testing import CliRunner

from proposal_engine.cli import app

runner = CliRunner()


def _write_document(document, tmp_path):
    path = tmp_path / "proposal.json"
    path.write_text(document.model_dump_json(), encoding="utf-8")
    return path


class TestInfo:
    def test_shows_settings(self):
        result = runner.invoke(app, ["info"])
        assert result.exit_code == 0
        assert "LLM Model" in result.output
        assert "sam.gov" in result.output


class TestExportCommands:
    """Tests for export-pdf and email."""

    def test_export_html(self, document, tmp_path):
        path = _write_document(document, tmp_path)
        out = tmp_path / "out.html"

        result = runner.invoke(app, ["export-pdf", str(path), "--html", "-o", str(out)])

        assert result.exit_code == 0
        html = out.read_text(encoding="utf-8")
        assert "Company Overview" in html
        assert "co@army.mil" not in html

    def test_export_html_with_submission_info(self, document, tmp_path):
        path = _write_document(document, tmp_path)
        out = tmp_path / "out.html"

        runner.invoke(app, ["export-pdf", str(path), "--html", "--include-submission-info", "-o", str(out)])

        assert "co@army.mil" in out.read_text(encoding="utf-8")

    def test_email(self, document, tmp_path):
        path = _write_document(document, tmp_path)

        result = runner.invoke(
            app,
            ["email", str(path), "--to", "bids@army.mil", "--contact-name", "Jane Ortiz"],
        )

        assert result.exit_code == 0
        assert "RFQ Response Submission - W91247-24-Q-0042" in result.output
        assert "Dear Jane Ortiz," in result.output
        assert "mailto:bids@army.mil" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["email", str(tmp_path / "missing.json")])
        assert result.exit_code != 0

    def test_generate_rejects_bad_input(self, tmp_path):
        contract = tmp_path / "contract.json"
        contract.write_text("{}", encoding="utf-8")
        entity = tmp_path / "entity.json"
        entity.write_text("{}", encoding="utf-8")

        result = runner.invoke(app, ["generate", str(contract), str(entity)])

        assert result.exit_code == 1
        assert "Error loading input" in result.output
