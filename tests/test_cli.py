"""Tests for the command line interface."""

from unittest.mock import patch

from typer.testing import CliRunner

from shopfloor.cli import app

runner = CliRunner()


class TestDiagnose:
    """Tests for `shopfloor diagnose`."""

    def test_all_procedures_present(self, invoker):
        invoker.current_db = "ERP_AHM"

        with patch("shopfloor.services.procedures.get_procedure_invoker", return_value=invoker):
            result = runner.invoke(app, ["diagnose", "ahm"])

        assert result.exit_code == 0
        assert "AHM -> ERP_AHM" in result.output
        assert "dbo.Production_End_Manu" in result.output

    def test_missing_procedure(self, invoker):
        invoker.missing_procedures.add("dbo.FindJobCardsByPartialNumber")

        with patch("shopfloor.services.procedures.get_procedure_invoker", return_value=invoker):
            result = runner.invoke(app, ["diagnose", "KOL"])

        assert result.exit_code == 2
        assert "dbo.FindJobCardsByPartialNumber is missing" in result.output

    def test_unknown_partition(self):
        result = runner.invoke(app, ["diagnose", "LON"])

        assert result.exit_code == 1
