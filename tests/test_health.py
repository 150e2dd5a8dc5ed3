"""Basic health check tests."""

import pytest
from typer.testing import CliRunner

from contested.main import app, parse_cli_value
from onboarding.forms import TERMS_FIELD, fields_for_step
from onboarding.steps import WizardStep

runner = CliRunner()


def test_import_contested():
    """Test that contested package can be imported."""
    import contested
    assert contested.__version__ == "0.1.0"


def test_import_onboarding():
    """Test that the wizard core can be imported."""
    from onboarding import OnboardingWizard, UserType, WizardStep

    assert UserType("athlete") == UserType.ATHLETE
    assert WizardStep.COMPLETE > WizardStep.WELCOME
    assert OnboardingWizard is not None


def test_settings_defaults():
    from contested.config import ContestedSettings

    settings = ContestedSettings(_env_file=None)
    assert settings.contested_request_timeout is None
    assert not settings.supabase_configured


def test_version_command():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_health_command():
    result = runner.invoke(app, ["health"])
    assert result.exit_code == 0
    assert "All checks passed" in result.output


class TestParseCliValue:
    """Typed answers from the interactive wizard."""

    def _field(self, step, field_id, user_type="athlete"):
        return next(f for f in fields_for_step(step, user_type) if f.id == field_id)

    def test_blank_is_none(self):
        assert parse_cli_value(self._field(WizardStep.BASIC_PROFILE, "name"), "  ") is None

    def test_multi_select_splits_on_commas(self):
        field = self._field(WizardStep.BRAND_VALUES, "values")
        assert parse_cli_value(field, "authenticity, community,") == ["authenticity", "community"]

    def test_yes_no(self):
        assert parse_cli_value(TERMS_FIELD, "yes") is True
        assert parse_cli_value(TERMS_FIELD, "N") is False
        with pytest.raises(ValueError):
            parse_cli_value(TERMS_FIELD, "maybe")

    def test_slider_is_numeric(self):
        field = self._field(WizardStep.COMPENSATION, "budget_range", "business")
        assert parse_cli_value(field, "5000") == 5000
        assert parse_cli_value(field, "2500.5") == 2500.5
        with pytest.raises(ValueError):
            parse_cli_value(field, "lots")

    def test_text_kept_verbatim(self):
        assert parse_cli_value(self._field(WizardStep.BASIC_PROFILE, "phone"), " 555-123-4567 ") == "555-123-4567"
