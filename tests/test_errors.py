"""Tests for duet.errors — exception hierarchy and messages."""

import pytest

from duet.errors import (
    BootstrapError,
    ConfigurationError,
    DuetError,
    ManifestDomainError,
    Redirect,
    ShapeMismatchError,
    UnitLoadError,
    UnitLoadTimeout,
    UnknownUnitError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc_type",
        [ConfigurationError, ShapeMismatchError, ManifestDomainError, BootstrapError, UnitLoadError],
    )
    def test_all_are_duet_errors(self, exc_type: type[Exception]) -> None:
        assert issubclass(exc_type, DuetError)

    def test_shape_mismatch_is_configuration_error(self) -> None:
        assert issubclass(ShapeMismatchError, ConfigurationError)

    def test_unknown_unit_is_lookup_error(self) -> None:
        with pytest.raises(LookupError):
            raise UnknownUnitError("Home")

    def test_timeout_is_load_error(self) -> None:
        assert issubclass(UnitLoadTimeout, UnitLoadError)


class TestMessages:
    def test_unknown_unit_with_flavor(self) -> None:
        exc = UnknownUnitError("Home", "lazy")
        assert exc.name == "Home"
        assert exc.flavor == "lazy"
        assert str(exc) == "No lazy view unit registered under 'Home'"

    def test_unknown_unit_without_flavor(self) -> None:
        assert str(UnknownUnitError("Home")) == "No view unit registered under 'Home'"

    def test_load_error_reason(self) -> None:
        exc = UnitLoadError("Home", "boom")
        assert exc.reason == "boom"
        assert "Home" in str(exc)
        assert "boom" in str(exc)

    def test_load_error_without_reason(self) -> None:
        assert str(UnitLoadError("Home")) == "Home"

    def test_timeout_reason(self) -> None:
        exc = UnitLoadTimeout("Home", 0.5)
        assert exc.timeout == 0.5
        assert exc.reason == "timed out after 0.5s"

    def test_redirect_target(self) -> None:
        directive = Redirect("/login")
        assert directive.target == "/login"
        assert str(directive) == "/login"
