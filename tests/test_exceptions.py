from team_stat_entry.config import ConfigurationError
from team_stat_entry.domain.errors import ValidationError
from team_stat_entry.exceptions import StatEntryException


class TestStatEntryException:
    def test_is_exception(self) -> None:
        assert issubclass(StatEntryException, Exception)

    def test_can_be_raised_and_caught(self) -> None:
        try:
            raise StatEntryException("test")
        except StatEntryException as e:
            assert str(e) == "test"


class TestExceptionInheritance:
    def test_configuration_error_inherits_root(self) -> None:
        assert issubclass(ConfigurationError, StatEntryException)

    def test_validation_error_caught_as_root(self) -> None:
        try:
            raise ValidationError("H cannot be negative.", "h")
        except StatEntryException as e:
            assert "negative" in str(e)
