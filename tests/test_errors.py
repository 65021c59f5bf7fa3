"""Tests for courier.errors: exception hierarchy and error messages."""

import pytest

from courier.errors import (
    CompletionError,
    ConfigurationError,
    CourierError,
    DuplicateCaptureNameError,
    EngineAlreadyFinalizedError,
    IllegalStateError,
    InvalidUriError,
    OverlappingVersionedRoutesError,
    VersionRangeError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "error_type",
        [
            ConfigurationError,
            InvalidUriError,
            DuplicateCaptureNameError,
            VersionRangeError,
            OverlappingVersionedRoutesError,
            EngineAlreadyFinalizedError,
            CompletionError,
            IllegalStateError,
        ],
    )
    def test_everything_is_courier_error(self, error_type: type[Exception]) -> None:
        assert issubclass(error_type, CourierError)

    def test_startup_failures_are_configuration_errors(self) -> None:
        assert issubclass(DuplicateCaptureNameError, ConfigurationError)
        assert issubclass(VersionRangeError, ConfigurationError)
        assert issubclass(OverlappingVersionedRoutesError, ConfigurationError)

    def test_version_range_error_is_value_error(self) -> None:
        assert issubclass(VersionRangeError, ValueError)

    def test_finalized_error_is_runtime_error(self) -> None:
        assert issubclass(EngineAlreadyFinalizedError, RuntimeError)

    def test_invalid_uri_is_not_configuration_error(self) -> None:
        assert not issubclass(InvalidUriError, ConfigurationError)


class TestMessages:
    def test_duplicate_capture_names(self) -> None:
        err = DuplicateCaptureNameError("/a/<id>/<id>", ("id",))
        assert err.path == "/a/<id>/<id>"
        assert err.names == ("id",)
        assert "duplicate extraction names" in str(err)
        assert "'/a/<id>/<id>'" in str(err)

    def test_overlapping_versioned_routes(self) -> None:
        err = OverlappingVersionedRoutesError(("GET /v1/bar", "GET /v1/foo"))
        assert err.overlaps == ("GET /v1/bar", "GET /v1/foo")
        assert str(err).endswith("GET /v1/bar, GET /v1/foo")

    def test_engine_already_finalized(self) -> None:
        err = EngineAlreadyFinalizedError()
        assert str(err).startswith("Routing engine has already been initialized")


class TestCompletionError:
    def test_cause_is_kept(self) -> None:
        cause = ValueError("boom")
        err = CompletionError(cause)
        assert err.__cause__ is cause
        assert str(err) == "boom"
