"""
Unit tests for the violation accumulator and field errors.
"""

from podsecurity.policy.paths import PathFn, containers_path, spec_path
from podsecurity.policy.violations import (
    ErrorType,
    FieldError,
    Violations,
    forbidden,
    required,
    with_bad_value,
)


class TestFieldErrors:
    """Tests for deferred error constructors."""

    def test_forbidden(self):
        """Test a Forbidden error with a bad value."""
        err_fn = forbidden(spec_path.child("hostNetwork"), True)
        err = err_fn()
        assert err == FieldError(ErrorType.FORBIDDEN, "spec.hostNetwork", ["true"])

    def test_required(self):
        """Test a Required error has no bad value."""
        err = required(spec_path.child("securityContext", "runAsNonRoot"))()
        assert err.type == ErrorType.REQUIRED
        assert err.field == "spec.securityContext.runAsNonRoot"
        assert err.bad_value == []

    def test_disabled_path_gives_no_constructor(self):
        """Test the disabled PathFn and None produce no ErrFn."""
        assert forbidden(PathFn.disabled(), "x") is None
        assert required(PathFn.disabled()) is None
        assert forbidden(None) is None

    def test_bad_value_normalization(self):
        """Test bad values are always lists of strings."""
        path_fn = spec_path.child("x")
        assert forbidden(path_fn, False)().bad_value == ["false"]
        assert forbidden(path_fn, 0)().bad_value == ["0"]
        assert forbidden(path_fn, ["SYS_ADMIN", "NET_RAW"])().bad_value == ["SYS_ADMIN", "NET_RAW"]
        assert forbidden(path_fn, {"b", "a"})().bad_value == ["a", "b"]
        assert forbidden(path_fn)().bad_value == []

    def test_with_bad_value(self):
        """Test replacing the bad value."""
        err = with_bad_value(forbidden(spec_path.child("x"), "old"), ["new"])()
        assert err.bad_value == ["new"]
        assert with_bad_value(None, "x") is None

    def test_str_and_to_dict(self):
        """Test rendering."""
        err = FieldError(ErrorType.FORBIDDEN, "spec.hostPID", ["true"])
        assert str(err) == 'spec.hostPID: Forbidden: ["true"]'
        assert err.to_dict() == {
            "type": "FieldValueForbidden",
            "field": "spec.hostPID",
            "bad_value": ["true"],
        }
        assert str(FieldError(ErrorType.REQUIRED, "spec.x")) == "spec.x: Required value"


class TestViolations:
    """Tests for Violations."""

    def test_ordering(self):
        """Test labels and errors keep insertion order and skip empty errors."""
        violations = Violations[str](with_field_errors=True)
        e1 = forbidden(containers_path.index(0), "a")
        e2 = forbidden(containers_path.index(2), "c")

        violations.add("x", e1)
        violations.add("y")
        violations.add("z", e2, None, lambda: None)

        assert violations.data() == ["x", "y", "z"]
        assert [str(e.field) for e in violations.errors()] == ["spec.containers[0]", "spec.containers[2]"]

    def test_disabled_never_invokes(self):
        """Test error constructors are not called without field errors."""
        calls = []

        def err_fn():
            calls.append(1)
            return FieldError(ErrorType.FORBIDDEN, "spec")

        violations = Violations[str]()
        violations.add("pod", err_fn)
        violations.add_errs(err_fn)

        assert violations.data() == ["pod"]
        assert violations.errors() == []
        assert calls == []

    def test_empty(self):
        """Test an empty accumulator."""
        violations = Violations[str]()
        assert violations.empty()
        assert not violations
        assert len(violations) == 0

    def test_add_errs_without_subject(self):
        """Test errors can be recorded without a label."""
        violations = Violations[str](with_field_errors=True)
        violations.add_errs(required(spec_path.child("a")))
        assert violations.empty()
        assert len(violations.errors()) == 1

    def test_extend_and_iter(self):
        """Test extending with labels."""
        violations = Violations[str]()
        violations.extend(["a", "b"])
        assert list(violations) == ["a", "b"]
        assert len(violations) == 2
