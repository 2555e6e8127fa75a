import pytest

from posthub.errors import AuthorizationError
from posthub.services.admin_gate import AdminGate


def test_matching_secret_is_allowed():
    gate = AdminGate("s3cret")
    assert gate.authorize("s3cret") is True
    gate.require("s3cret")


@pytest.mark.parametrize("supplied", [None, "", "S3CRET", "s3cret ", 123, ["s3cret"]])
def test_other_values_are_denied(supplied):
    gate = AdminGate("s3cret")
    assert gate.authorize(supplied) is False
    with pytest.raises(AuthorizationError):
        gate.require(supplied)


@pytest.mark.parametrize("configured", [None, ""])
def test_unconfigured_gate_denies_everything(configured):
    gate = AdminGate(configured)
    assert gate.configured is False
    assert gate.authorize(None) is False
    assert gate.authorize("") is False
    assert gate.authorize("anything") is False


def test_authorization_error_maps_to_401():
    assert AuthorizationError().status_code == 401
    assert AuthorizationError().client_message == "Unauthorized"
