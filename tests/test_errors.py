# tests/test_errors.py

from __future__ import annotations

import pytest

from task_api.errors import AppError, AuthorizationError, NotFoundError, ValidationError


class TestAppError:

    def test_defaults_to_500(self):
        err = AppError("boom")
        assert err.status_code == 500
        assert str(err) == "boom"
        assert err.to_dict() == {"status": 500, "message": "boom"}

    def test_explicit_status(self):
        assert AppError("teapot", status_code=418).status_code == 418

    @pytest.mark.parametrize(
        "error_cls,status",
        [(ValidationError, 400), (AuthorizationError, 401), (NotFoundError, 404)],
    )
    def test_subclass_status(self, error_cls, status):
        err = error_cls("nope")
        assert isinstance(err, AppError)
        assert err.to_dict() == {"status": status, "message": "nope"}
