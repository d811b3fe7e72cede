import logging

import pytest

from tuition_ledger.core.exceptions import (
    DuplicateVoucherError,
    InternalServiceError,
    StudentNotFoundError,
    wrap_unexpected_errors,
)


async def test_service_errors_pass_through() -> None:
    @wrap_unexpected_errors("load student")
    async def load():
        raise StudentNotFoundError(7)

    with pytest.raises(StudentNotFoundError) as exc_info:
        await load()
    assert exc_info.value.status_code == 404


async def test_unexpected_errors_are_wrapped(caplog, monkeypatch) -> None:
    monkeypatch.setattr(logging.getLogger("tuition_ledger"), "propagate", True)

    @wrap_unexpected_errors("load student")
    async def load():
        raise KeyError("students")

    with pytest.raises(InternalServiceError) as exc_info:
        await load()

    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "Failed to load student"
    assert isinstance(exc_info.value.__cause__, KeyError)
    assert "Unexpected failure while trying to load student" in caplog.text


def test_duplicate_voucher_message_names_the_table() -> None:
    invoice = DuplicateVoucherError("BOR-1", 4, "INVOICE")
    line = DuplicateVoucherError("BOR-1", 9, "LINE_ITEM", "Ana")

    assert invoice.message == "Voucher number BOR-1 was already used on invoice #4. Student: N/A"
    assert line.message == "Voucher number BOR-1 was already used on payment #9. Student: Ana"
