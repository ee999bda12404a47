import json

from dental_ledger.api.response import err_from, ok, page_meta
from dental_ledger.services.billing_errors import ExceedsBalance, InvalidAmount


def body(res):
    return json.loads(res.body)


def test_err_from_keeps_status_code_and_details():
    res = err_from(ExceedsBalance("too much", extra={"outstanding": "30.00"}))

    assert res.status_code == 400
    assert body(res) == {
        "ok": False,
        "error": {
            "msg": "too much",
            "code": "EXCEEDS_BALANCE",
            "details": {
                "outstanding": "30.00"
            },
        },
    }


def test_err_from_uses_default_message():
    res = err_from(InvalidAmount())

    assert body(res)["error"]["msg"] == InvalidAmount.default_msg
    assert body(res)["error"]["code"] == "INVALID_AMOUNT"


def test_ok_with_page_meta():
    res = ok([1, 2], meta=page_meta(7, 2), status_code=201)

    assert res.status_code == 201
    assert body(res) == {"ok": True, "data": [1, 2], "meta": {"total": 7, "offset": 2}}
