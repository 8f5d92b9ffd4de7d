"""Tests for JSON-lines event decoding."""

from __future__ import annotations

import json

import pytest

from hook_indexer.domain import DepositEvent, EventKind, SwapEvent
from hook_indexer.jobs import EventDecodeError, job_decode_event, job_read_events_jsonl

_CHAIN_FIELDS = {
    "contract_address": "0x" + "11" * 20,
    "block_number": 10,
    "block_timestamp": 1_700_000_120,
    "transaction_hash": "0x" + "0a" * 32,
    "log_index": 3,
}


def _deposit_payload(**overrides) -> dict:
    payload = {
        "kind": "deposit",
        **_CHAIN_FIELDS,
        "sender": "0x" + "a1" * 20,
        "owner": "0x" + "a1" * 20,
        "assets0": "1000000",
        "assets1": "0xde0b6b3a7640000",
        "shares": 42,
    }
    payload.update(overrides)
    return payload


def test_decode_deposit_accepts_decimal_and_hex_integers() -> None:
    """Decode integer fields given as numbers, decimal strings and hex strings.

    Returns:
        None: Assertions validate the decoded event.

    Raises:
        AssertionError: Raised when decoding is wrong.
    """

    event = job_decode_event(_deposit_payload())

    assert isinstance(event, DepositEvent)
    assert event.kind is EventKind.DEPOSIT
    assert event.assets0 == 1_000_000
    assert event.assets1 == 10**18
    assert event.shares == 42
    assert event.referrer is None
    assert event.event_order_key() == (10, 3)


def test_decode_swap_accepts_negative_amounts() -> None:
    """Decode signed swap amounts, including negative hex."""

    event = job_decode_event(
        {
            "kind": "swap",
            **_CHAIN_FIELDS,
            "pool_id": "0x" + "cd" * 32,
            "sender": "0x" + "5e" * 20,
            "amount0": "-1000",
            "amount1": "-0x10",
            "sqrt_price_x96": str(2**96),
            "liquidity": 10**18,
            "tick": -5,
            "fee": 3000,
        }
    )

    assert isinstance(event, SwapEvent)
    assert (event.amount0, event.amount1, event.tick) == (-1000, -16, -5)
    assert event.sqrt_price_x96 == 2**96


def test_decode_optional_field_accepts_null_and_value() -> None:
    """Accept null or a string for the optional referrer."""

    assert job_decode_event(_deposit_payload(referrer=None)).referrer is None
    assert job_decode_event(_deposit_payload(referrer=" 0xabc ")).referrer == "0xabc"


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"kind": "mint"}, "unknown event kind"),
        (_deposit_payload(extra=1), "unknown fields: extra"),
        ({key: value for key, value in _deposit_payload().items() if key != "shares"}, "missing field: shares"),
        (_deposit_payload(shares=True), "deposit.shares must be an integer"),
        (_deposit_payload(shares="12abc"), "deposit.shares must be an integer string"),
        (_deposit_payload(shares=1.5), "deposit.shares must be an integer"),
        (_deposit_payload(owner=""), "deposit.owner must be a non-empty string"),
        (_deposit_payload(owner=None), "deposit.owner must not be null"),
    ],
)
def test_decode_rejects_malformed_payloads(payload: dict, message: str) -> None:
    """Reject unknown kinds and missing, unknown or mistyped fields."""

    with pytest.raises(EventDecodeError, match=message):
        job_decode_event(payload)


def test_decode_rejects_non_object_payload() -> None:
    """Reject JSON values that are not objects."""

    with pytest.raises(EventDecodeError, match="JSON object"):
        job_decode_event(["deposit"])


def test_read_events_jsonl_skips_blank_lines_and_reports_line_numbers(tmp_path) -> None:
    """Yield events in file order and tag the first bad line with its number.

    Returns:
        None: Assertions validate ordering and error location.

    Raises:
        AssertionError: Raised when file decoding is wrong.
    """

    events_file = tmp_path / "events.jsonl"
    events_file.write_text(
        "\n".join(
            [
                json.dumps(_deposit_payload()),
                "",
                json.dumps(_deposit_payload(log_index=4)),
                "{not json",
            ]
        ),
        encoding="utf-8",
    )

    events = job_read_events_jsonl(events_file)

    assert next(events).log_index == 3
    assert next(events).log_index == 4
    with pytest.raises(EventDecodeError) as error_info:
        next(events)
    assert error_info.value.line_number == 4
    assert str(error_info.value).startswith("line 4: ")


def test_read_events_jsonl_tags_decode_errors_with_line_number(tmp_path) -> None:
    """Prefix field errors with the offending line number."""

    events_file = tmp_path / "events.jsonl"
    events_file.write_text(json.dumps(_deposit_payload(shares="x")) + "\n", encoding="utf-8")

    with pytest.raises(EventDecodeError, match=r"^line 1: deposit.shares") as error_info:
        list(job_read_events_jsonl(events_file))
    assert error_info.value.line_number == 1
