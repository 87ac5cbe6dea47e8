from decimal import Decimal

import pytest

from waila.decoders import ecash
from waila.dispatcher import decode
from waila.models import CashuToken, FormatFamily
from waila.networks import Network
from waila.record import SLOT_FOR, PaymentRecord

SAMPLE_INVOICE = "lnbc20m1pvjluezsp5zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zygspp5qqqsyqcyq5rqwzqfqqqsyqcyq5rqwzqfqqqsyqcyq5rqwzqfqypqhp58yjmdan79s6qqdhdzgynm4zwqd5d7xmw5fk98klysy043l2ahrqsfpp3qjmp7lwpagxun9pygexvgpjdc4jdj85fr9yq20q82gphp2nflc7jtzrcazrra7wwgzxqc8u7754cdlpfrmccae92qgzqvzq2ps8pqqqqqqpqqqqq9qqqvpeuqafqxu92d8lr6fvg0r5gv0heeeqgcrqlnm6jhphu9y00rrhy4grqszsvpcgpy9qqqqqqgqqqqq7qqzq9qrsgqdfjcdk6w3ak5pca9hwfwfh63zrrz06wwfya0ydlzpgzxkn5xagsqz7x9j4jwe7yj7vaf2k9lqsdk45kts2fd0fkr28am0u4w95tt2nsq76cqw0"
SAMPLE_CASHU_TOKEN = "cashuAeyJ0b2tlbiI6W3sibWludCI6Imh0dHBzOi8vODMzMy5zcGFjZTozMzM4IiwicHJvb2ZzIjpbeyJhbW91bnQiOjIsImlkIjoiMDA5YTFmMjkzMjUzZTQxZSIsInNlY3JldCI6IjQwNzkxNWJjMjEyYmU2MWE3N2UzZTZkMmFlYjRjNzI3OTgwYmRhNTFjZDA2YTZhZmMyOWUyODYxNzY4YTc4MzciLCJDIjoiMDJiYzkwOTc5OTdkODFhZmIyY2M3MzQ2YjVlNDM0NWE5MzQ2YmQyYTUwNmViNzk1ODU5OGE3MmYwY2Y4NTE2M2VhIn0seyJhbW91bnQiOjgsImlkIjoiMDA5YTFmMjkzMjUzZTQxZSIsInNlY3JldCI6ImZlMTUxMDkzMTRlNjFkNzc1NmIwZjhlZTBmMjNhNjI0YWNhYTNmNGUwNDJmNjE0MzNjNzI4YzcwNTdiOTMxYmUiLCJDIjoiMDI5ZThlNTA1MGI4OTBhN2Q2YzA5NjhkYjE2YmMxZDVkNWZhMDQwZWExZGUyODRmNmVjNjlkNjEyOTlmNjcxMDU5In1dfV0sInVuaXQiOiJzYXQiLCJtZW1vIjoiVGhhbmsgeW91LiJ9"
ADDR = "1andreas3batLhQa2FawWjeyjCqyBzypd"


def test_slot_table_covers_every_family() -> None:
    assert set(SLOT_FOR) == set(FormatFamily)
    assert len(set(SLOT_FOR.values())) == len(SLOT_FOR)


def test_invoice_accessors() -> None:
    record = decode(SAMPLE_INVOICE)
    assert record.payment_hash == "0001020304050607080900010203040506070809000102030405060708090102"
    assert record.expiry == 3600
    assert record.expires_at == 1496314658 + 3600
    assert record.min_final_cltv_expiry == 18
    assert len(record.route_hints) == 1
    assert record.amount_btc == Decimal("0.02")
    assert record.uri_amount_msats is None
    assert record.payment_amount_msats == 2_000_000_000


def test_invoice_amount_beats_uri_amount() -> None:
    record = decode(f"bitcoin:1RustyRX2oai4EYYDpQGWvEL62BBGqN9T?amount=1&lightning={SAMPLE_INVOICE}")
    assert record.uri_amount_msats == 100_000_000_000
    assert record.amount_msats == 2_000_000_000


def test_memo_prefers_message_then_label() -> None:
    assert decode(f"bitcoin:{ADDR}?label=L&message=M").memo == "M"
    assert decode(f"bitcoin:{ADDR}?label=L").memo == "L"
    assert decode(f"bitcoin:{ADDR}").memo is None


def test_label_and_message() -> None:
    record = decode(f"bitcoin:{ADDR}?label=L&message=M")
    assert record.label == "L"
    assert record.message == "M"
    assert decode(SAMPLE_INVOICE).label is None


def test_payjoin_accessors() -> None:
    record = decode(f"bitcoin:{ADDR}?pj=https://example.com/pj&pjos=1")
    assert record.payjoin_supported
    assert record.payjoin_endpoint == "https://example.com/pj"
    assert record.disable_output_substitution

    plain = decode(f"bitcoin:{ADDR}")
    assert not plain.payjoin_supported
    assert not plain.disable_output_substitution


def test_lnurl_auth_detection() -> None:
    record = decode("keyauth://site.com/auth?tag=login&k1=00")
    assert record.is_lnurl_auth
    assert not decode("ben@opreturnbot.com").is_lnurl_auth


def test_lnurl_for_well_known_locator_exposes_lightning_address() -> None:
    record = decode("lnurlp://opreturnbot.com/.well-known/lnurlp/ben")
    assert str(record.lightning_address) == "ben@opreturnbot.com"


def test_valid_for_network() -> None:
    record = decode(ADDR)
    assert record.valid_for_network(Network.BITCOIN) is True
    assert record.valid_for_network(Network.SIGNET) is False
    assert decode("ben@opreturnbot.com").valid_for_network(Network.BITCOIN) is None


def test_cashu_amount_in_sats() -> None:
    record = decode(SAMPLE_CASHU_TOKEN)
    assert record.amount_sats == 10
    assert record.amount_msats == 10_000
    assert record.memo is None
    assert record.network is None
    assert record.cashu_token is not None
    assert record.cashu_token.memo == "Thank you."


@pytest.mark.parametrize("unit, expected", [(None, 5_000), ("sat", 5_000), ("msat", 5), ("usd", None)])
def test_cashu_amount_depends_on_unit(unit, expected) -> None:
    token = CashuToken(encoded="cashuA", mints=("https://m.example",), amount=5, unit=unit)
    record = PaymentRecord(family=FormatFamily.CASHU_TOKEN, cashu=token)
    assert record.amount_msats == expected


def test_source_is_the_canonical_string() -> None:
    assert decode(SAMPLE_INVOICE.upper()).source == SAMPLE_INVOICE
    assert decode(SAMPLE_CASHU_TOKEN).source == ecash.parse_cashu(SAMPLE_CASHU_TOKEN).encoded


def test_records_are_frozen() -> None:
    record = decode(ADDR)
    with pytest.raises(Exception):
        record.network = None  # type: ignore[misc]
