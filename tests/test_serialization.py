import json
from decimal import Decimal

import pytest

from waila import from_json
from waila.config import Capabilities
from waila.dispatcher import decode
from waila.errors import DecodeError, NoMatchingFormat
from waila.models import FormatFamily
from waila.networks import Network
from waila.serialization import canonical_json, to_plain

SAMPLE_INVOICE = "lnbc20m1pvjluezsp5zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zygspp5qqqsyqcyq5rqwzqfqqqsyqcyq5rqwzqfqqqsyqcyq5rqwzqfqypqhp58yjmdan79s6qqdhdzgynm4zwqd5d7xmw5fk98klysy043l2ahrqsfpp3qjmp7lwpagxun9pygexvgpjdc4jdj85fr9yq20q82gphp2nflc7jtzrcazrra7wwgzxqc8u7754cdlpfrmccae92qgzqvzq2ps8pqqqqqqpqqqqq9qqqvpeuqafqxu92d8lr6fvg0r5gv0heeeqgcrqlnm6jhphu9y00rrhy4grqszsvpcgpy9qqqqqqgqqqqq7qqzq9qrsgqdfjcdk6w3ak5pca9hwfwfh63zrrz06wwfya0ydlzpgzxkn5xagsqz7x9j4jwe7yj7vaf2k9lqsdk45kts2fd0fkr28am0u4w95tt2nsq76cqw0"
SAMPLE_BIP21 = "bitcoin:1andreas3batLhQa2FawWjeyjCqyBzypd?amount=50&label=Luke-Jr&message=Donation%20for%20project%20xyz"
SAMPLE_RGB_INVOICE = "rgb:Cbw1h3zbHgRhA6sxb4FS3Z7GTpdj9MLb7Do88qh5TUH1/RGB20/1+utxob0KPoUVTWL3WqyY6zsJY5giaugWHt5n4hEeWMQymQJmPRFPXL2n"


def test_canonical_json_is_sorted_and_compact() -> None:
    assert canonical_json({"b": 1, "a": "é"}) == '{"a":"é","b":1}'


def test_to_plain_converts_leaf_types() -> None:
    assert to_plain(b"\x01\xff") == "01ff"
    assert to_plain(Decimal("0.00001")) == "0.00001"
    assert to_plain(Network.SIGNET) == "signet"
    assert to_plain(frozenset({Network.SIGNET, Network.BITCOIN})) == ["bitcoin", "signet"]
    assert to_plain((1, (2, 3))) == [1, [2, 3]]


def test_record_dict_has_header_and_populated_slots_only() -> None:
    d = decode(SAMPLE_INVOICE).to_dict()
    assert d["family"] == "bolt11"
    assert d["source"] == SAMPLE_INVOICE
    assert d["network"] == "bitcoin"
    assert set(d) == {"family", "source", "network", "invoice"}
    assert d["invoice"]["amount_msats"] == 2_000_000_000
    assert d["invoice"]["compatible"] == ["bitcoin"]
    assert "metadata" not in d["invoice"]
    assert d["invoice"]["fallback_addresses"][0]["encoded"] == "1RustyRX2oai4EYYDpQGWvEL62BBGqN9T"


def test_unknown_network_is_omitted() -> None:
    d = decode("ben@opreturnbot.com").to_dict()
    assert "network" not in d
    assert d["ln_address"] == {"user": "ben", "domain": "opreturnbot.com"}


def test_bip21_amount_is_a_decimal_string() -> None:
    d = decode(SAMPLE_BIP21).to_dict()
    assert d["uri"]["amount_btc"] == "50"
    assert d["uri"]["address"]["kind"] == "p2pkh"


def test_to_json_is_parseable_and_matches_dict() -> None:
    record = decode(SAMPLE_BIP21)
    assert json.loads(record.to_json()) == record.to_dict()


@pytest.mark.parametrize("text", [SAMPLE_INVOICE, SAMPLE_BIP21, SAMPLE_RGB_INVOICE, "ben@opreturnbot.com"])
def test_round_trip(text: str) -> None:
    record = decode(text)
    assert from_json(record.to_json()) == record


def test_from_json_rejects_bad_documents() -> None:
    with pytest.raises(ValueError):
        from_json("{not json")
    with pytest.raises(ValueError):
        from_json("[]")
    with pytest.raises(ValueError):
        from_json('{"family": "bolt11"}')
    with pytest.raises(ValueError):
        from_json(canonical_json({"family": "dogecoin", "source": SAMPLE_INVOICE}))


def test_from_json_rejects_family_mismatch() -> None:
    doc = canonical_json({"family": FormatFamily.ONCHAIN.value, "source": SAMPLE_INVOICE})
    with pytest.raises(ValueError) as info:
        from_json(doc)
    assert not isinstance(info.value, DecodeError)


def test_from_json_surfaces_decode_errors() -> None:
    with pytest.raises(NoMatchingFormat):
        from_json(canonical_json({"family": "bolt11", "source": "hello"}))


def test_from_json_honours_capabilities() -> None:
    doc = decode(SAMPLE_RGB_INVOICE).to_json()
    with pytest.raises(DecodeError):
        from_json(doc, capabilities=Capabilities().without(FormatFamily.RGB))
