import logging

import pytest

from waila.decoders import bip21
from waila.dispatcher import decode
from waila.errors import EmbeddedDecodeIgnored, MalformedFormat, NoMatchingFormat
from waila.models import FormatFamily, NodePubkey
from waila.networks import Network
from waila.resolver import decode_embedded, resolve

ADDR = "1andreas3batLhQa2FawWjeyjCqyBzypd"
SAMPLE_LNURL = "LNURL1DP68GURN8GHJ7UM9WFMXJCM99E3K7MF0V9CXJ0M385EKVCENXC6R2C35XVUKXEFCV5MKVV34X5EKZD3EV56NYD3HXQURZEPEXEJXXEPNXSCRVWFNV9NXZCN9XQ6XYEFHVGCXXCMYXYMNSERXFQ5FNS"
SAMPLE_OFFER = "lno1qgs0v8hw8d368q9yw7sx8tejk2aujlyll8cp7tzzyh5h8xyppqqqqqqgqvqcdgq2qenxzatrv46pvggrv64u366d5c0rr2xjc3fq6vw2hh6ce3f9p7z4v4ee0u7avfynjw9q"
TESTNET_ADDR = "tb1p0vztr8q25czuka5u4ta5pqu0h8dxkf72mam89cpg4tg40fm8wgmqp3gv99"


def _fails(_: str):
    raise NoMatchingFormat()


def test_decode_embedded_reports_failures_as_ignored() -> None:
    with pytest.raises(EmbeddedDecodeIgnored) as info:
        decode_embedded("lightning", "garbage", _fails)
    assert info.value.reason.startswith("lightning:")


def test_decode_embedded_rejects_families_the_parameter_cannot_carry() -> None:
    def as_node(_: str):
        return FormatFamily.NODE_PUBKEY, NodePubkey(encoded="02" + "00" * 32)

    with pytest.raises(EmbeddedDecodeIgnored):
        decode_embedded("lightning", "x", as_node)


def test_decode_embedded_rejects_invoice_in_offer_parameter() -> None:
    def as_invoice(_: str):
        return FormatFamily.BOLT11, object()

    with pytest.raises(EmbeddedDecodeIgnored):
        decode_embedded("b12", "x", as_invoice)


def test_resolve_without_embedded_values_keeps_only_the_uri() -> None:
    uri = bip21.parse(f"bitcoin:{ADDR}?amount=1")
    record = resolve(uri, _fails)
    assert record.family is FormatFamily.BIP21
    assert record.uri is uri
    assert record.invoice is None
    assert record.network is Network.BITCOIN


def test_bad_lightning_parameter_is_dropped_and_logged(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="waila.resolver")
    record = decode(f"bitcoin:{ADDR}?amount=1&lightning=lnbc1garbage")
    assert record.family is FormatFamily.BIP21
    assert record.invoice is None
    assert record.amount_sats == 100_000_000
    assert any("ignoring embedded parameter" in r.getMessage() for r in caplog.records)


def test_lnurl_in_lightning_parameter_is_dropped() -> None:
    record = decode(f"bitcoin:{ADDR}?lightning={SAMPLE_LNURL}")
    assert record.lnurl is None
    assert record.lnurl_record is None


def test_offer_in_lightning_parameter_is_merged() -> None:
    record = decode(f"bitcoin:{TESTNET_ADDR}?lightning={SAMPLE_OFFER}")
    assert record.offer is not None
    assert record.memo == "faucet"
    assert record.network is Network.SIGNET


def test_lightning_offer_wins_over_later_offer_parameter() -> None:
    first = SAMPLE_OFFER
    record = decode(f"bitcoin:{TESTNET_ADDR}?lightning={first}&lno=lno1qqqq")
    assert record.offer is not None
    assert record.offer.encoded == first


def test_malformed_container_is_not_rescued_by_embedded_values() -> None:
    with pytest.raises(MalformedFormat):
        decode(f"bitcoin:?lightning={SAMPLE_OFFER}")
