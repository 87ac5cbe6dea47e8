"""
Decode payment strings and print what they are.

    python examples/what_am_i_looking_at.py <string> [<string> ...]

With no arguments a few sample strings are decoded instead. Nothing is
fetched from the network; for lightning addresses the LNURL a wallet
would query is printed.
"""

import sys

import waila

SAMPLES = [
    "1andreas3batLhQa2FawWjeyjCqyBzypd",
    "bitcoin:1andreas3batLhQa2FawWjeyjCqyBzypd?amount=50&label=Luke-Jr&message=Donation%20for%20project%20xyz",
    "ben@opreturnbot.com",
    "npub1u8lnhlw5usp3t9vmpz60ejpyt649z33hu82wc2hpv6m5xdqmuxhs46turz",
    "not a real payment string",
]


def describe(text: str) -> None:
    print(f"input:   {text}")
    try:
        record = waila.decode(text)
    except waila.DecodeError as exc:
        print(f"error:   {exc.kind}: {exc}")
        print()
        return

    print(f"family:  {record.family.value}")
    if record.network is not None:
        print(f"network: {record.network.value}")
    if record.amount_sats is not None:
        print(f"amount:  {record.amount_sats} sat")
    if record.memo is not None:
        print(f"memo:    {record.memo}")
    if record.lnurl is not None and record.ln_address is not None:
        print(f"lnurl:   {record.lnurl.encoded}")
    print(f"json:    {record.to_json()}")
    print()


def main() -> None:
    for text in sys.argv[1:] or SAMPLES:
        describe(text)


if __name__ == "__main__":
    main()
