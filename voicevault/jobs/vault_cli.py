from __future__ import annotations

import argparse
import json
import sys

from voicevault.core.errors import VoiceVaultError
from voicevault.models.store import PurchaseLedger, VoiceRegistry
from voicevault.services import chain_writer
from voicevault.services.payments import breakdown_response, compute_breakdown


def _amount(text: str):
    # Parsed like a JSON number so the CLI and the API agree to the Octa
    try:
        return float(text)
    except ValueError:
        return text


def main(argv=None):
    parser = argparse.ArgumentParser(description="VoiceVault operator CLI")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p1 = sub.add_parser("breakdown", help="Show the payment split for an APT amount")
    p1.add_argument("amount", type=str)

    p2 = sub.add_parser("payment-payload", help="Build an unsigned pay_for_inference payload")
    p2.add_argument("creator_address")
    p2.add_argument("amount", type=str)
    p2.add_argument("--royalty-recipient", default=None)

    sub.add_parser("registry", help="List registered voices")

    p4 = sub.add_parser("register", help="Add a voice to the local registry")
    p4.add_argument("address")
    p4.add_argument("name")
    p4.add_argument("--wallet-address", default=None)

    p5 = sub.add_parser("purchases", help="List recorded purchases")
    p5.add_argument("--wallet", default=None, help="Only purchases made by this buyer wallet")

    p6 = sub.add_parser("verify-tx", help="Check a payment transaction on the Aptos node")
    p6.add_argument("tx_hash")
    p6.add_argument("--sender", default=None)

    sub.add_parser("sanity-check", help="Print Aptos node diagnostics")

    args = parser.parse_args(argv)

    try:
        if args.cmd in ("verify-tx", "sanity-check"):
            # Late-import to avoid overhead when unused
            from voicevault.services.chain_reader import ChainReader
            r = ChainReader.from_settings()
            if not r:
                out = {"ok": False, "error": "APTOS_NODE_URL not configured"}
            elif args.cmd == "verify-tx":
                out = r.verify_payment(args.tx_hash, sender=args.sender)
            else:
                out = {"ok": True, **r.sanity()}
            print(json.dumps(out, indent=2))
            return 0
        if args.cmd == "breakdown":
            out = breakdown_response(compute_breakdown(_amount(args.amount)))
        elif args.cmd == "payment-payload":
            built = chain_writer.build_payment_payload(
                args.creator_address, _amount(args.amount), royalty_recipient=args.royalty_recipient
            )
            out = {"payload": built["payload"], **breakdown_response(built["breakdown"])}
        elif args.cmd == "registry":
            out = {"voices": VoiceRegistry.from_settings().list_voices()}
        elif args.cmd == "register":
            out = VoiceRegistry.from_settings().register(args.address, args.name, wallet_address=args.wallet_address)
        elif args.cmd == "purchases":
            out = {"voices": PurchaseLedger.from_settings().list_purchases(args.wallet)}
        else:
            parser.error(f"unknown command {args.cmd}")
            return 2
    except VoiceVaultError as e:
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return 1

    print(json.dumps(out, indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
