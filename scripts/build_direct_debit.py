from __future__ import annotations

import argparse
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from egress import direct_debit_to_pain008_xml
from ingress import load_batch, load_creditor_profile


def _log(message: str) -> None:
    # stdout is reserved for the XML document
    print(f"[BuildDirectDebit] {message}", file=sys.stderr)


def _parse_created_at(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"--created-at must be an ISO datetime, got {value!r}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build a SEPA Direct Debit (pain.008.001.02) XML file from a JSON batch.",
    )
    parser.add_argument("batch", help="Path to the JSON batch file.")
    parser.add_argument(
        "--creditor-profile",
        default=None,
        help="JSON file with the creditor block; overrides the creditor in the batch.",
    )
    parser.add_argument(
        "--output",
        "-o",
        default=None,
        help="Write the XML to this file instead of stdout.",
    )
    parser.add_argument("--pretty", action="store_true", help="Indent the XML output.")
    parser.add_argument(
        "--created-at",
        default=None,
        help="Fixed GrpHdr/CreDtTm as ISO datetime, e.g. 2024-05-01T09:30:00 (default: now).",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        created_at = _parse_created_at(args.created_at)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    try:
        creditor = None
        if args.creditor_profile:
            _log(f"Loading creditor profile: {args.creditor_profile}")
            creditor = load_creditor_profile(args.creditor_profile)

        _log(f"Loading batch: {args.batch}")
        direct_debit = load_batch(args.batch, creditor=creditor)
        message = direct_debit.build()
    except (OSError, ValueError) as e:
        _log(f"ERROR: {e}")
        return 1

    _log(
        f"MsgId={message.message_identification}, PmtInfId={message.payment_info_id}, "
        f"NbOfTxs={message.number_of_transactions}, ReqdColltnDt={message.requested_execution_date}"
    )
    xml = direct_debit_to_pain008_xml(message, created_at=created_at, pretty_print=args.pretty)

    if args.output:
        Path(args.output).write_text(xml, encoding="utf-8")
        _log(f"Wrote {len(xml)} characters to {args.output}")
    else:
        sys.stdout.write(xml)
        if not xml.endswith("\n"):
            sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
