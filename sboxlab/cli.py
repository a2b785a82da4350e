"""Command line for S-box design, AES with a custom S-box, and metrics.

Usage:
    python -m sboxlab.cli sbox --preset K44
    python -m sboxlab.cli metrics --matrix "57 AB D5 EA 75 BA 5D AE" --workers 4
    python -m sboxlab.cli encrypt --preset K44 --key secret "hello world"
    python -m sboxlab.cli decrypt --preset K44 --key secret <base64>
    python -m sboxlab.cli trace --preset KAES --key secret --block 00112233445566778899aabbccddeeff
    python -m sboxlab.cli export --preset K44 --out k44.json
    python -m sboxlab.cli roundtrip --config k44.json --vectors 500

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from sboxlab.cipher import aes
from sboxlab.cipher.errors import SBoxLabError
from sboxlab.cipher.sbox import format_sbox_table, is_balanced, is_bijective
from sboxlab.cipher.spec import CipherContext
from sboxlab.cipher.validator import validate_sbox
from sboxlab.config import load_settings
from sboxlab.evaluation.metrics import calculate_all_metrics, metrics_report
from sboxlab.evaluation.parallel import calculate_all_metrics_parallel
from sboxlab.evaluation.report import build_report
from sboxlab.evaluation.roundtrip import run_roundtrip_tests
from sboxlab.utils.repro import make_run_dir, read_json, write_json

logger = logging.getLogger("sboxlab.cli")


def _context_from_args(args: argparse.Namespace) -> CipherContext:
    settings = load_settings()
    key = getattr(args, "key", "") or ""
    if getattr(args, "config", None):
        return CipherContext.from_hex_dict(read_json(args.config), key=key or None)
    constant = int(args.constant, 16) if args.constant else settings.default_constant
    if args.matrix:
        return CipherContext.create(args.matrix, constant, key)
    return CipherContext.from_preset(args.preset or settings.default_preset, key=key, constant=constant)


def _emit(obj: object) -> None:
    print(json.dumps(obj, indent=2))


def cmd_sbox(args: argparse.Namespace) -> int:
    ctx = _context_from_args(args)
    print(format_sbox_table(ctx.sbox, as_hex=not args.decimal))
    ok, errs = validate_sbox(ctx.sbox)
    print(f"\nbijective={is_bijective(ctx.sbox)} balanced={is_balanced(ctx.sbox)}")
    for e in errs:
        print(f"warning: {e}", file=sys.stderr)
    return 0 if ok else 1


def cmd_metrics(args: argparse.Namespace) -> int:
    ctx = _context_from_args(args)
    workers = args.workers or load_settings().metrics_workers
    if args.full:
        _emit(metrics_report(ctx.sbox))
    elif workers > 1:
        _emit(calculate_all_metrics_parallel(ctx.sbox, workers=workers).to_dict())
    else:
        _emit(calculate_all_metrics(ctx.sbox).to_dict())
    return 0


def cmd_encrypt(args: argparse.Namespace) -> int:
    ctx = _context_from_args(args)
    ct = ctx.encrypt(args.plaintext)
    print(aes.ciphertext_to_hex(ct) if args.hex else aes.ciphertext_to_base64(ct))
    return 0


def cmd_decrypt(args: argparse.Namespace) -> int:
    ctx = _context_from_args(args)
    ct = bytes.fromhex(args.ciphertext) if args.hex else aes.ciphertext_from_base64(args.ciphertext)
    print(ctx.decrypt(ct))
    return 0


def cmd_trace(args: argparse.Namespace) -> int:
    ctx = _context_from_args(args)
    block = bytes.fromhex(args.block) if args.block else bytes(range(16))
    _emit(ctx.encrypt_with_steps(block).to_dict())
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    ctx = _context_from_args(args)
    data = ctx.to_hex_dict(include_key=args.include_key)
    if args.out:
        write_json(args.out, data)
        logger.info("Wrote %s", args.out)
    else:
        _emit(data)
    return 0


def cmd_roundtrip(args: argparse.Namespace) -> int:
    ctx = _context_from_args(args)
    result = run_roundtrip_tests(ctx, num_vectors=args.vectors, seed=args.seed)
    print(result.summary())
    for f in result.failures:
        logger.error("vector %d (%s): %s", f.vector_index, f.mode, f.error or "mismatch")
    return 0 if result.is_perfect else 1


def cmd_report(args: argparse.Namespace) -> int:
    settings = load_settings()
    ctx = _context_from_args(args)
    report = build_report(ctx, seed=args.seed, workers=args.workers or settings.metrics_workers)
    print(report.to_summary())
    if args.save:
        paths = make_run_dir(Path(settings.project_root) / settings.runs_dir, ctx.name, args.seed)
        write_json(paths.config_json, ctx.to_hex_dict())
        write_json(paths.metrics_json, report.metrics.to_dict())
        write_json(paths.report_json, report.to_dict())
        logger.info("Saved report to %s", paths.run_dir)
    return 0


def _add_cipher_args(p: argparse.ArgumentParser, with_key: bool = True) -> None:
    src = p.add_mutually_exclusive_group()
    src.add_argument("--preset", choices=["K44", "KAES"], default=None, help="Preset affine matrix")
    src.add_argument("--matrix", default=None, help="8 hex bytes, e.g. '57 AB D5 EA 75 BA 5D AE'")
    src.add_argument("--config", default=None, help="JSON file written by the export command")
    p.add_argument("--constant", default=None, help="Affine constant in hex (default 63)")
    if with_key:
        p.add_argument("--key", default=None, help="Key text, at most 16 bytes once UTF-8 encoded")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Affine S-box designer and AES-128 with a custom S-box")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("sbox", help="Print the S-box table")
    _add_cipher_args(p, with_key=False)
    p.add_argument("--decimal", action="store_true", help="Print decimal instead of hex")
    p.set_defaults(func=cmd_sbox, key=None)

    p = sub.add_parser("metrics", help="Compute NL, SAC, BIC-NL, BIC-SAC, LAP, DAP as JSON")
    _add_cipher_args(p, with_key=False)
    p.add_argument("--workers", type=int, default=None, help="Worker processes for the scans")
    p.add_argument("--full", action="store_true", help="Include SAC/BIC-SAC matrices, DU and degree")
    p.set_defaults(func=cmd_metrics)

    p = sub.add_parser("encrypt", help="Encrypt text, print base64 ciphertext")
    _add_cipher_args(p)
    p.add_argument("plaintext")
    p.add_argument("--hex", action="store_true", help="Print hex instead of base64")
    p.set_defaults(func=cmd_encrypt)

    p = sub.add_parser("decrypt", help="Decrypt base64 ciphertext")
    _add_cipher_args(p)
    p.add_argument("ciphertext")
    p.add_argument("--hex", action="store_true", help="Ciphertext is hex instead of base64")
    p.set_defaults(func=cmd_decrypt)

    p = sub.add_parser("trace", help="Print the 41-step encryption trace of one block")
    _add_cipher_args(p)
    p.add_argument("--block", default=None, help="32 hex chars (default 000102...0F)")
    p.set_defaults(func=cmd_trace)

    p = sub.add_parser("export", help="Export matrix, constant and S-box as hex JSON")
    _add_cipher_args(p)
    p.add_argument("--out", default=None, help="Output path (default stdout)")
    p.add_argument("--include-key", action="store_true")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("roundtrip", help="Randomized encrypt/decrypt verification")
    _add_cipher_args(p, with_key=False)
    p.add_argument("--vectors", type=int, default=200)
    p.add_argument("--seed", type=int, default=None)
    p.set_defaults(func=cmd_roundtrip)

    p = sub.add_parser("report", help="Metrics, avalanche and roundtrip summary")
    _add_cipher_args(p, with_key=False)
    p.add_argument("--workers", type=int, default=None)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--save", action="store_true", help="Write JSON artifacts under the runs directory")
    p.set_defaults(func=cmd_report)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = load_settings()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    if getattr(args, "seed", None) is None and hasattr(args, "seed"):
        args.seed = settings.global_seed

    try:
        return args.func(args)
    except SBoxLabError as exc:
        logger.error("%s", exc)
        return 2
    except ValueError as exc:
        logger.error("Invalid input: %s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
