#!/usr/bin/env python3
"""
otp_cli.py — Command line front end for otpgen / tokendb.

Subcommands:
- secret : print a new random Base32 secret
- add    : add a token to the database
- show   : print the current code of every token (--watch refreshes every second)
- next   : print the code of an HOTP token and advance its counter
- import : merge tokens from an andOTP / otpauth / SteamGuard file into the database
- export : write the database to an andOTP / otpauth / otpgen file

The database password comes from --password or $OTPGEN_PASSWORD; without one
the database is stored as plain JSON.

eg..:
    otpgen add --label GitHub:alice --secret JBSWY3DPEHPK3PXP
    otpgen add --type hotp --label vpn --secret JBSWY3DPEHPK3PXP --digits 8
    otpgen show --watch
    otpgen import --file backup.json.aes --format andotp-encrypted --file-password s3cret
    otpgen export --file otp_accounts.json --format andotp
"""

import argparse
import logging
import os
import sys
import time

from tokendb import codec
from tokendb.adapters import Format, export_tokens, import_tokens
from tokendb.storage import read_file, write_file

from . import config, otp_core
from .errors import GenerationError, OTPGenError
from .token import Token, TokenType

logger = logging.getLogger(__name__)


# --- Database helpers ------------------------------------------------------------
def _password(args):
    return args.password or os.environ.get("OTPGEN_PASSWORD") or None


def _load(args):
    if not os.path.exists(args.db):
        return []
    return codec.load_database_file(args.db, _password(args))


def _save(args, tokens):
    codec.save_database_file(tokens, args.db, _password(args))


def _display(token, timestamp):
    try:
        code, remaining = otp_core.generate(token, timestamp)
    except GenerationError as e:
        return f"(error: {e})", 0
    return code, remaining


# --- CLI command handlers ------------------------------------------------------------
def cmd_secret(args):
    print(otp_core.random_secret())


def cmd_add(args):
    tokens = _load(args)
    token = Token(
        args.type,
        label=args.label,
        secret=args.secret or otp_core.random_secret(),
        digits=args.digits,
        period=args.period,
        counter=args.counter,
        algorithm=args.algorithm,
    )
    if not token.valid():
        print("[!] Token is not valid (empty, or unknown algorithm)")
        return 1
    # fail before saving if the secret cannot be used
    otp_core.generate(token)
    tokens.append(token)
    _save(args, tokens)
    print(f"[*] Added {token.type.value} token '{token.label}' ({len(tokens)} total)")
    return 0


def cmd_show(args):
    tokens = _load(args)
    if not tokens:
        print("No tokens.")
        return 0

    if not args.watch:
        now = int(time.time())
        for index, token in enumerate(tokens):
            code, remaining = _display(token, now)
            suffix = f"(counter {token.counter})" if token.type is TokenType.HOTP else f"(valid ~{remaining:2d}s)"
            print(f"[{index}] {token.type.value:5} {token.label:30} {code}  {suffix}")
        return 0

    print("Press Ctrl+C to quit.\n")
    try:
        while True:
            now = int(time.time())
            line = "  ".join(f"{t.label}: {_display(t, now)[0]}" for t in tokens if t.is_time_based)
            print(line, end="\r", flush=True)
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nBye.")
    return 0


def cmd_next(args):
    tokens = _load(args)
    if not 0 <= args.index < len(tokens):
        print(f"[!] No token at index {args.index}")
        return 1
    token = tokens[args.index]

    code, _ = otp_core.generate(token)
    otp_core.advance_counter(token)
    _save(args, tokens)
    print(f"HOTP({token.digits}d, counter={token.counter - 1}): {code}")
    return 0


def cmd_import(args):
    result = import_tokens(read_file(args.file), args.format, args.file_password)
    tokens = _load(args) + result.tokens
    _save(args, tokens)
    print(f"[*] Imported {len(result.tokens)} tokens, skipped {result.skipped} ({len(tokens)} total)")
    return 0


def cmd_export(args):
    tokens = _load(args)
    write_file(args.file, export_tokens(tokens, args.format, args.file_password), backup=False)
    print(f"[*] Exported {len(tokens)} tokens to {args.file}")
    return 0


def cmd_help(args):
    print("'otpgen -h' for help.")
    return 0


# --- Argparse builder ----------------------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="otpgen", description="TOTP/HOTP/Steam/Authy code generator")
    p.add_argument("--db", default=config.DATABASE_FILE, help="Token database file")
    p.add_argument("--password", help="Database password (default: $OTPGEN_PASSWORD)")
    p.add_argument("--verbose", action="store_true", help="Verbose logging")
    sub = p.add_subparsers(dest="cmd")
    p.set_defaults(func=cmd_help)

    ps = sub.add_parser("secret", help="Print a new random Base32 secret")
    ps.set_defaults(func=cmd_secret)

    pa = sub.add_parser("add", help="Add a token")
    pa.add_argument("--type", default="totp", choices=[t.value.lower() for t in TokenType])
    pa.add_argument("--label", required=True, help="Display label, e.g. Issuer:account")
    pa.add_argument("--secret", help="Base32 secret (random if omitted)")
    pa.add_argument("--digits", type=int, default=config.DEFAULT_DIGITS)
    pa.add_argument("--period", type=int, default=config.DEFAULT_TIME_STEP, help="Time step (seconds)")
    pa.add_argument("--counter", type=int, default=0, help="Initial HOTP counter")
    pa.add_argument("--algorithm", default=config.DEFAULT_ALGORITHM)
    pa.set_defaults(func=cmd_add)

    pv = sub.add_parser("show", help="Show current codes")
    pv.add_argument("--watch", action="store_true", help="Refresh time based codes every second")
    pv.set_defaults(func=cmd_show)

    pn = sub.add_parser("next", help="Generate an HOTP code and advance its counter")
    pn.add_argument("--index", type=int, required=True, help="Token index as printed by 'show'")
    pn.set_defaults(func=cmd_next)

    formats = [f.value for f in Format]
    pi = sub.add_parser("import", help="Import tokens from a file into the database")
    pi.add_argument("--file", required=True)
    pi.add_argument("--format", required=True, choices=formats)
    pi.add_argument("--file-password", help="Password of an encrypted source file")
    pi.set_defaults(func=cmd_import)

    pe = sub.add_parser("export", help="Export the database to a file")
    pe.add_argument("--file", required=True)
    pe.add_argument("--format", required=True, choices=formats)
    pe.add_argument("--file-password", help="Encrypt the exported file with this password")
    pe.set_defaults(func=cmd_export)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    try:
        return args.func(args) or 0
    except OTPGenError as e:
        print(f"[!] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
