"""spk: build and check signed application packages.

Subcommands:
- spk keygen <output...>                 → generate key files
- spk appid <keyfile...>                 → print the App ID of existing key files
- spk pack <dir> <keyfile> [<output>]    → create a signed .spk from a directory
- spk unpack <spkfile> [<outdir>]        → verify an .spk and extract it

Exit codes:
- 0: success
- 1: validation or I/O failure
- 2: usage error (argparse)
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from .errors import SpkError
from .keys import KeyPair, load_key_file, write_key_file
from .pack import default_output as default_spkfile
from .pack import pack_package
from .settings import get_settings
from .unpack import default_output as default_outdir
from .unpack import unpack_package


def print_app_id(app_id: str, filename: Path, only_id: bool) -> None:
  print(app_id if only_id else f"{app_id} {filename}")


def validation_error(filename: Path, problem: object) -> int:
  print(f"*** {filename}: {problem}", file=sys.stderr)
  return 1


def _problem(exc: Exception) -> str:
  if isinstance(exc, OSError) and exc.strerror:
    return f"{exc.strerror}: {exc.filename}" if exc.filename else exc.strerror
  return str(exc)


# ---------------------------------------------------------------------------
# subcommands
# ---------------------------------------------------------------------------

def cmd_keygen(args: argparse.Namespace) -> int:
  status = 0
  for output in args.output:
    key_pair = KeyPair.generate()
    try:
      write_key_file(output, key_pair)
    except OSError as exc:
      status = validation_error(output, _problem(exc))
      continue
    print_app_id(key_pair.app_id, output, args.only_id)
  return status


def cmd_appid(args: argparse.Namespace) -> int:
  status = 0
  for keyfile in args.keyfile:
    if not keyfile.exists():
      status = validation_error(keyfile, "No such file.")
      continue
    try:
      key_pair = load_key_file(keyfile)
    except (SpkError, OSError) as exc:
      status = validation_error(keyfile, _problem(exc))
      continue
    print_app_id(key_pair.app_id, keyfile, args.only_id)
  return status


def cmd_pack(args: argparse.Namespace) -> int:
  if not os.path.lexists(args.dirname):
    return validation_error(args.dirname, "Not found.")
  if not args.keyfile.exists():
    return validation_error(args.keyfile, "No such file.")

  output = args.output
  try:
    output = output or default_spkfile(args.dirname)
    result = pack_package(args.dirname, args.keyfile, output, settings=get_settings())
  except (SpkError, OSError) as exc:
    return validation_error(output or args.dirname, _problem(exc))
  print_app_id(result.app_id, result.output, args.only_id)
  return 0


def cmd_unpack(args: argparse.Namespace) -> int:
  if not args.spkfile.exists():
    return validation_error(args.spkfile, "Not found.")
  output = args.outdir or default_outdir(args.spkfile)
  if output is None:
    return validation_error(args.spkfile, "Missing <outdir>; the file name does not end in .spk.")
  if os.path.lexists(output):
    return validation_error(output, "Already exists.")

  try:
    result = unpack_package(args.spkfile, output, settings=get_settings())
  except (SpkError, OSError) as exc:
    return validation_error(args.spkfile, _problem(exc))
  print_app_id(result.app_id, args.spkfile, args.only_id)
  return 0


# ---------------------------------------------------------------------------
# parser
# ---------------------------------------------------------------------------

def _add_only_id(parser: argparse.ArgumentParser) -> None:
  parser.add_argument(
    "-o", "--only-id", action="store_true", help="Only print the app ID, not the file name."
  )


def build_parser() -> argparse.ArgumentParser:
  parser = argparse.ArgumentParser(
    prog="spk",
    description="Tool for building and checking signed .spk package files.",
  )
  parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline progress to stderr.")
  sub = parser.add_subparsers(dest="command", required=True)

  keygen = sub.add_parser(
    "keygen",
    help="Generate a new keyfile.",
    description="Create a new key pair and store it in <output>. Keep it safe: losing it means "
    "you cannot update your app, and anyone holding it can impersonate you.",
  )
  _add_only_id(keygen)
  keygen.add_argument("output", nargs="+", type=Path, metavar="<output>")
  keygen.set_defaults(func=cmd_keygen)

  appid = sub.add_parser("appid", help="Get the app ID corresponding to an existing keyfile.")
  _add_only_id(appid)
  appid.add_argument("keyfile", nargs="+", type=Path, metavar="<keyfile>")
  appid.set_defaults(func=cmd_appid)

  pack = sub.add_parser(
    "pack",
    help="Create an spk from a directory tree and a signing key.",
    description="Pack the contents of <dirname> as an spk, signing it using <keyfile>. If <output> "
    "is not given, \".spk\" is appended to the directory name.",
  )
  _add_only_id(pack)
  pack.add_argument("dirname", type=Path, metavar="<dirname>")
  pack.add_argument("keyfile", type=Path, metavar="<keyfile>")
  pack.add_argument("output", nargs="?", type=Path, metavar="<output>")
  pack.set_defaults(func=cmd_pack)

  unpack = sub.add_parser(
    "unpack",
    help="Unpack an spk to a directory, verifying its signature.",
    description="Check that <spkfile>'s signature is valid, then unpack it to <outdir>. If "
    "<outdir> is not given, the \".spk\" suffix is removed from the file name.",
  )
  _add_only_id(unpack)
  unpack.add_argument("spkfile", type=Path, metavar="<spkfile>")
  unpack.add_argument("outdir", nargs="?", type=Path, metavar="<outdir>")
  unpack.set_defaults(func=cmd_unpack)

  return parser


def main(argv: Optional[List[str]] = None) -> int:
  parser = build_parser()
  args = parser.parse_args(argv)
  level = logging.DEBUG if args.verbose else get_settings().log_level
  logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)
  return args.func(args)


if __name__ == "__main__":
  sys.exit(main())
