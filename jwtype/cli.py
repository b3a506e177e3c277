"""
jwtype Command Line Interface.

Provides commands for generating keys, encoding claims into tokens and
decoding (verifying) tokens.
"""

import argparse
import json
import logging
import sys
from typing import Any, Optional

from jwcrypto import jwk
from jwcrypto.common import JWException

from jwtype.config import SECRET_ENV_VAR, get_secret
from jwtype.errors import JWTError
from jwtype.jwt import JWT
from jwtype.keys import generate_key


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def load_key(value: Optional[str]) -> Any:
    """Use ``--key`` or the environment; JWK JSON becomes a JWK object."""
    value = value or get_secret()
    if value and value.lstrip().startswith("{"):
        return jwk.JWK.from_json(value)
    return value


def cmd_keygen(args: argparse.Namespace) -> int:
    """Generate a key for an algorithm and print it as a JWK."""
    try:
        key = generate_key(args.alg)
    except JWTError as e:
        print(f"Error generating key: {e}", file=sys.stderr)
        return 1

    if args.public:
        if key.get("kty") == "oct":
            print("Error: symmetric keys have no public part", file=sys.stderr)
            return 1
        print(key.export_public())
    else:
        print(key.export())
    return 0


def cmd_encode(args: argparse.Namespace) -> int:
    """Encode JSON claims into a compact token."""
    try:
        claims = json.loads(args.claims)
        header = json.loads(args.header) if args.header else {}
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON: {e}", file=sys.stderr)
        return 1

    if not isinstance(header, dict):
        print("Error: --header must be a JSON object", file=sys.stderr)
        return 1

    header.setdefault("alg", args.alg)

    try:
        secret = load_key(args.key)
        if header["alg"] != "none" and not secret:
            print(f"Error: Missing key. Set {SECRET_ENV_VAR} or use --key", file=sys.stderr)
            return 1
        print(JWT(claims, header).encode(secret))
        return 0
    except (JWTError, JWException, ValueError) as e:
        print(f"Error encoding token: {e}", file=sys.stderr)
        return 1


def cmd_decode(args: argparse.Namespace) -> int:
    """Decode a compact token, verifying it unless --skip-verify is given."""
    try:
        secret = load_key(args.key)
    except (JWException, ValueError) as e:
        print(f"Error: Invalid key: {e}", file=sys.stderr)
        return 1

    result = JWT.decode(args.token, secret, skip_verify=args.skip_verify)

    if args.json:
        output = {"status": result.status.value, "verified": result.verified}
        if result.ok:
            output["header"] = result.token.header
            output["payload"] = result.token.payload
        else:
            output["error"] = str(result.error)
        print(json.dumps(output, indent=2))
    elif result.ok:
        if not result.verified:
            print("Warning: signature not verified", file=sys.stderr)
        print(json.dumps({"header": result.token.header, "payload": result.token.payload}, indent=2))
    else:
        print(f"{result.status.value.upper()}: {result.error}", file=sys.stderr)

    return 0 if result.ok else 1


def main(argv=None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="jwtype", description="jwtype CLI - encode and decode JSON Web Tokens"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # keygen command
    p_keygen = subparsers.add_parser("keygen", help="Generate a key as a JWK")
    p_keygen.add_argument("--alg", default="HS256", help="Algorithm the key is for")
    p_keygen.add_argument("--public", action="store_true", help="Print only the public key")

    # encode command
    p_encode = subparsers.add_parser("encode", help="Encode claims into a token")
    p_encode.add_argument("claims", help="Claims as a JSON object")
    p_encode.add_argument("--alg", default="HS256", help="Signing algorithm")
    p_encode.add_argument("--header", help="Extra header members as a JSON object")
    p_encode.add_argument("--key", help="Secret, PEM or JWK JSON")

    # decode command
    p_decode = subparsers.add_parser("decode", help="Decode and verify a token")
    p_decode.add_argument("token", help="The token to decode")
    p_decode.add_argument("--key", help="Secret, PEM, or JWK JSON")
    p_decode.add_argument("--skip-verify", action="store_true", help="Do not check the signature")
    p_decode.add_argument("--json", action="store_true", help="Output as JSON")

    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.command == "keygen":
        return cmd_keygen(args)
    elif args.command == "encode":
        return cmd_encode(args)
    elif args.command == "decode":
        return cmd_decode(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
