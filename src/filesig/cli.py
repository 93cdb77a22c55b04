"""Command-line interface for filesig.

Key material comes from the same environment variables the server reads
(ED25519_PRIVATE_KEY, ED25519_PUBLIC_KEY, ED25519_PUBLIC_KEYS_PREVIOUS).

Example:
    >>> # From terminal:
    >>> # filesig --version
    >>> # filesig keys generate --out keys.env
    >>> # filesig keys discovery
    >>> # filesig sign --file report.pdf --identity alice@example.com
    >>> # filesig verify --file report.pdf --identity alice@example.com \\
    >>> #     --timestamp 1700000000000 --signature <sig>
    >>> # filesig token decode <token>
    >>> # filesig trust 7
"""

import json
import sys
from pathlib import Path
from typing import Annotated, Any, Optional

import typer

from filesig import __version__
from filesig.codec import decode_token, encode_token, fingerprint_file
from filesig.config import Settings
from filesig.crypto.keys import generate_keypair_base64
from filesig.crypto.registry import KeyRegistry
from filesig.crypto.signing import Signer
from filesig.crypto.verify import Verifier, verify_with_key
from filesig.errors import FileSigError
from filesig.links import build_share_token, create_verification_url
from filesig.trust import bucket_for

app = typer.Typer(help="Detached Ed25519 signatures over file fingerprints.")

keys_app = typer.Typer(help="Ed25519 key generation and discovery.")
app.add_typer(keys_app, name="keys")

token_app = typer.Typer(help="Encode and decode shareable tokens.")
app.add_typer(token_app, name="token")

# Restrict generated key files to owner read/write only
PRIVATE_KEY_FILE_MODE = 0o600

HashOption = Annotated[
    Optional[str],
    typer.Option("--hash", help="SHA-256 hex fingerprint of the content."),
]
FileOption = Annotated[
    Optional[Path],
    typer.Option("--file", "-f", help="File to fingerprint instead of passing --hash."),
]
IdentityOption = Annotated[
    str,
    typer.Option(..., "--identity", "-i", help="Signer identity (e.g. an email address)."),
]


def _fail(exc: FileSigError) -> typer.Exit:
    typer.echo(f"Error: {exc.message}", err=True)
    return typer.Exit(2)


def _resolve_fingerprint(file_hash: str | None, file: Path | None) -> str:
    if (file_hash is None) == (file is None):
        raise typer.BadParameter("Pass exactly one of --hash or --file.")
    if file is not None:
        if not file.is_file():
            raise typer.BadParameter(f"File not found: {file}")
        return fingerprint_file(file)
    assert file_hash is not None
    return file_hash


def _registry() -> KeyRegistry:
    return KeyRegistry(Settings.from_env().keys)


@keys_app.command("generate")
def keys_generate(
    out: Annotated[
        Optional[Path],
        typer.Option("--out", "-o", help="Write env assignments to this file (mode 0600)."),
    ] = None,
) -> None:
    """Generate a key pair as ED25519_PRIVATE_KEY / ED25519_PUBLIC_KEY assignments.

    Nothing is installed: move the previous ED25519_PUBLIC_KEY into
    ED25519_PUBLIC_KEYS_PREVIOUS to keep old signatures verifiable.
    """
    private_b64, public_b64 = generate_keypair_base64()
    lines = f"ED25519_PRIVATE_KEY={private_b64}\nED25519_PUBLIC_KEY={public_b64}\n"
    if out is None:
        typer.echo(lines, nl=False)
        return
    if out.exists() and out.is_dir():
        raise typer.BadParameter(f"Output path is a directory: {out}")
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(lines, encoding="utf-8")
    try:
        out.chmod(PRIVATE_KEY_FILE_MODE)
    except OSError as exc:
        typer.echo(
            f"Warning: could not set file permissions to 0600: {exc}. "
            "Ensure the key file is not readable by others.",
            err=True,
        )
    typer.echo(f"Key pair written to {out}")


@keys_app.command("discovery")
def keys_discovery() -> None:
    """Print the public key discovery document for the configured keys."""
    try:
        document = _registry().discovery_document()
    except FileSigError as exc:
        raise _fail(exc) from exc
    typer.echo(json.dumps(document.to_wire(), indent=2))


@app.command("sign")
def sign(
    identity: IdentityOption,
    file_hash: HashOption = None,
    file: FileOption = None,
    timestamp: Annotated[
        Optional[int],
        typer.Option("--timestamp", "-t", help="Milliseconds since epoch (default: now)."),
    ] = None,
    share: Annotated[
        bool,
        typer.Option("--share", help="Print a verification URL instead of the bundle JSON."),
    ] = False,
) -> None:
    """Sign a fingerprint with the current key and print the signature bundle."""
    fingerprint = _resolve_fingerprint(file_hash, file)
    settings = Settings.from_env()
    try:
        bundle = Signer(KeyRegistry(settings.keys)).issue_for(fingerprint, identity, timestamp)
    except FileSigError as exc:
        raise _fail(exc) from exc
    if share:
        typer.echo(create_verification_url(build_share_token(bundle), settings.verify_base_url))
    else:
        typer.echo(json.dumps(bundle.to_wire(), indent=2))


@app.command("verify")
def verify(
    identity: IdentityOption,
    timestamp: Annotated[
        int, typer.Option(..., "--timestamp", "-t", help="Timestamp from the bundle (ms).")
    ],
    signature: Annotated[
        str, typer.Option(..., "--signature", "-s", help="URL-safe base64 signature.")
    ],
    file_hash: HashOption = None,
    file: FileOption = None,
    public_key: Annotated[
        Optional[str],
        typer.Option(
            "--public-key",
            help="Check against this SPKI base64 key only, instead of the accepted set.",
        ),
    ] = None,
) -> None:
    """Verify a signature. Exit code 1 when it does not verify."""
    payload = {
        "fingerprint": _resolve_fingerprint(file_hash, file),
        "identity": identity,
        "timestamp": timestamp,
    }
    try:
        if public_key is not None:
            matched = public_key if verify_with_key(payload, signature, public_key) else None
        else:
            matched = Verifier(_registry()).verify_against_accepted_keys(payload, signature)
    except FileSigError as exc:
        raise _fail(exc) from exc
    if matched is None:
        typer.echo("Signature invalid", err=True)
        raise typer.Exit(1)
    typer.echo(f"Signature valid (key: {matched})")


@token_app.command("encode")
def token_encode(
    source: Annotated[
        str, typer.Argument(help="Path to a JSON file, or '-' to read JSON from stdin.")
    ],
) -> None:
    """Encode a JSON document as a URL-safe token."""
    text = sys.stdin.read() if source == "-" else _read_text(Path(source))
    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"Invalid JSON: {exc}") from exc
    typer.echo(encode_token(data))


def _read_text(path: Path) -> str:
    if not path.is_file():
        raise typer.BadParameter(f"File not found: {path}")
    return path.read_text(encoding="utf-8")


@token_app.command("decode")
def token_decode(token: Annotated[str, typer.Argument(help="Token to decode.")]) -> None:
    """Decode a token and pretty-print its JSON."""
    try:
        data = decode_token(token)
    except FileSigError as exc:
        raise _fail(exc) from exc
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


@app.command("trust")
def trust(count: Annotated[int, typer.Argument(help="Signature count for an identity.")]) -> None:
    """Print the trust level for a signature count."""
    typer.echo(bucket_for(count).value)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def cli(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show filesig version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """filesig CLI entrypoint."""


def main() -> None:
    """Run the filesig CLI."""
    app()


if __name__ == "__main__":
    main()
