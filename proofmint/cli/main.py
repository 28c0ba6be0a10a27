"""
proofmint - command-line tools for allow-list gated minting.

Commands:
  - proofmint leaf IDENTITY                   leaf hash of an identity
  - proofmint root IDENTITY... | --file F     committed root of an allow-list
  - proofmint proof IDENTITY -m ... | -f F    Merkle proof for one member
  - proofmint verify IDENTITY --root R -p H   check a proof (exit 1 if not a member)
  - proofmint simulate IDENTITY...            run a local registry, mint per member
  - proofmint config                          effective configuration

Global options:
  --hash TEXT            Digest for leaves/nodes (keccak256, sha3_256)
  --json                 Output JSON instead of human-readable text
  --verbose / -v         Enable DEBUG logging

Examples:
  proofmint root 0x1111111111111111111111111111111111111111 0x2222222222222222222222222222222222222222
  proofmint proof 0x1111... --file allowlist.txt
  proofmint verify 0x1111... --root 0xabc... -p 0xdef... -p 0x123...
"""

from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, List, NoReturn, Optional

import typer

from ..config import SUPPORTED_HASHES, MintConfig, load_config
from ..contracts.registry import AllowlistRegistry
from ..errors import MintError
from ..merkle import leaf_hash, verify as verify_proof
from ..runtime.context import ContextError, to_bytes, to_hex
from ..runtime.events_api import events_for_receipt
from ..runtime.host import Host
from ..tools.allowlist import AllowList, AllowListError

log = logging.getLogger("proofmint.cli")

app = typer.Typer(
    name="proofmint",
    help="Allow-list gated NFT registry tools",
    no_args_is_help=True,
    add_completion=False,
)

DEFAULT_AUTHORITY = "0x" + "ad" * 20


class GlobalContext:
    def __init__(self) -> None:
        self.hash_name: Optional[str] = None
        self.json_output: bool = False
        self.verbose: bool = False

    def config(self) -> MintConfig:
        cfg = load_config()
        if self.hash_name:
            cfg = dataclasses.replace(cfg, hash_name=self.hash_name)
        return cfg


_ctx = GlobalContext()


@app.callback()
def main_callback(
    hash_name: Optional[str] = typer.Option(
        None,
        "--hash",
        help=f"Digest for leaves and inner nodes ({', '.join(SUPPORTED_HASHES)}); overrides PROOFMINT_HASH",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output JSON instead of human-readable text"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable DEBUG logging"),
) -> None:
    """
    proofmint CLI: build allow-lists, produce and check proofs, and exercise a
    local registry.
    """
    if hash_name is not None and hash_name not in SUPPORTED_HASHES:
        typer.echo(f"Error: --hash must be one of {', '.join(SUPPORTED_HASHES)}", err=True)
        raise typer.Exit(2)
    _ctx.hash_name = hash_name
    _ctx.json_output = json_output
    _ctx.verbose = verbose
    level = logging.DEBUG if verbose else getattr(logging, load_config().log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------


def _pretty(obj: Any) -> str:
    return json.dumps(obj, indent=2, ensure_ascii=False)


def _fail(msg: str, code: int = 2) -> NoReturn:
    typer.echo(f"Error: {msg}", err=True)
    raise typer.Exit(code)


def _load_allowlist(identities: Optional[List[str]], file: Optional[Path]) -> AllowList:
    hash_name = _ctx.config().hash_name
    try:
        if file is not None:
            return AllowList.from_file(file, hash_name=hash_name)
        if not identities:
            _fail("provide identities as arguments or --file")
        return AllowList(identities, hash_name=hash_name)
    except (AllowListError, ContextError) as e:
        _fail(str(e))
    except OSError as e:
        _fail(f"cannot read {file}: {e}")


def _render_uri(template: str, index: int, identity: bytes) -> str:
    try:
        return template.format(index=index, identity=to_hex(identity))
    except (KeyError, IndexError, AttributeError, ValueError) as e:
        _fail(f"bad --uri template {template!r}: {e!r}")


# ---------------------------------------------------------------------------
# commands
# ---------------------------------------------------------------------------


@app.command()
def leaf(identity: str = typer.Argument(..., help="Identity as hex (0x...)")) -> None:
    """Print the leaf hash of an identity."""
    try:
        ident = to_bytes(identity)
    except ContextError as e:
        _fail(str(e))
    value = to_hex(leaf_hash(ident, hash_name=_ctx.config().hash_name))
    if _ctx.json_output:
        typer.echo(_pretty({"identity": to_hex(ident), "leaf": value}))
    else:
        typer.echo(value)


@app.command()
def root(
    identities: Optional[List[str]] = typer.Argument(None, help="Allow-list members as hex"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="JSON array or one identity per line"),
) -> None:
    """Print the committed root of an allow-list."""
    tree = _load_allowlist(identities, file)
    if _ctx.json_output:
        typer.echo(_pretty({"root": to_hex(tree.root), "members": len(tree), "depth": tree.depth, "hash": tree.hash_name}))
    else:
        typer.echo(to_hex(tree.root))


@app.command()
def proof(
    identity: str = typer.Argument(..., help="Member to prove"),
    member: Optional[List[str]] = typer.Option(None, "--member", "-m", help="Allow-list member (repeatable)"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="JSON array or one identity per line"),
    bundle: bool = typer.Option(False, "--bundle", help="Print root and every member's proof"),
) -> None:
    """Print the Merkle proof of one member as a JSON array of hex hashes."""
    tree = _load_allowlist(member, file)
    if bundle:
        typer.echo(_pretty(tree.to_json()))
        return
    try:
        path = tree.proof(identity)
    except (AllowListError, ContextError) as e:
        _fail(str(e))
    typer.echo(_pretty([to_hex(h) for h in path]))


@app.command()
def verify(
    identity: str = typer.Argument(..., help="Claimed member"),
    root_hex: str = typer.Option(..., "--root", "-r", help="Committed root (hex)"),
    proof_hex: Optional[List[str]] = typer.Option(None, "--proof", "-p", help="Sibling hash (repeatable, leaf to root)"),
) -> None:
    """Check a proof; exit status 0 for a member, 1 otherwise."""
    cfg = _ctx.config()
    try:
        ident = to_bytes(identity)
        root_b = to_bytes(root_hex)
        siblings = [to_bytes(h) for h in proof_hex or []]
    except ContextError as e:
        _fail(str(e))
    ok = verify_proof(
        leaf_hash(ident, hash_name=cfg.hash_name),
        siblings,
        root_b,
        hash_name=cfg.hash_name,
        max_depth=cfg.max_proof_depth,
    )
    if _ctx.json_output:
        typer.echo(_pretty({"identity": to_hex(ident), "member": ok}))
    else:
        typer.echo("member" if ok else "not a member")
    if not ok:
        raise typer.Exit(1)


@app.command()
def simulate(
    identities: Optional[List[str]] = typer.Argument(None, help="Allow-list members as hex"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="JSON array or one identity per line"),
    authority: str = typer.Option(DEFAULT_AUTHORITY, "--authority", help="Identity that initializes the registry"),
    uri_template: str = typer.Option(
        "ipfs://proofmint/{index}.json",
        "--uri",
        help="Metadata URI template; {index} and {identity} are substituted",
    ),
) -> None:
    """
    Initialize an in-memory registry with the allow-list root, proof-mint once
    per member and print the resulting event log.
    """
    tree = _load_allowlist(identities, file)
    uris = [_render_uri(uri_template, i, ident) for i, ident in enumerate(tree.identities)]
    reg = AllowlistRegistry(Host(config=_ctx.config()))
    try:
        reg.initialize(authority, tree.root)
        for ident, uri in zip(tree.identities, uris):
            token_id = reg.mint_by_proof(ident, tree.proof(ident), uri)
            log.info("minted token %d to %s", token_id, to_hex(ident))
    except MintError as e:
        _fail(str(e), code=1)
    except ContextError as e:
        _fail(str(e))

    receipt = [ev.to_dict() for ev in events_for_receipt(reg.events)]
    if _ctx.json_output:
        typer.echo(_pretty({"root": to_hex(tree.root), "total_supply": reg.total_supply(), "events": receipt}))
        return
    typer.echo(f"root: {to_hex(tree.root)}")
    typer.echo(f"total supply: {reg.total_supply()}")
    for ev in receipt:
        args = " ".join(f"{a['k']}={a['v']}" for a in ev["args"])
        typer.echo(f"{ev['name']} {args}")


@app.command("config")
def show_config() -> None:
    """Print the effective configuration as JSON."""
    typer.echo(_pretty(_ctx.config().as_dict()))


def main() -> None:  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
