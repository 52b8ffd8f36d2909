"""
merkle-drop — operator CLI for cumulative Merkle drops.

Commands:
  build     Build a distribution (root + per-recipient proofs) from a CSV/JSON table
  proof     Print one recipient's amount, leaf and proof from a distribution
  verify    Check a (address, amount, proof) triple against a root
  leaf      Print the leaf hash for (address, amount)
  simulate  Replay one or more cumulative distributions in an in-memory host

Global options:
  --hash TEXT            Hash function (keccak256, sha3_256, sha256)
  --json                 Output JSON instead of tables
  --verbose / -v         Debug logging
  --version              Print version and exit

Examples:
  merkle-drop build --in allocations.csv --out epoch1.json
  merkle-drop proof --dist epoch1.json --address 0xabc…
  merkle-drop verify --root 0x… --address 0x… --amount 10 --proof 0x…,0x…
  merkle-drop simulate --dist epoch1.json --dist epoch2.json
"""

from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..commitment import HashCommitment
from ..config import HASH_CHOICES, load_config
from ..controller import DropController
from ..errors import DropError, ValidationError
from ..hashing import from_hex, to_hex
from ..runtime.host import Host
from ..runtime.token import FungibleToken
from ..tree import Distribution, build_distribution, load_allocations
from ..version import __version__

log = logging.getLogger("merkle_drop.cli")

app = typer.Typer(
    name="merkle-drop",
    help="Cumulative Merkle drop tooling: build trees, print proofs, verify, simulate.",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()

# Deterministic actors for `simulate`.
SIM_ADMIN = bytes.fromhex("a1" * 20)


class GlobalContext:
    def __init__(self) -> None:
        self.hash_name: str = load_config().hash_name
        self.json_output: bool = False
        self.verbose: bool = False


_ctx = GlobalContext()


# ----------------- helpers -----------------

def _setup_logging(verbose: bool) -> None:
    if logging.getLogger().handlers:
        return
    level = logging.DEBUG if verbose else getattr(logging, load_config().log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _emit_json(obj: Any) -> None:
    typer.echo(json.dumps(obj, indent=2))


def _fail(err: DropError) -> None:
    if _ctx.json_output:
        _emit_json({"ok": False, "error": err.to_dict()})
    else:
        console.print(f"[red]error[/red] {err.code}: {err.message}")
    raise typer.Exit(code=1)


def _commitment() -> HashCommitment:
    return HashCommitment(_ctx.hash_name)


def _read_distribution(path: Path) -> Distribution:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ValidationError(f"cannot read {path}: {e}") from None
    return Distribution.from_json(text)


def _parse_proof(raw: str) -> List[bytes]:
    """Comma-separated 0x siblings, or a single packed 0x blob."""
    parts = [p.strip() for p in raw.split(",") if p.strip()]
    if len(parts) == 1:
        return _commitment().split_proof(from_hex(parts[0]))
    return [from_hex(p) for p in parts]


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


# ----------------- global options -----------------

@app.callback()
def main_callback(
    hash_name: Optional[str] = typer.Option(
        None,
        "--hash",
        help=f"Hash function ({', '.join(HASH_CHOICES)})",
        envvar="MERKLE_DROP_HASH",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output JSON instead of tables"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Print version and exit",
    ),
) -> None:
    _ctx.hash_name = (hash_name or load_config().hash_name).strip().lower()
    _ctx.json_output = json_output
    _ctx.verbose = verbose
    if _ctx.hash_name not in HASH_CHOICES:
        raise typer.BadParameter(f"unknown hash {_ctx.hash_name!r}", param_hint="--hash")
    _setup_logging(verbose)


# ----------------- commands -----------------

@app.command("build")
def build_cmd(
    input_path: Path = typer.Option(..., "--in", exists=True, dir_okay=False, help="allocations .csv or .json"),
    out: Optional[Path] = typer.Option(None, "--out", help="Write distribution JSON here (default: stdout)"),
) -> None:
    """Hash every (address, cumulative amount) pair and compute root and proofs."""
    try:
        dist = build_distribution(load_allocations(input_path), _commitment())
    except DropError as e:
        _fail(e)
        return

    log.info("built distribution of %d claims from %s", len(dist.claims), input_path)
    if out is None:
        typer.echo(dist.to_json())
        return

    out.write_text(dist.to_json() + "\n", encoding="utf-8")
    if _ctx.json_output:
        _emit_json({
            "ok": True,
            "merkleRoot": to_hex(dist.merkle_root),
            "tokenTotal": dist.token_total,
            "claims": len(dist.claims),
            "out": str(out),
        })
        return

    table = Table(box=box.SIMPLE, show_header=False)
    table.add_row("root", to_hex(dist.merkle_root))
    table.add_row("total", str(dist.token_total))
    table.add_row("recipients", str(len(dist.claims)))
    table.add_row("hash", dist.hash_name)
    table.add_row("written", str(out))
    console.print(Panel(table, title="Distribution"))


@app.command("proof")
def proof_cmd(
    dist_path: Path = typer.Option(..., "--dist", exists=True, dir_okay=False),
    address: str = typer.Option(..., "--address"),
) -> None:
    """Print the claim entry for one recipient."""
    try:
        dist = _read_distribution(dist_path)
        claim = dist.claim_for(address)
    except DropError as e:
        _fail(e)
        return

    if _ctx.json_output:
        _emit_json({
            "address": to_hex(from_hex(address)),
            "merkleRoot": to_hex(dist.merkle_root),
            "amount": claim.amount,
            "leaf": to_hex(claim.leaf),
            "proof": [to_hex(p) for p in claim.proof],
        })
        return

    console.print(f"amount: {claim.amount}")
    console.print(f"leaf:   {to_hex(claim.leaf)}")
    console.print("proof:")
    for p in claim.proof:
        console.print(f"  {to_hex(p)}")


@app.command("verify")
def verify_cmd(
    root: str = typer.Option(..., "--root"),
    address: str = typer.Option(..., "--address"),
    amount: int = typer.Option(..., "--amount", min=0),
    proof: str = typer.Option("", "--proof", help="0x siblings, comma-separated, or one packed blob"),
) -> None:
    """Recompute the root from (address, amount, proof) and compare."""
    c = _commitment()
    try:
        siblings = _parse_proof(proof) if proof else []
        leaf = c.leaf(address, amount)
        expected = from_hex(root)
        ok = c.verify(siblings, expected, leaf)
        computed = c.process_proof(siblings, leaf)
    except DropError as e:
        _fail(e)
        return

    if _ctx.json_output:
        _emit_json({"valid": ok, "leaf": to_hex(leaf), "computedRoot": to_hex(computed)})
    elif ok:
        console.print("[green]VALID[/green]")
    else:
        console.print("[red]INVALID[/red]")
        console.print(f"computed root: {to_hex(computed)}")
    if not ok:
        raise typer.Exit(code=1)


@app.command("leaf")
def leaf_cmd(
    address: str = typer.Option(..., "--address"),
    amount: int = typer.Option(..., "--amount", min=0),
) -> None:
    """Print H(address || amount as uint256)."""
    try:
        leaf = _commitment().leaf(address, amount)
    except DropError as e:
        _fail(e)
        return
    if _ctx.json_output:
        _emit_json({"leaf": to_hex(leaf)})
    else:
        typer.echo(to_hex(leaf))


@app.command("simulate")
def simulate_cmd(
    dists: List[Path] = typer.Option(..., "--dist", exists=True, dir_okay=False, help="Distribution JSON; repeat for later epochs"),
) -> None:
    """
    Deploy a token and a drop in memory, then for each distribution in order:
    top up the drop, publish the root and claim for every recipient.
    """
    try:
        loaded = [(path, _read_distribution(path)) for path in dists]
        hashes = sorted({d.hash_name for _, d in loaded})
        if len(hashes) > 1:
            raise ValidationError(
                "distributions use different hashes",
                context={str(p): d.hash_name for p, d in loaded},
            )
    except DropError as e:
        _fail(e)
        return

    # One drop serves every epoch, so the files' own hash wins over --hash.
    cfg = dataclasses.replace(load_config(), hash_name=hashes[0])
    host = Host(config=cfg)
    epochs: List[Dict[str, Any]] = []
    recipients: set = set()
    try:
        token = FungibleToken.deploy(host, owner=SIM_ADMIN, name=b"Simulated Drop", symbol=b"SIM")
        drop = DropController.deploy(host, token=token, owner=SIM_ADMIN)
        for path, dist in loaded:
            recipients.update(dist.claims)
            owed = sum(
                max(0, c.amount - drop.cumulative_claimed(addr)) for addr, c in dist.claims.items()
            )
            top_up = max(0, owed - token.balance_of(drop))
            if top_up:
                token.mint(SIM_ADMIN, drop, top_up)
            drop.set_merkle_root(SIM_ADMIN, dist.merkle_root)

            paid = 0
            for addr, c in dist.claims.items():
                if c.amount > drop.cumulative_claimed(addr):
                    paid += drop.claim(addr, c.amount, dist.merkle_root, c.proof)
            epochs.append({
                "dist": str(path),
                "merkleRoot": to_hex(dist.merkle_root),
                "funded": top_up,
                "paid": paid,
            })
            log.info("epoch %s: funded=%d paid=%d", path, top_up, paid)
    except DropError as e:
        _fail(e)
        return

    balances = {to_hex(a): token.balance_of(a) for a in sorted(recipients)}

    if _ctx.json_output:
        _emit_json({"epochs": epochs, "balances": balances, "dropBalance": token.balance_of(drop)})
        return

    t = Table(title="Epochs", box=box.SIMPLE_HEAVY)
    t.add_column("#", justify="right")
    t.add_column("root")
    t.add_column("funded", justify="right")
    t.add_column("paid", justify="right")
    for i, e in enumerate(epochs):
        t.add_row(str(i), e["merkleRoot"][:18] + "…", str(e["funded"]), str(e["paid"]))
    console.print(t)

    b = Table(title="Received", box=box.SIMPLE_HEAVY)
    b.add_column("recipient")
    b.add_column("total", justify="right")
    for addr, bal in balances.items():
        b.add_row(addr, str(bal))
    console.print(b)


if __name__ == "__main__":  # pragma: no cover
    app()
