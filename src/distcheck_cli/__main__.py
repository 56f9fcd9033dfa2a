from __future__ import annotations
import pathlib
import typer
from rich import print
from rich.markup import escape

from distcheck_api.crypto import H, normalize_address
from distcheck_api.loader import (
    distribution_path,
    load_distributions,
    select_distribution,
)
from distcheck_api.logutil import setup_logging
from distcheck_api.merkle import MerkleError, MerkleTree, entry_leaf, verify_proof
from distcheck_api.models import DistributorInfo
from distcheck_api.report import verify_distribution
from distcheck_api.settings import settings

app = typer.Typer(add_completion=False, no_args_is_help=True)


def _load_or_exit(path: pathlib.Path):
    if not path.exists():
        print(f"[red]No distribution file at {escape(str(path))}[/red]")
        raise typer.Exit(code=1)
    try:
        return load_distributions(path)
    except ValueError as e:
        print(f"[red]Could not read {escape(str(path))}: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)


def _select_or_exit(path: pathlib.Path, dist_id: int) -> DistributorInfo:
    infos = _load_or_exit(path)
    info = select_distribution(infos, dist_id)
    if info is None:
        print(f"[red]Distro {dist_id} doesn't exist[/red]")
        raise typer.Exit(code=1)
    return info


@app.command()
def verify(
    token: str = typer.Option(
        ..., "--token", "-t", help="Token the distribution is for (kite|op)"
    ),
    network: str = typer.Option(
        ...,
        "--network",
        "-n",
        help="Network the distribution was published on (optimism|optimism-sepolia)",
    ),
    dist_id: int = typer.Option(
        ..., "--id", "-i", help="Distribution id on the contract (1-based)"
    ),
    data_dir: str = typer.Option(
        settings.data_dir, help="Directory holding <network>/<token>.json"
    ),
):
    """Check every proof of one published distribution and rebuild its root."""
    setup_logging(settings.log_level)
    path = distribution_path(data_dir, network, token)
    infos = _load_or_exit(path)

    for i, info in enumerate(infos, start=1):
        print(escape(f"[CONTRACT INDEX {i}] Distro: {info.description} | Root {info.merkle_root}"))
    print("\n===============\n")

    info = select_distribution(infos, dist_id)
    if info is None:
        print(f"Distro {dist_id} doesn't exist")
        return
    if info.is_empty:
        print(f"Distro {dist_id} is empty")
        return

    print(f"Verifying distro {dist_id} out of {len(infos)} on {escape(network)}")
    print(f"Description: {escape(info.description)}")
    total = info.token_total
    print(f"Amount: {total / 1e18} | {total} | {hex(total)}")

    try:
        dist = info.to_distribution()
    except MerkleError as e:
        print(f"[red]Malformed distribution: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)
    if not dist.entries:
        print("No recipients; nothing to verify")
        return

    print(f"Check distribution with {len(dist.entries)} recipients")
    report = verify_distribution(dist)
    for account in report.failed_accounts:
        print(f"[yellow]Verification for {account} failed[/yellow]")
    if report.proofs_valid:
        print("[green]  Done![/green]")
    else:
        print(
            f"[red]  Failed validation for {len(report.failed_accounts)} "
            "of the proofs[/red]"
        )

    print(f"Reconstructed merkle root {report.rebuilt_root}")
    print(f"Root matches the one read from the JSON? {report.root_matches}")
    if not report.valid:
        raise typer.Exit(code=1)


@app.command()
def root(
    path: str,
    dist_id: int = typer.Option(1, "--id", "-i", help="Distribution id in the file"),
):
    """Rebuild and print the Merkle root of one distribution in a file."""
    info = _select_or_exit(pathlib.Path(path), dist_id)
    if not info.recipients:
        print("[yellow]No recipients[/yellow]")
        return
    try:
        entries = info.to_distribution().entries
    except MerkleError as e:
        print(f"[red]Malformed distribution: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)
    tree = MerkleTree.from_entries(entries)
    print(
        f"Recipients: {len(entries)} ({len(tree.leaves)} distinct leaves, "
        f"depth {len(tree.layers) - 1})"
    )
    print(f"Rebuilt root {H(tree.root)}")
    print(f"Published root {info.merkle_root}")


@app.command()
def check_claim(
    path: str,
    account: str = typer.Option(..., "--account", "-a", help="Recipient address"),
    dist_id: int = typer.Option(1, "--id", "-i", help="Distribution id in the file"),
):
    """Verify one account's claim; on failure show the proof the tree expects."""
    info = _select_or_exit(pathlib.Path(path), dist_id)
    try:
        wanted = normalize_address(account)
        dist = info.to_distribution()
    except ValueError as e:
        print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)
    entry = next((e for e in dist.entries if e.account == wanted), None)
    if entry is None:
        print(f"[red]{wanted} is not a recipient of this distribution[/red]")
        raise typer.Exit(code=1)

    ok = verify_proof(entry, dist.proofs[entry.account], dist.root)
    print(f"Claim for {entry.account} (index {entry.index}): {'valid' if ok else 'INVALID'}")
    if not ok:
        tree = MerkleTree.from_entries(dist.entries)
        print("Expected proof:")
        for p in tree.proof_for(entry_leaf(entry)):
            print(f"  {H(p)}")
        print(f"Rebuilt root {H(tree.root)}")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
