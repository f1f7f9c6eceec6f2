#!/usr/bin/env python3
"""Move provider API keys from ``.env`` into the OS keychain.

Only the names in ``CREDENTIAL_KEYS`` are touched. With ``--clean`` the
stored lines are dropped from ``.env`` afterwards; comments and all
other settings stay as they were.

Usage:
    python -m scripts.store_credentials
    python -m scripts.store_credentials --clean
    python -m scripts.store_credentials --env-file /path/to/.env
"""

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import dotenv_values

from services.credential_manager import CREDENTIAL_KEYS, get_credential, set_credential


@dataclass
class StoreReport:
    stored: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    absent: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def in_keychain(self) -> list[str]:
        """Keys whose ``.env`` value is now also in the keychain."""
        return self.stored + self.unchanged


def store_credentials(env_path: Path) -> StoreReport:
    """Copy every non-empty credential in ``env_path`` to the keychain.

    Raises:
        FileNotFoundError: If ``env_path`` does not exist.
    """
    if not env_path.exists():
        raise FileNotFoundError(env_path)

    values = dotenv_values(env_path)
    report = StoreReport()
    for key in sorted(CREDENTIAL_KEYS):
        value = values.get(key)
        if not value:
            report.absent.append(key)
        elif get_credential(key) == value:
            report.unchanged.append(key)
        elif set_credential(key, value):
            report.stored.append(key)
        else:
            report.failed.append(key)
    return report


def remove_from_env(env_path: Path, keys: list[str]) -> int:
    """Drop ``KEY=...`` lines for ``keys`` from ``env_path``. Returns lines removed."""
    wanted = set(keys)
    kept = []
    removed = 0
    for line in env_path.read_text().splitlines(keepends=True):
        name = line.split("=", 1)[0].strip() if "=" in line else None
        if name in wanted:
            removed += 1
            continue
        kept.append(line)
    env_path.write_text("".join(kept))
    return removed


def print_report(report: StoreReport) -> None:
    sections = [
        ("Stored in keychain", "+", report.stored),
        ("Already in keychain", "=", report.unchanged),
        ("Not set in .env", "-", report.absent),
        ("Failed", "!", report.failed),
    ]
    for title, marker, keys in sections:
        if not keys:
            continue
        print(f"\n  {title} ({len(keys)}):")
        for key in keys:
            print(f"    {marker} {key}")
    print()


def main():
    parser = argparse.ArgumentParser(description="Store provider API keys in the OS keychain")
    parser.add_argument(
        "--clean",
        action="store_true",
        help="Remove stored keys from .env afterwards",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=Path(__file__).parent.parent / ".env",
        help="Path to .env file (default: backend/.env)",
    )
    args = parser.parse_args()

    try:
        report = store_credentials(args.env_file)
    except FileNotFoundError:
        print(f"No .env file found at {args.env_file}")
        sys.exit(1)

    print_report(report)
    if args.clean:
        if report.in_keychain:
            removed = remove_from_env(args.env_file, report.in_keychain)
            print(f"Removed {removed} line(s) from {args.env_file}")
        else:
            print("Nothing to remove from .env.")
    sys.exit(1 if report.failed else 0)


if __name__ == "__main__":
    main()
