"""
Script untuk generate SECRET_KEY dan ENCRYPTION_KEY AuthGate API.
Usage: python scripts/generate_keys.py [--write]
"""

import argparse
import secrets
from pathlib import Path

from cryptography.fernet import Fernet

KEY_NAMES = ("SECRET_KEY", "ENCRYPTION_KEY")


def generate_all_keys() -> dict:
    """Generate semua security key yang dibutuhkan."""
    return {
        "SECRET_KEY": secrets.token_urlsafe(64),
        "ENCRYPTION_KEY": Fernet.generate_key().decode(),
    }


def update_env_file(keys: dict, env_path: Path = Path(".env")) -> None:
    """Isi key yang kosong atau placeholder di file .env; key yang sudah terisi dibiarkan."""
    lines = env_path.read_text().splitlines(keepends=True) if env_path.exists() else []
    seen = set()
    updated_lines = []

    for line in lines:
        name = line.split("=", 1)[0].strip()
        if name in keys:
            seen.add(name)
            value = line.split("=", 1)[1].strip().strip('"') if "=" in line else ""
            if not value or value.startswith("change-me"):
                updated_lines.append(f'{name}="{keys[name]}"\n')
                print(f"Updated {name}")
                continue
        updated_lines.append(line)

    for name in KEY_NAMES:
        if name not in seen:
            updated_lines.append(f'{name}="{keys[name]}"\n')
            print(f"Added {name}")

    env_path.write_text("".join(updated_lines))
    print(f"\nUpdated {env_path}. Keep these keys secret.")


def main():
    parser = argparse.ArgumentParser(description="Generate AuthGate security keys")
    parser.add_argument("--write", action="store_true", help="Tulis key ke file .env")
    parser.add_argument("--env-file", default=".env", type=Path)
    args = parser.parse_args()

    keys = generate_all_keys()
    if args.write:
        update_env_file(keys, args.env_file)
        return

    for name, value in keys.items():
        print(f'{name}="{value}"')


if __name__ == "__main__":
    main()
