#!/usr/bin/env python3
"""
Generate a JWT_SECRET and store it in .env.

The API refuses to start without JWT_SECRET, so run this once per
environment: ``python generate_secret_key.py`` (add ``--yes`` to skip the
confirmation prompt).
"""
import argparse
import base64
import os
import re
import secrets

ENV_FILE = ".env"
ENV_EXAMPLE = ".env.example"


def generate_secret_key(length=32):
    """Generate a secure random hex key of ``length`` bytes"""
    return secrets.token_hex(length)


def generate_base64_secret_key(length=32):
    """Generate a URL-safe base64 encoded secret key"""
    return base64.urlsafe_b64encode(secrets.token_bytes(length)).decode('utf-8')


def update_env_file(secret_key, env_file=ENV_FILE):
    """Set JWT_SECRET in ``env_file``, creating it from .env.example when missing"""
    if os.path.exists(env_file):
        with open(env_file, "r") as file:
            content = file.read()
    elif os.path.exists(ENV_EXAMPLE):
        print(f"Creating {env_file} from {ENV_EXAMPLE}")
        with open(ENV_EXAMPLE, "r") as example_file:
            content = example_file.read()
    else:
        content = ""

    line = f"JWT_SECRET={secret_key}"
    if re.search(r"^JWT_SECRET=.*$", content, flags=re.MULTILINE):
        content = re.sub(r"^JWT_SECRET=.*$", line, content, flags=re.MULTILINE)
        print(f"Updated JWT_SECRET in {env_file}")
    else:
        content = content.rstrip("\n") + ("\n" if content else "") + line + "\n"
        print(f"Appended JWT_SECRET to {env_file}")

    with open(env_file, "w") as file:
        file.write(content)
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate a JWT_SECRET for the TuriApp API")
    parser.add_argument("--length", type=int, default=32, help="key length in bytes")
    parser.add_argument("--base64", action="store_true", help="use URL-safe base64 instead of hex")
    parser.add_argument("--yes", action="store_true", help="write .env without asking")
    parser.add_argument("--show", action="store_true", help="only print the key")
    args = parser.parse_args()

    key = generate_base64_secret_key(args.length) if args.base64 else generate_secret_key(args.length)

    print("\n=== JWT Secret Generator ===")
    print(f"\nGenerated key: {key}")

    if args.show:
        exit(0)

    if not args.yes:
        confirm = input(f"\nUpdate {ENV_FILE} with this key? (y/n): ")
        if confirm.lower() not in ["y", "yes"]:
            print("\nKey generated but not saved. Copy it into .env as JWT_SECRET if needed.")
            exit(0)

    update_env_file(key)
    print("\nDone!")
