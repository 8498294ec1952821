#!/usr/bin/env python3
"""Print an ADMIN_PASSWORD_HASH value for a password read from the terminal."""

import getpass
import sys

from mux_console.infrastructure.auth.passwords import MIN_PASSWORD_LENGTH, hash_password


def main() -> int:
    password = getpass.getpass("Enter password to hash: ")
    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long", file=sys.stderr)
        return 1

    print("\nGenerated hash:")
    print(hash_password(password))
    print("\nAdd this to your .env file as ADMIN_PASSWORD_HASH")
    return 0


if __name__ == "__main__":
    sys.exit(main())
