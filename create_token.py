"""Print a signed access token for an existing account.

Useful for calling the API from scripts or curl without signing in::

    SECRET_KEY=... python create_token.py --id 1 --email admin@example.com --role admin --days 365

The token is signed with the ``SECRET_KEY`` the server uses, so it is
only accepted if both processes share that setting.
"""
import argparse
from typing import List, Optional

from account_api.app.core.security import create_access_token
from account_api.app.schemas.user import UserRole


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--id", type=int, required=True, help="account id")
    parser.add_argument("--email", required=True)
    parser.add_argument("--role", choices=[role.value for role in UserRole], default=UserRole.USER.value)
    parser.add_argument("--days", type=int, default=None, help="lifetime in days (default: server setting)")
    return parser


def main(argv: Optional[List[str]] = None) -> str:
    args = build_parser().parse_args(argv)
    expires = args.days * 24 * 60 * 60 if args.days is not None else None
    token = create_access_token({"id": args.id, "email": args.email, "role": args.role}, expires_delta=expires)
    print(token)
    return token


if __name__ == "__main__":
    main()
