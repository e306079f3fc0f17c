"""Print a long-lived access token for a user id.

Usage:
    python create_token.py <user-id> [--days 365]
"""

import argparse

from guild_hall_api.app.core.security import create_access_token


def main() -> None:
    ap = argparse.ArgumentParser(description="Issue an access token for a Guild Hall user.")
    ap.add_argument("user_id", help="Id of the user the token is issued for")
    ap.add_argument("--days", type=int, default=365, help="Token lifetime in days")
    args = ap.parse_args()
    # срок действия в секундах
    token = create_access_token({"sub": args.user_id}, expires_delta=args.days * 24 * 60 * 60)
    print(token)


if __name__ == "__main__":
    main()
