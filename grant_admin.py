#!/usr/bin/env python3
"""
Grant (or revoke) admin rights for a user in the Guild Hall SQLite database.

Admins may edit any user through the hall endpoints, delete any chat
message and read the audit log.  The flag lives in the user's
``contributor`` document as ``contributor.admin``.

Usage:
    python grant_admin.py --db ./guild_hall_api/guild_hall.db --user-id 5f0c... [--revoke]
"""

import argparse
import json
import os
import sqlite3
import sys


def main():
    ap = argparse.ArgumentParser(description="Grant Guild Hall admin rights (SQLite).")
    ap.add_argument("--db", required=True, help="Path to SQLite DB file (e.g., ./guild_hall_api/guild_hall.db)")
    ap.add_argument("--user-id", required=True, help="Id of the user to update")
    ap.add_argument("--revoke", action="store_true", help="Remove admin rights instead of granting them")
    args = ap.parse_args()

    if not os.path.exists(args.db):
        print(f"[!] DB not found: {args.db}", file=sys.stderr)
        sys.exit(1)

    conn = sqlite3.connect(args.db)
    try:
        cur = conn.cursor()
        cur.execute("SELECT contributor FROM users WHERE id = ?", (args.user_id,))
        row = cur.fetchone()
        if not row:
            print(f"[!] No user found with id: {args.user_id}", file=sys.stderr)
            sys.exit(2)

        contributor = json.loads(row[0]) if row[0] else {}
        contributor["admin"] = not args.revoke
        cur.execute(
            "UPDATE users SET contributor = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (json.dumps(contributor), args.user_id),
        )
        conn.commit()
        state = "revoked" if args.revoke else "granted"
        print(f"[+] Admin rights {state} for user: {args.user_id}")
    finally:
        conn.close()


if __name__ == "__main__":
    main()
