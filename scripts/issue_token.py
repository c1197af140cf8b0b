"""Issue a signed access token for local use.

Usage: python scripts/issue_token.py <subject> [--admin]
"""
import sys

from gradebook.core.security import create_access_token

if len(sys.argv) < 2:
    print(__doc__)
    sys.exit(1)

print(create_access_token(sys.argv[1], is_admin="--admin" in sys.argv[2:]))
