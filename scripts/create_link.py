#!/usr/bin/env python3
import argparse
import os
import pathlib
import sys

import requests

# Ensure project root is on PYTHONPATH when running directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from linkgate.services.qr import make_qr_png

# Usage: python scripts/create_link.py welcome.html [--png out.png]


def parse_args():
    p = argparse.ArgumentParser(description='Mint a gated link through the admin API')
    p.add_argument('landing_page', help='landing page name, e.g. welcome.html')
    p.add_argument('--base-url', default=os.environ.get('BASE_URL', 'http://localhost:8000'))
    p.add_argument('--admin-key', default=os.environ.get('ADMIN_API_KEY'), help='X-Admin-Key (env ADMIN_API_KEY)')
    p.add_argument('--png', help='also save the link as a QR PNG at this path')
    return p.parse_args()


def main():
    args = parse_args()
    if not args.admin_key:
        print('ERROR: missing --admin-key or env ADMIN_API_KEY', file=sys.stderr)
        sys.exit(1)

    r = requests.post(
        f"{args.base_url.rstrip('/')}/admin/create-link",
        headers={'X-Admin-Key': args.admin_key, 'Accept': 'application/json'},
        json={'landingPage': args.landing_page},
        timeout=30,
    )
    if r.status_code != 201:
        print('Error:', r.status_code, r.text, file=sys.stderr)
        sys.exit(1)
    link = r.json()['url']
    print('url:', link)

    if args.png:
        with open(args.png, 'wb') as f:
            f.write(make_qr_png(link))
        print('PNG saved to', args.png)


if __name__ == '__main__':
    main()
