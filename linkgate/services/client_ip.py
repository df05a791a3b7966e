import ipaddress

from flask import request


def normalize_ip(raw) -> str:
    """Canonical form of a client address.

    Takes the first hop of a comma list, strips whitespace and collapses
    IPv4-mapped IPv6 (``::ffff:1.2.3.4``) to plain IPv4. Unparseable values are
    returned stripped.
    """
    if not raw:
        return ''
    ip = raw.split(',')[0].strip()
    try:
        addr = ipaddress.ip_address(ip)
    except ValueError:
        return ip
    if isinstance(addr, ipaddress.IPv6Address) and addr.ipv4_mapped is not None:
        addr = addr.ipv4_mapped
    return str(addr)


def client_ip() -> str:
    # remote_addr already reflects X-Forwarded-For when ProxyFix trusts a hop
    return normalize_ip(request.remote_addr)
