"""Display masking and stable hashing of submitter addresses."""
import hashlib
import re

UNKNOWN = 'unknown'
KEY_LENGTH = 16

_LAST_V6_GROUP = re.compile(r':[^:]+$')


def mask_ip(address):
    """Redact an address for display.

    ``203.0.113.7`` becomes ``203.0.*.*`` and ``2001:db8::1`` becomes
    ``2001:db8::*``. Anything else is shown as-is.
    """
    if not address:
        return UNKNOWN
    if ':' in address:
        return _LAST_V6_GROUP.sub(':*', address)
    parts = address.split('.')
    if len(parts) != 4:
        return address
    return f"{parts[0]}.{parts[1]}.*.*"


def derive_ip_key(address) -> str:
    """Short SHA-256 based key used to group one submitter's records."""
    source = str(address or UNKNOWN)
    return hashlib.sha256(source.encode('utf-8')).hexdigest()[:KEY_LENGTH]


def client_ip(headers, remote_addr, trust_forwarded=True) -> str:
    forwarded = headers.get('X-Forwarded-For', '') if trust_forwarded else ''
    candidate = forwarded.split(',')[0].strip() or remote_addr or ''
    if candidate.startswith('::ffff:'):
        candidate = candidate[len('::ffff:'):]
    return candidate
