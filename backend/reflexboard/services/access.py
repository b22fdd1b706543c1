"""Shared-secret gate for the admin leaderboard dump."""
import hmac


def admin_token_from_request(headers, args) -> str:
    """First non-empty credential from bearer header, admin header, query."""
    auth = str(headers.get('Authorization', '') or '')
    bearer = auth[len('Bearer '):].strip() if auth.startswith('Bearer ') else ''
    header_token = str(headers.get('X-Admin-Token', '') or '').strip()
    query_token = str(args.get('token', '') or '').strip()
    return bearer or header_token or query_token


def is_admin_authorized(secret, token) -> bool:
    # No configured secret means nobody gets in
    if not secret or not token:
        return False
    return hmac.compare_digest(token.encode('utf-8'), secret.encode('utf-8'))
