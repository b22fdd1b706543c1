import json
from flask import Blueprint, jsonify, request, current_app
from reflexboard import socketio
from reflexboard.services.access import admin_token_from_request, is_admin_authorized
from reflexboard.services.identity import client_ip, derive_ip_key, mask_ip
from reflexboard.services.leaderboard import public_entry, public_leaderboard, recent_first
from reflexboard.services.store import StoreWriteError, get_store
from reflexboard.services.validation import SubmissionError, validate_submission


scores = Blueprint('scores', __name__)


def _limit() -> int:
    return int(current_app.config.get('LEADERBOARD_LIMIT', 5))


def current_leaderboard():
    return public_leaderboard(get_store().read_all(), _limit())


@scores.route('/leaderboard', methods=['GET'])
def get_leaderboard():
    return jsonify({'scores': current_leaderboard()})


@scores.route('/admin/leaderboard-full', methods=['GET'])
def get_full_leaderboard():
    token = admin_token_from_request(request.headers, request.args)
    if not is_admin_authorized(current_app.config.get('ADMIN_TOKEN'), token):
        current_app.logger.warning(f"[admin-denied] from={mask_ip(request.remote_addr)} token_supplied={bool(token)}")
        return jsonify({'error': 'Unauthorized'}), 401
    records = recent_first(get_store().read_all())
    current_app.logger.info(f"[admin-dump] records={len(records)}")
    return jsonify({'scores': records})


@scores.route('/score', methods=['POST'])
def submit_score():
    raw = request.get_data(cache=True)
    data = {}
    if raw.strip():
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError):
            return jsonify({'error': 'Invalid JSON', 'code': 'invalid_json'}), 400

    try:
        candidate = validate_submission(
            data,
            require_nickname=current_app.config.get('REQUIRE_NICKNAME', True),
            default_nickname=current_app.config.get('DEFAULT_NICKNAME', 'Player'),
        )
    except SubmissionError as exc:
        current_app.logger.info(f"[score-rejected] code={exc.code}")
        return jsonify(exc.to_dict()), 400

    raw_ip = client_ip(
        request.headers,
        request.remote_addr,
        trust_forwarded=current_app.config.get('TRUST_FORWARDED_FOR', True),
    )
    candidate.update({
        'ipMasked': mask_ip(raw_ip),
        'ipKey': derive_ip_key(raw_ip),
        'ipFull': raw_ip,
    })

    try:
        stored = get_store().append(candidate)
    except StoreWriteError as exc:
        current_app.logger.error(f"[score-write-failed] {exc}")
        return jsonify({'error': 'Could not save score', 'code': 'store_unavailable'}), 503

    current_app.logger.info(
        f"[score-accepted] score={stored['score']} ip={stored['ipMasked']} at={stored['playedAt']}"
    )

    # Push the refreshed board to live subscribers
    socketio.emit('leaderboard_update', {'scores': current_leaderboard()}, to='leaderboard', namespace='/ws')

    item = public_entry(stored)
    item['playedAt'] = stored['playedAt']
    return jsonify({'ok': True, 'item': item}), 201
