"""Sanitizing inbound score submissions."""
import math
import re

MAX_NICKNAME_LENGTH = 24
MAX_SCORE = 9999

_NICKNAME_DISALLOWED = re.compile(r'[^\w\-\s]')


class SubmissionError(ValueError):
    """A rejected submission. ``code`` is stable and safe to show clients."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def to_dict(self):
        return {'error': self.message, 'code': self.code}


def clean_nickname(value) -> str:
    text = '' if value is None else str(value)
    text = _NICKNAME_DISALLOWED.sub('', text.strip()).strip()
    return text[:MAX_NICKNAME_LENGTH].strip()


def parse_score(value) -> int:
    if value is None:
        raise SubmissionError('score_required', 'Score is required')
    # bool is an int subclass; true is not a score
    if isinstance(value, bool):
        raise SubmissionError('invalid_score', 'Invalid score')
    if not isinstance(value, (str, int, float)):
        raise SubmissionError('invalid_score', 'Invalid score')
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        raise SubmissionError('invalid_score', 'Invalid score')
    if not math.isfinite(number) or number < 0 or number > MAX_SCORE:
        raise SubmissionError('invalid_score', 'Invalid score')
    return int(math.floor(number))


def validate_submission(payload, require_nickname=True, default_nickname='Player') -> dict:
    """Turn an untrusted payload into a ``{nickname, score}`` candidate.

    Raises :class:`SubmissionError` when the payload cannot become a record.
    With ``require_nickname`` off, an empty nickname falls back to
    ``default_nickname`` instead of being rejected.
    """
    if not isinstance(payload, dict):
        raise SubmissionError('invalid_payload', 'Payload must be a JSON object')

    nickname = clean_nickname(payload.get('nickname'))
    if not nickname:
        if require_nickname:
            raise SubmissionError('nickname_required', 'Nickname is required')
        nickname = clean_nickname(default_nickname) or 'Player'

    return {
        'nickname': nickname,
        'score': parse_score(payload.get('score')),
    }
