import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def _env_flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    PORT = int(os.environ.get('PORT', '3000'))
    # Empty token disables the admin dump entirely
    ADMIN_TOKEN = os.environ.get('ADMIN_TOKEN', '')
    LEADERBOARD_LIMIT = int(os.environ.get('LEADERBOARD_LIMIT', '5'))
    # 'json' (flat file) or 'sql' (SQLAlchemy table)
    SCORE_STORE_BACKEND = os.environ.get('SCORE_STORE_BACKEND', 'json')
    SCORE_STORE_PATH = os.environ.get('SCORE_STORE_PATH') or os.path.join(BASE_DIR, 'data', 'leaderboard.json')
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///' + os.path.join(BASE_DIR, 'data', 'leaderboard.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Strict servers reject empty nicknames; permissive ones fall back to DEFAULT_NICKNAME
    REQUIRE_NICKNAME = _env_flag('REQUIRE_NICKNAME', True)
    DEFAULT_NICKNAME = os.environ.get('DEFAULT_NICKNAME', 'Player')
    TRUST_FORWARDED_FOR = _env_flag('TRUST_FORWARDED_FOR', True)
    MAX_CONTENT_LENGTH = 1_000_000
