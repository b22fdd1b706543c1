from reflexboard import db


class ScoreEntry(db.Model):
    """Row form of a score record for the SQL-backed store."""
    __tablename__ = 'score_record'
    id = db.Column(db.Integer, primary_key=True)
    nickname = db.Column(db.String(24), nullable=False)
    score = db.Column(db.Integer, nullable=False)
    played_at = db.Column(db.String(32), nullable=False, index=True)
    ip_masked = db.Column(db.String(64), nullable=True)
    ip_key = db.Column(db.String(16), nullable=True, index=True)
    ip_full = db.Column(db.String(64), nullable=True)

    @classmethod
    def from_dict(cls, record):
        return cls(
            nickname=record['nickname'],
            score=record['score'],
            played_at=record['playedAt'],
            ip_masked=record.get('ipMasked'),
            ip_key=record.get('ipKey'),
            ip_full=record.get('ipFull'),
        )

    def to_dict(self):
        return {
            'nickname': self.nickname,
            'score': self.score,
            'playedAt': self.played_at,
            'ipMasked': self.ip_masked,
            'ipKey': self.ip_key,
            'ipFull': self.ip_full,
        }
