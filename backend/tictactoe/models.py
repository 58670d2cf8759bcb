from datetime import datetime, timezone

from sqlalchemy.ext.hybrid import hybrid_property

from tictactoe import db


def _utcnow():
    return datetime.now(timezone.utc)


class PlayerStats(db.Model):
    __tablename__ = 'players'
    __table_args__ = (
        db.CheckConstraint(
            'wins >= 0 AND losses >= 0 AND draws >= 0',
            name='ck_players_counters_non_negative',
        ),
        db.Index('idx_leaderboard', 'wins', 'draws', 'losses', 'name'),
    )
    name = db.Column(db.String(64), primary_key=True)
    wins = db.Column(db.Integer, nullable=False, default=0)
    losses = db.Column(db.Integer, nullable=False, default=0)
    draws = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    def __init__(self, **kwargs):
        kwargs.setdefault('wins', 0)
        kwargs.setdefault('losses', 0)
        kwargs.setdefault('draws', 0)
        super(PlayerStats, self).__init__(**kwargs)

    @hybrid_property
    def games(self):
        return self.wins + self.losses + self.draws

    @hybrid_property
    def score(self):
        # 3 points per win, 1 per draw
        return 3 * self.wins + self.draws

    def to_dict(self):
        return {
            'name': self.name,
            'wins': self.wins,
            'losses': self.losses,
            'draws': self.draws,
            'games': self.games,
            'score': self.score,
        }
