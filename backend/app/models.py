from app import db


class ScoreEntry(db.Model):
    """One leaderboard record. Rows are appended once and never changed."""
    __tablename__ = 'scores'
    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(32), unique=True, nullable=False, index=True)
    name = db.Column(db.String(20), nullable=False)
    waves = db.Column(db.Integer, nullable=False, index=True)
    kills = db.Column(db.Integer, nullable=False, default=0)
    towers_built = db.Column(db.Integer, nullable=False, default=0)
    towers_lost = db.Column(db.Integer, nullable=False, default=0)
    time_s = db.Column(db.Integer, nullable=False, default=0)
    # Server-assigned at write time
    date = db.Column(db.String(10), nullable=False)
    timestamp = db.Column(db.BigInteger, nullable=False)

    def to_dict(self):
        return {
            'key': self.key,
            'name': self.name,
            'waves': self.waves,
            'kills': self.kills,
            'towers_built': self.towers_built,
            'towers_lost': self.towers_lost,
            'time_s': self.time_s,
            'date': self.date,
            'timestamp': self.timestamp,
        }

    def __repr__(self):
        return f"<ScoreEntry(name='{self.name}', waves={self.waves}, kills={self.kills})>"
