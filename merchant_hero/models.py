# ==============================================================================
# merchant_hero/models.py
# ------------------------------------------------------------------------------
# Defines the database schema using SQLAlchemy ORM models.
# Facts, locations and agent assignments live in the storage collaborator;
# this database only keeps a log of the uploads this service sent there.
# ==============================================================================

from datetime import datetime
from merchant_hero import db


class UploadRecord(db.Model):
    """
    One row per upload the storage collaborator accepted.
    """
    __tablename__ = 'upload_record'
    id = db.Column(db.Integer, primary_key=True)
    filename = db.Column(db.String(256), nullable=False)
    month = db.Column(db.String(10), index=True, nullable=False)  # YYYY-MM-01
    row_count = db.Column(db.Integer, default=0)
    total_volume = db.Column(db.Float, default=0)
    total_agent_net = db.Column(db.Float, default=0)
    upload_timestamp = db.Column(db.DateTime, index=True, default=datetime.utcnow)

    def __repr__(self):
        return f'<UploadRecord {self.id}: {self.filename} ({self.month})>'

    @classmethod
    def from_prepared(cls, prepared):
        return cls(
            filename=prepared.filename,
            month=prepared.month,
            row_count=prepared.row_count,
            total_volume=float(sum(prepared.volumes)),
            total_agent_net=float(sum(prepared.agent_nets)),
        )

    def to_dict(self):
        return {
            'id': self.id,
            'filename': self.filename,
            'month': self.month,
            'rowCount': self.row_count,
            'totalVolume': self.total_volume,
            'totalAgentNet': self.total_agent_net,
            'uploadedAt': self.upload_timestamp.isoformat() if self.upload_timestamp else None,
        }
