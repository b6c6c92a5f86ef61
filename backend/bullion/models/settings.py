from __future__ import annotations

from ..extensions import db
from bullion.time_utils import to_utc_z


class GlobalSetting(db.Model):
    """
    Key-value settings at the tenant level (goldRate, silverRate, ...).

    Values are strings; callers parse them. Last write wins, no versioning.
    """
    __tablename__ = "global_settings"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "key", name="uq_global_settings_tenant_key"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)

    key = db.Column(db.String(128), nullable=False)
    value = db.Column(db.Text, nullable=True)

    updated_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self):
        return {
            "key": self.key,
            "value": self.value,
            "updatedBy": self.updated_by_user_id,
            "updatedAt": to_utc_z(self.updated_at),
        }
