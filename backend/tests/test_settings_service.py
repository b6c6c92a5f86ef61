import unittest

from bullion import create_app
from bullion.errors import ValidationError
from bullion.extensions import db
from bullion.models import AuditLog, GlobalSetting, Tenant, User
from bullion.services import settings_service
from bullion.services.tenant_service import Identity


class SettingsServiceTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = create_app({
            "SECRET_KEY": "test",
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "SQLALCHEMY_TRACK_MODIFICATIONS": False,
            "TESTING": True,
        })
        cls.ctx = cls.app.app_context()
        cls.ctx.push()
        db.create_all()

    @classmethod
    def tearDownClass(cls):
        db.session.remove()
        db.drop_all()
        cls.ctx.pop()

    def setUp(self):
        db.session.query(AuditLog).delete()
        db.session.query(GlobalSetting).delete()
        db.session.query(User).delete()
        db.session.query(Tenant).delete()
        db.session.commit()

        self.tenant = Tenant(name="True Money Gold HQ", code="TMG")
        self.other_tenant = Tenant(name="Salem Bullion Traders", code="SLM")
        db.session.add_all([self.tenant, self.other_tenant])
        db.session.flush()

        self.admin = User(
            tenant_id=self.tenant.id,
            username="settings-admin",
            password_hash="not-a-real-hash",
            role="ADMIN",
        )
        db.session.add(self.admin)
        db.session.commit()

        self.identity = Identity(tenant_id=self.tenant.id, user_id=self.admin.id, role="ADMIN")
        self.other_identity = Identity(tenant_id=self.other_tenant.id, user_id=None, role="ADMIN")

    def test_market_rates_unset_by_default(self):
        self.assertEqual(
            settings_service.get_market_rates_paise(self.tenant.id),
            {"gold": None, "silver": None},
        )

    def test_set_market_rates_stores_rupee_text(self):
        rates = settings_service.set_market_rates(self.identity, {"gold": 7250, "silver": "94.5"})

        self.assertEqual(rates, {"gold": 725000, "silver": 9450})
        self.assertEqual(settings_service.get_setting(self.tenant.id, "goldRate"), "7250")
        self.assertEqual(settings_service.get_setting(self.tenant.id, "silverRate"), "94.50")

    def test_partial_update_keeps_other_rate(self):
        settings_service.set_market_rates(self.identity, {"gold": 7250, "silver": 94})
        rates = settings_service.set_market_rates(self.identity, {"gold": "7300.25"})
        self.assertEqual(rates, {"gold": 730025, "silver": 9400})

    def test_rates_must_be_positive(self):
        for payload in ({"gold": 0}, {"silver": -5}, {"gold": "abc"}):
            with self.assertRaises(ValidationError):
                settings_service.set_market_rates(self.identity, payload)
        self.assertEqual(db.session.query(GlobalSetting).count(), 0)

    def test_at_least_one_rate_required(self):
        with self.assertRaises(ValidationError):
            settings_service.set_market_rates(self.identity, {})

    def test_non_numeric_stored_rate_is_ignored(self):
        settings_service.set_setting(self.identity, "goldRate", "call the desk")
        self.assertIsNone(settings_service.get_market_rates_paise(self.tenant.id)["gold"])

    def test_rates_are_tenant_scoped(self):
        settings_service.set_market_rates(self.identity, {"gold": 7250})
        self.assertIsNone(settings_service.get_market_rates_paise(self.other_tenant.id)["gold"])

        settings_service.set_market_rates(self.other_identity, {"gold": 7100})
        self.assertEqual(settings_service.get_market_rates_paise(self.tenant.id)["gold"], 725000)

    def test_set_setting_upserts_and_audits(self):
        settings_service.set_setting(self.identity, "branchPrefix", "ERD")
        row = settings_service.set_setting(self.identity, "branchPrefix", "CBE")

        self.assertEqual(row.value, "CBE")
        self.assertEqual(row.updated_by_user_id, self.admin.id)
        self.assertEqual([s.key for s in settings_service.list_settings(self.tenant.id)], ["branchPrefix"])

        actions = [a.action for a in db.session.query(AuditLog).order_by(AuditLog.id)]
        self.assertEqual(actions, ["SETTING_UPDATED", "SETTING_UPDATED"])

    def test_blank_key_rejected(self):
        with self.assertRaises(ValidationError):
            settings_service.set_setting(self.identity, "  ", "x")

    def test_market_rate_update_is_audited(self):
        settings_service.set_market_rates(self.identity, {"gold": 7250})
        entry = db.session.query(AuditLog).one()
        self.assertEqual(entry.action, "MARKET_RATES_UPDATED")
        self.assertEqual(entry.module, "settings")
        self.assertEqual(entry.payload, {"goldRate": "7250"})


if __name__ == "__main__":
    unittest.main()
