"""Tests for the development database export."""

import pytest
from sqlalchemy import create_engine

from promoter.exceptions import ExportError
from promoter.models.options import SyncOptions
from promoter.services.data_exporter import DataExporter


class TestDataExporter:
    def test_default_options_export_content_in_fixed_order(self, dev_engine):
        snapshot = DataExporter(dev_engine).export_development_data(SyncOptions())

        assert list(snapshot.data) == [
            "properties",
            "blogPosts",
            "featuredNews",
            "marketReports",
            "emailTemplates",
            "emailCampaigns",
        ]
        assert snapshot.counts["properties"] == 3
        assert snapshot.counts["blogPosts"] == 2
        assert snapshot.total_records == 5

    def test_rows_are_ordered_by_primary_key(self, dev_engine):
        snapshot = DataExporter(dev_engine).export_development_data(SyncOptions())

        assert [row["id"] for row in snapshot.data["properties"]] == [1, 2, 3]
        assert snapshot.data["properties"][1]["title"] == "O'Neil Cottage"
        assert snapshot.data["properties"][1]["description"] is None

    def test_users_never_include_password_hashes(self, dev_engine):
        options = SyncOptions(
            include_properties=False,
            include_blog=False,
            include_news=False,
            include_market_reports=False,
            include_email_templates=False,
            include_users=True,
        )

        snapshot = DataExporter(dev_engine).export_development_data(options)

        users = snapshot.data["users"]
        assert len(users) == 2
        for user in users:
            assert "password" not in user
            assert set(user) == {
                "id",
                "email",
                "role",
                "profile",
                "is_active",
                "created_at",
                "updated_at",
            }

    def test_nothing_enabled_is_empty(self, dev_engine):
        options = SyncOptions(
            include_properties=False,
            include_blog=False,
            include_news=False,
            include_market_reports=False,
            include_email_templates=False,
        )

        snapshot = DataExporter(dev_engine).export_development_data(options)

        assert snapshot.data == {}
        assert snapshot.total_records == 0

    def test_missing_table_raises_export_error(self, tmp_path):
        engine = create_engine(f"sqlite:///{tmp_path / 'empty.db'}")

        with pytest.raises(ExportError, match="Failed to export development data"):
            DataExporter(engine).export_development_data(SyncOptions())

    def test_ping(self, dev_engine):
        assert DataExporter(dev_engine).ping()
