"""Unit tests for ConnectorRegistry."""

import pytest

from rfp_quest.connectors.registry import ConnectorRegistry


class TestConnectorRegistry:
    """Tests for ConnectorRegistry."""

    def test_get_find_a_tender(self) -> None:
        """Registry returns Find a Tender connector for 'find-a-tender'."""
        connector = ConnectorRegistry.get("find-a-tender")
        assert connector.source_id == "find-a-tender"

    def test_get_case_insensitive(self) -> None:
        """Registry is case-insensitive."""
        c1 = ConnectorRegistry.get("Find-A-Tender")
        c2 = ConnectorRegistry.get("find-a-tender")
        assert c1.source_id == c2.source_id

    def test_unknown_source_raises(self) -> None:
        """Unknown source raises ValueError."""
        with pytest.raises(ValueError, match="Unknown source: ted"):
            ConnectorRegistry.get("ted")

    def test_available_sources(self) -> None:
        sources = ConnectorRegistry.available_sources()
        assert "find-a-tender" in sources
        assert "contracts-finder" in sources

    def test_get_contracts_finder(self) -> None:
        connector = ConnectorRegistry.get("contracts-finder")
        assert connector.source_id == "contracts-finder"
        assert connector.endpoint.endswith("/Published/Notices/OCDS/Search")

    def test_kwargs_passed_to_connector(self) -> None:
        connector = ConnectorRegistry.get("find-a-tender", base_url="http://localhost/api")
        assert connector.endpoint == "http://localhost/api/ocdsReleasePackages"
