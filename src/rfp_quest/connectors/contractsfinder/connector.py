"""Contracts Finder connector.

Contracts Finder (contractsfinder.service.gov.uk) is the below-threshold
sibling of Find a Tender. It serves the same OCDS release package shape with
`links.next` pagination, but filters on publication date rather than update
date.
"""

from rfp_quest.connectors.findatender import FindATenderConnector

API_BASE_URL = "https://www.contractsfinder.service.gov.uk/Published/Notices/OCDS"


class ContractsFinderConnector(FindATenderConnector):
    """Connector for Contracts Finder OCDS search; normalization is shared with Find a Tender."""

    source_id = "contracts-finder"

    BASE_URL = API_BASE_URL
    WINDOW_PARAM = "publishedFrom"

    @property
    def endpoint(self) -> str:
        return self._base_url + "/Search"
