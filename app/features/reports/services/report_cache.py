from typing import Any, Dict, Optional

Report = Dict[str, Any]


class ReportCache:
    """
    Process-lifetime map of URL -> completed report.

    Entries are never evicted and never expire; a key exists only once its
    report finished generating. Memory grows with the number of distinct
    URLs audited.
    """

    def __init__(self):
        self._reports: Dict[str, Report] = {}

    def get(self, url: str) -> Optional[Report]:
        return self._reports.get(url)

    def put(self, url: str, report: Report) -> None:
        # Last writer wins
        self._reports[url] = report

    def __contains__(self, url: object) -> bool:
        return url in self._reports

    def __len__(self) -> int:
        return len(self._reports)
