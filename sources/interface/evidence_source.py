from typing import Any, Dict, Iterator, Optional, Protocol, runtime_checkable


# This is the contract each source module needs to satisfy.
# A source is a plain module, not a class: sources/<name>/<name>.py must define
# the three members below at module level.
@runtime_checkable
class EvidenceSource(Protocol):
    OPTIONS: Dict[str, Dict[str, Any]]
    """
    Declarative description of the options the source expects, keyed by option name.
    Each entry carries title, description, type, required and secret, and is shown
    by the host when a user configures a connection.
    """

    def process_source(
        self,
        options: Dict[str, Any],
        source_files: Optional[Any] = None,
        util_funcs: Optional[Any] = None,
    ) -> Iterator[Dict[str, Any]]:
        """
        Fetch every table the source supports and yield them one batch at a time.
        Args:
            options: Connection options as declared in OPTIONS (e.g. API keys).
            source_files: Files of the host's source directory. Sources that do not
                          read queries from files can ignore this parameter.
            util_funcs: Helper functions provided by the host. May be ignored.
        Returns:
            A lazy iterator of row batches. Each batch is a dict with the keys:
                - rows: list of records, every value a string, number, boolean or None
                - columnTypes: list of {name, evidenceType, typeFidelity}
                - expectedRowCount: number of rows in the batch
                - name: name of the table the batch is published as
                - content: string used by the host as a cache key
            Tables that fail to load, or that have no rows, are left out.
        """

    def test_connection(self, options: Dict[str, Any]) -> bool:
        """
        Check that the options allow the source to reach its backend.
        Returns:
            True when a minimal authenticated request succeeds, False otherwise.
            Must not raise.
        """
