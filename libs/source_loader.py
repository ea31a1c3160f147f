import importlib
from types import ModuleType

from sources.interface.evidence_source import EvidenceSource


REQUIRED_MEMBERS = ("OPTIONS", "process_source", "test_connection")


def get_source_module(source_name: str) -> ModuleType:
    """
    Dynamically imports and returns the module implementing a source.

    The module is looked up at:
    - sources.{source_name}.{source_name}

    Args:
        source_name: The name of the source (e.g., "stripe")

    Returns:
        The source module, exposing OPTIONS, process_source and test_connection

    Raises:
        ValueError: If the source package does not exist
        ImportError: If the source module is missing or does not satisfy EvidenceSource

    Example:
        >>> source = get_source_module("stripe")
        >>> for batch in source.process_source({"apiKey": "sk_test_..."}):
        ...     print(batch["name"], batch["expectedRowCount"])
    """
    # Check if the source package exists
    try:
        importlib.import_module(f"sources.{source_name}")
    except ModuleNotFoundError:
        raise ValueError(
            f"Source '{source_name}' not found. "
            f"Make sure the directory 'sources/{source_name}/' exists."
        )

    module_path = f"sources.{source_name}.{source_name}"
    try:
        module = importlib.import_module(module_path)
    except ModuleNotFoundError:
        raise ImportError(
            f"Could not import '{source_name}.py' from source '{source_name}'. "
            f"Please ensure 'sources/{source_name}/{source_name}.py' exists."
        )

    if not isinstance(module, EvidenceSource):
        missing = [name for name in REQUIRED_MEMBERS if not hasattr(module, name)]
        raise ImportError(
            f"Module '{module_path}' does not implement the source interface. "
            f"Missing: {', '.join(missing)}."
        )

    return module
