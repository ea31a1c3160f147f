import logging
import sys
from unittest.mock import patch

from libs.logging_config import LOG_FORMAT, setup_logging


def test_defaults_to_info_on_stderr():
    with patch("libs.logging_config.logging.basicConfig") as mock_config:
        setup_logging()

    mock_config.assert_called_once_with(
        level=logging.INFO, format=LOG_FORMAT, stream=sys.stderr, force=True
    )


def test_level_name_is_case_insensitive():
    with patch("libs.logging_config.logging.basicConfig") as mock_config:
        setup_logging("debug")

    assert mock_config.call_args.kwargs["level"] == "DEBUG"
