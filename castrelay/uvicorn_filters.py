"""Custom filters for uvicorn access logging."""

import logging


class ExcludeMetricsFilter(logging.Filter):
    """
    Logging filter to exclude monitoring endpoint requests from access logs.

    Requests to paths like /metrics and /health will not appear in
    uvicorn's access logs.

    Note: uvicorn's logging config instantiates this class before the app
    is imported, so settings are only read when a record is filtered.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Determine if the log record should be logged.

        Args:
            record: The log record to evaluate.

        Returns:
            False if the request path is in excluded paths, True otherwise.
        """
        from castrelay.settings import app_settings

        message = record.getMessage()
        return not any(
            f"{path} " in message or message.endswith(path)
            for path in app_settings.LOG_EXCLUDED_PATHS
        )
