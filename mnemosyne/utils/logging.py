"""Shared logging configuration."""
import os
import json
import traceback
from aws_lambda_powertools import Logger

def format_exception():
    """Format the exception being handled into a single line."""
    # Replace newlines with ' | ' for single-line output
    return traceback.format_exc().replace('\n', ' | ').strip()

class SingleLineLogger(Logger):
    """Custom logger that formats exceptions in a single line."""

    def exception(self, message, *args, **kwargs):
        """Override to format exception in a single line."""
        extra = kwargs.pop('extra', {})
        extra['exception'] = format_exception()
        kwargs['exc_info'] = False  # Prevent default multi-line formatting
        kwargs['extra'] = extra
        super().exception(message, *args, **kwargs)

logger = SingleLineLogger(
    service=os.environ.get('POWERTOOLS_SERVICE_NAME', 'mnemosyne'),
    level=os.environ.get('LOG_LEVEL', 'INFO'),
    json_serializer=json.dumps,
    use_rfc3339=True
)

logger.append_keys(
    function=os.environ.get('AWS_LAMBDA_FUNCTION_NAME'),
    version=os.environ.get('AWS_LAMBDA_FUNCTION_VERSION')
)
