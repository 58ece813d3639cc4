"""
Output formatting for resolved actions.

Turns a ResolvedAction into what a client shows the user: the payload
preview and a ready-to-run curl command.
"""
import json
import logging
import shlex

from .models import ResolvedAction
from .schemas import FormattedOutput

logger = logging.getLogger(__name__)


def build_curl(method: str, url: str, payload: dict) -> str:
    """
    Build a curl command for a call.

    GET requests carry no body; every other method sends the payload as JSON.
    """
    method = (method or "GET").upper()
    if method == "GET":
        return f"curl {shlex.quote(url)}"
    body = json.dumps(payload or {}, ensure_ascii=False)
    return (
        f"curl -X {method} -H 'Content-Type: application/json' "
        f"-d {shlex.quote(body)} {shlex.quote(url)}"
    )


def format_output(resolved: ResolvedAction) -> FormattedOutput:
    """
    Format a resolved action for display.

    :param resolved: Completed resolution
    :return: FormattedOutput with preview, curl command and target URL
    """
    url = resolved.url or resolved.endpoint_route
    curl = build_curl(resolved.http_method, url, resolved.payload)
    logger.debug(f"Formatted output for {resolved.endpoint_route}: {curl}")
    return FormattedOutput(preview=dict(resolved.preview), curl=curl, url=url)
