"""Serverless-style JSON handler exposing one shared election ledger."""

import json
import logging
import sys
import threading
from pathlib import Path
from urllib.parse import urlparse

import httpx

# Add the project root to the path so we can import ledger modules
sys.path.insert(0, str(Path(__file__).parent.parent))

# Import formats to register them
from ledger.formats import candidates as candidates_format
from ledger.formats import records as records_format
from ledger.formats import topic as topic_format
from ledger.formats import votes as votes_format

from ledger.config import (
    CANDIDATES_FILENAME,
    HTTP_TIMEOUT,
    REPORT_FILENAME,
    TOPIC_FILENAME_TEMPLATE,
    TOPIC_RECORDS_FILENAME,
    VOTES_FILENAME,
)
from ledger.election import ElectionLedger
from ledger.formats.base import LedgerFormatError
from ledger.report import render_election_report, render_topic_result_html

logger = logging.getLogger(__name__)

# The ledger is not safe for concurrent mutation; every action runs under this lock
LEDGER = ElectionLedger()
LEDGER_LOCK = threading.Lock()


class RequestError(Exception):
    """The request could not be served because of something the client sent."""
    pass


def handler(request):
    """Handle incoming ledger requests.

    Accepts POST with a JSON body ``{"action": "<name>", ...}``; the other
    keys are the action's parameters. See ACTIONS for the available names.

    Returns JSON with the action's result.
    """
    # Handle CORS preflight
    if request.method == "OPTIONS":
        return create_response(
            "",
            status=204,
            headers={
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": "POST, OPTIONS",
                "Access-Control-Allow-Headers": "Content-Type",
            },
        )

    if request.method != "POST":
        return create_response(
            {"error": "Method not allowed. Use POST."},
            status=405,
        )

    try:
        content_type = request.headers.get("content-type", "")
        if "application/json" not in content_type:
            return create_response(
                {"error": f"Unsupported content type: {content_type}"},
                status=400,
            )

        data = json.loads(request.body.decode("utf-8"))
        if not isinstance(data, dict):
            raise RequestError("Request body must be a JSON object")

        result = dispatch(LEDGER, data)
        return create_response(result)

    except (RequestError, LedgerFormatError) as e:
        return create_response(
            {"error": str(e)},
            status=400,
        )
    except json.JSONDecodeError as e:
        return create_response(
            {"error": f"Invalid JSON: {e}"},
            status=400,
        )
    except Exception as e:
        logger.exception("unhandled error serving ledger request")
        return create_response(
            {"error": f"Internal error: {e}"},
            status=500,
        )


def dispatch(ledger: ElectionLedger, data: dict) -> dict:
    """Run one action against the ledger while holding the ledger lock."""
    action = data.get("action")
    if not action:
        raise RequestError("Missing 'action' in request body")
    try:
        run = ACTIONS[action]
    except KeyError:
        raise RequestError(f"Unknown action: {action}") from None

    # Fetch remote content before taking the lock so a slow server cannot stall other requests
    if action == "import_votes_url":
        data = {**data, "content": fetch_url(_require(data, "url"))[1]}

    with LEDGER_LOCK:
        return run(ledger, data)


def _require(data: dict, key: str):
    if key not in data or data[key] is None:
        raise RequestError(f"Missing '{key}' in request body")
    return data[key]


def _require_int(data: dict, key: str) -> int:
    value = _require(data, key)
    if isinstance(value, bool):
        raise RequestError(f"'{key}' must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise RequestError(f"'{key}' must be an integer") from None


def _add_candidate(ledger, data):
    ok = ledger.add_candidate(
        _require_int(data, "id"), str(_require(data, "name")), str(data.get("department") or "")
    )
    return {"ok": ok}


def _modify_candidate(ledger, data):
    ok = ledger.modify_candidate(
        _require_int(data, "id"), str(_require(data, "name")), str(data.get("department") or "")
    )
    return {"ok": ok}


def _delete_candidate(ledger, data):
    return {"ok": ledger.delete_candidate(_require_int(data, "id"))}


def _query_candidate(ledger, data):
    candidate = ledger.query_candidate(_require_int(data, "id"))
    return {"ok": candidate is not None, "candidate": candidate.to_dict() if candidate else None}


def _list_candidates(ledger, data):
    return {"candidates": [c.to_dict() for c in ledger.get_all_candidates()]}


def _vote(ledger, data):
    cumulative = data.get("cumulative", True)
    if not isinstance(cumulative, bool):
        raise RequestError("'cumulative' must be true or false")
    if "text" in data:
        result = votes_format.tally_vote_text(ledger, str(data["text"]), cumulative)
    else:
        votes = _require(data, "votes")
        if not isinstance(votes, list):
            raise RequestError("'votes' must be a list of candidate ids")
        result = votes_format.tally_vote_text(ledger, " ".join(str(v) for v in votes), cumulative)
    return {
        "ok": result.cast > 0,
        "total": result.total,
        "invalid": result.invalid,
    }


def _cast_vote(ledger, data):
    return {"ok": ledger.cast_vote(_require_int(data, "id"))}


def _undo_vote(ledger, data):
    count = _require_int(data, "count") if "count" in data else 1
    undone = ledger.undo_last_votes(count)
    return {"ok": undone > 0, "undone": undone}


def _reset_votes(ledger, data):
    ledger.reset_votes()
    return {"ok": True}


def _find_winner(ledger, data):
    return {"winner": ledger.find_winner()}


def _report(ledger, data):
    return {
        "filename": REPORT_FILENAME,
        "report": render_election_report(
            ledger.get_all_candidates(),
            ledger.find_winner(),
            history=ledger.get_vote_history(),
        ),
    }


def _export_candidates(ledger, data):
    content = candidates_format.CandidateCsvFormat().dump(ledger.get_all_candidates())
    return {"ok": True, "filename": CANDIDATES_FILENAME, "content": content.decode("utf-8")}


def _import_candidates(ledger, data):
    content = str(_require(data, "content")).encode("utf-8")
    candidates = candidates_format.CandidateCsvFormat().parse(
        data.get("filename", CANDIDATES_FILENAME), content
    )
    added = candidates_format.apply_candidates(ledger, candidates)
    return {"ok": added > 0, "added": added, "skipped": len(candidates) - added}


def _export_votes(ledger, data):
    content = votes_format.VoteVectorFormat().dump(ledger.get_vote_history())
    return {"ok": True, "filename": VOTES_FILENAME, "content": content.decode("utf-8")}


def _import_votes_url(ledger, data):
    url = data["url"]
    votes = votes_format.VoteVectorFormat().parse(url, data["content"])
    invalid = ledger.vote(votes)
    return {"ok": True, "total": len(votes), "invalid": invalid}


def _create_topic(ledger, data):
    options = _require(data, "options")
    if not isinstance(options, list):
        raise RequestError("'options' must be a list of option texts")
    topic_id = ledger.create_topic(
        str(_require(data, "title")),
        str(data.get("description") or ""),
        [str(option) for option in options],
        _require_int(data, "votes_per_voter"),
    )
    return {"ok": topic_id is not None, "topic_id": topic_id}


def _delete_topic(ledger, data):
    return {"ok": ledger.delete_topic(_require_int(data, "topic_id"))}


def _query_topic(ledger, data):
    topic = ledger.query_topic(_require_int(data, "topic_id"))
    return {"ok": topic is not None, "topic": topic.to_dict() if topic else None}


def _list_topics(ledger, data):
    return {"topics": [topic.to_dict() for topic in ledger.get_all_topics()]}


def _cast_topic_vote(ledger, data):
    topic_id = _require_int(data, "topic_id")
    voter_id = data.get("voter_id")
    ok = ledger.cast_topic_vote(
        topic_id,
        _require_int(data, "option_id"),
        None if voter_id is None else str(voter_id),
    )
    result = {"ok": ok}
    if voter_id is not None:
        result["remaining"] = ledger.get_topic_remaining_votes(topic_id, str(voter_id))
    return result


def _remaining_votes(ledger, data):
    remaining = ledger.get_topic_remaining_votes(
        _require_int(data, "topic_id"), str(_require(data, "voter_id"))
    )
    return {"remaining": remaining}


def _undo_topic_vote(ledger, data):
    record = ledger.undo_last_topic_vote()
    return {"ok": record is not None, "record": record.to_dict() if record else None}


def _topic_result(ledger, data):
    topic = ledger.query_topic(_require_int(data, "topic_id"))
    if topic is None:
        return {"ok": False, "html": None}
    return {"ok": True, "html": render_topic_result_html(topic)}


def _export_topic(ledger, data):
    topic_id = _require_int(data, "topic_id")
    content = topic_format.export_topic(ledger, topic_id)
    if content is None:
        return {"ok": False, "content": None}
    return {
        "ok": True,
        "filename": TOPIC_FILENAME_TEMPLATE.format(topic_id=topic_id),
        "content": content.decode("utf-8"),
    }


def _import_topic(ledger, data):
    content = str(_require(data, "content")).encode("utf-8")
    topic_id = _require_int(data, "topic_id") if data.get("topic_id") is not None else None
    new_id = topic_format.import_topic(ledger, data.get("filename", "upload.csv"), content, topic_id)
    return {"ok": new_id is not None, "topic_id": new_id}


def _export_records(ledger, data):
    content = records_format.TopicRecordsCsvFormat().dump(ledger.get_topic_vote_history())
    return {"ok": True, "filename": TOPIC_RECORDS_FILENAME, "content": content.decode("utf-8")}


def _clear_all(ledger, data):
    ledger.clear_all()
    return {"ok": True}


ACTIONS = {
    "add_candidate": _add_candidate,
    "modify_candidate": _modify_candidate,
    "delete_candidate": _delete_candidate,
    "query_candidate": _query_candidate,
    "list_candidates": _list_candidates,
    "vote": _vote,
    "cast_vote": _cast_vote,
    "undo_vote": _undo_vote,
    "reset_votes": _reset_votes,
    "find_winner": _find_winner,
    "report": _report,
    "export_candidates": _export_candidates,
    "import_candidates": _import_candidates,
    "export_votes": _export_votes,
    "import_votes_url": _import_votes_url,
    "create_topic": _create_topic,
    "delete_topic": _delete_topic,
    "query_topic": _query_topic,
    "list_topics": _list_topics,
    "cast_topic_vote": _cast_topic_vote,
    "remaining_votes": _remaining_votes,
    "undo_topic_vote": _undo_topic_vote,
    "topic_result": _topic_result,
    "export_topic": _export_topic,
    "import_topic": _import_topic,
    "export_records": _export_records,
    "clear_all": _clear_all,
}


def fetch_url(url: str) -> tuple[str, bytes]:
    """Fetch content from a URL.

    Returns (source_identifier, content_bytes).
    """
    # Validate URL
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise RequestError(f"Invalid URL scheme: {parsed.scheme}")

    try:
        with httpx.Client(follow_redirects=True, timeout=HTTP_TIMEOUT) as client:
            response = client.get(url)
            response.raise_for_status()
            return url, response.content
    except httpx.HTTPStatusError as e:
        raise RequestError(f"HTTP error fetching URL: {e.response.status_code}")
    except httpx.RequestError as e:
        raise RequestError(f"Error fetching URL: {e}")


def create_response(body, status: int = 200, headers: dict = None):
    """Create a response object for Vercel."""
    response_headers = {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": "*",
    }
    if headers:
        response_headers.update(headers)

    if isinstance(body, dict):
        body = json.dumps(body)

    # Return in format expected by Vercel Python runtime
    return {
        "statusCode": status,
        "headers": response_headers,
        "body": body,
    }
